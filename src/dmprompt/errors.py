"""Error taxonomy shared by every dmprompt module."""


class DMPromptError(Exception):
    """Base class for dmprompt errors."""

    def is_retryable(self) -> bool:
        """Override in subclasses to control retry behavior."""
        return False


class ValidationError(DMPromptError):
    """A required fragment is blank at submission time."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class TransportError(DMPromptError):
    """The remote LLM call failed or returned an unusable body."""

    def __init__(self, message: str, status_code: int | None = None):
        msg = f"Transport error: {message}"
        if status_code is not None:
            msg += f" (status: {status_code})"
        super().__init__(msg)
        self.status_code = status_code

    def is_retryable(self) -> bool:
        return self.status_code is None or self.status_code == 429 or self.status_code >= 500


class ParseError(DMPromptError):
    """A persisted fragment snapshot could not be decoded."""

    def __init__(self, message: str):
        super().__init__(f"Parse error: {message}")


class StorageError(DMPromptError):
    """The persistence engine failed."""

    def __init__(self, message: str, backend: str | None = None):
        msg = f"Storage error: {message}"
        if backend:
            msg += f" (backend: {backend})"
        super().__init__(msg)
        self.backend = backend
