"""Deterministic prompt assembly.

Turns a fragment set into one system message and one sectioned user body.
Section content is not escaped: free text containing a header line such as
"=== GAME LOG ===" will read like a real section boundary to the model.
"""

from ..errors import ValidationError
from ..fragments import FragmentSet
from .models import ComposedPrompt

# Fixed section order; current_prompt is always emitted last
SECTION_ORDER: tuple[tuple[str, str], ...] = (
    ("character_cards", "CHARACTER CARDS"),
    ("char_status", "CHARACTER STATUS"),
    ("game_log", "GAME LOG"),
    ("module_snippet", "MODULE SNIPPET"),
    ("items", "ITEMS"),
    ("dm_private", "DM PRIVATE"),
    ("other", "OTHER"),
)
CURRENT_PROMPT_TITLE = "CURRENT PROMPT"


def section_header(title: str) -> str:
    return f"=== {title} ==="


class PromptComposer:
    """Serializes a fragment set into role-tagged prompt text.

    Hidden design decisions:
    - Section order and header titles
    - How structured fragments are rendered
    - Separation of the system prompt from the user body
    """

    def sections(self, fragment_set: FragmentSet) -> list[tuple[str, str]]:
        """Get the ordered (title, body) pairs the user message is built from.

        Blank text fields and empty mappings are skipped. The current prompt
        section is always included, even when blank.
        """
        sections = []
        for field_name, title in SECTION_ORDER:
            fragment = fragment_set.fragment(field_name)
            if fragment.is_blank():
                continue
            sections.append((title, fragment.render()))
        sections.append((CURRENT_PROMPT_TITLE, fragment_set.current_prompt))
        return sections

    def assemble(self, fragment_set: FragmentSet) -> ComposedPrompt:
        """Assemble a fragment set into a composed prompt.

        Args:
            fragment_set: The fragments to serialize

        Returns:
            ComposedPrompt with the optional system message and the user body

        Raises:
            ValidationError: If current_prompt is blank
        """
        if not fragment_set.current_prompt.strip():
            raise ValidationError("current_prompt must not be blank", field="current_prompt")

        lines: list[str] = []
        sections = self.sections(fragment_set)
        for title, body in sections[:-1]:
            lines.append(section_header(title))
            lines.append(body)
            lines.append("")

        title, body = sections[-1]
        lines.append(section_header(title))
        lines.append(body)

        system_message = None
        if fragment_set.system_prompt.strip():
            system_message = fragment_set.system_prompt

        return ComposedPrompt(system_message=system_message, user_message="\n".join(lines))


_default_composer = PromptComposer()


def assemble(fragment_set: FragmentSet) -> ComposedPrompt:
    """Assemble with the default composer."""
    return _default_composer.assemble(fragment_set)
