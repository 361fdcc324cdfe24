"""Data models for the editable fragment set.

Three of the nine fragments can hold either free text or a structured
mapping. That choice is resolved once, when the value enters the model,
into one of two tagged variants; everything downstream dispatches on the
variant instead of re-inspecting raw values.
"""

import json
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..errors import ParseError

TEXT_FIELDS = (
    "current_prompt",
    "game_log",
    "module_snippet",
    "dm_private",
    "system_prompt",
    "other",
)
STRUCTURED_FIELDS = ("char_status", "character_cards", "items")

# Declaration order, also used for flattening
FIELD_NAMES = (
    "current_prompt",
    "game_log",
    "module_snippet",
    "dm_private",
    "char_status",
    "system_prompt",
    "character_cards",
    "items",
    "other",
)


class TextFragment(BaseModel):
    """Free-text variant, rendered verbatim."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str = ""

    def is_blank(self) -> bool:
        return not self.text.strip()

    def render(self) -> str:
        return self.text

    def to_json_value(self) -> str:
        return self.text


class StructuredFragment(BaseModel):
    """Structured-mapping variant, rendered as pretty-printed JSON."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["structured"] = "structured"
    data: dict[str, Any] = Field(default_factory=dict)
    source: str | None = Field(default=None, description="Editor text the mapping was parsed from")

    def is_blank(self) -> bool:
        return not self.data

    def render(self) -> str:
        return json.dumps(self.data, indent=2, ensure_ascii=False)

    def to_json_value(self) -> str | dict[str, Any]:
        if self.source is not None:
            return self.source
        return self.data

    def to_text(self) -> str:
        if self.source is not None:
            return self.source
        return json.dumps(self.data, ensure_ascii=False, separators=(",", ":"))


Fragment = TextFragment | StructuredFragment


def parse_fragment(value: Any) -> Fragment:
    """Resolve a raw editor or storage value into a fragment variant.

    Args:
        value: A fragment, a mapping, a string, or None

    Returns:
        StructuredFragment for mappings and strings holding a JSON object,
        TextFragment for everything else (malformed JSON stays text)
    """
    if isinstance(value, (TextFragment, StructuredFragment)):
        return value
    if value is None:
        return StructuredFragment()
    if isinstance(value, dict):
        return StructuredFragment(data=value)
    if isinstance(value, str):
        if value.strip():
            try:
                decoded = json.loads(value)
            except ValueError:
                return TextFragment(text=value)
            if isinstance(decoded, dict):
                return StructuredFragment(data=decoded, source=value)
        return TextFragment(text=value)
    return TextFragment(text=json.dumps(value, ensure_ascii=False))


class FragmentSet(BaseModel):
    """The nine named content pieces a DM edits to build one exchange.

    Instances are immutable; edits produce updated copies via with_field.
    Only current_prompt is required, and only when composing a prompt.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    current_prompt: str = Field(default="", description="The question to ask the model")
    game_log: str = Field(default="", description="What has happened at the table so far")
    module_snippet: str = Field(default="", description="Relevant adventure module excerpt")
    dm_private: str = Field(default="", description="Notes only the DM knows")
    char_status: Fragment = Field(default_factory=StructuredFragment, description="HP, conditions, positions")
    system_prompt: str = Field(default="", description="Behavior instructions for the model")
    character_cards: Fragment = Field(default_factory=StructuredFragment, description="Full PC/NPC sheets")
    items: Fragment = Field(default_factory=StructuredFragment, description="Inventory and equipment")
    other: str = Field(default="", description="Miscellaneous notes")

    @field_validator(*TEXT_FIELDS, mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> str:
        if v is None:
            return ""
        if isinstance(v, str):
            return v
        return json.dumps(v, ensure_ascii=False)

    @field_validator(*STRUCTURED_FIELDS, mode="before")
    @classmethod
    def _coerce_fragment(cls, v: Any) -> Fragment:
        return parse_fragment(v)

    @field_serializer(*STRUCTURED_FIELDS)
    def _serialize_fragment(self, value: Fragment) -> str | dict[str, Any]:
        return value.to_json_value()

    @classmethod
    def empty(cls) -> "FragmentSet":
        """All text fields empty, all structured fields empty mappings."""
        return cls()

    @classmethod
    def from_json(cls, payload: str) -> "FragmentSet":
        """Decode a JSON snapshot.

        Raises:
            ParseError: If the payload is not a JSON object or fails validation
        """
        try:
            decoded = json.loads(payload)
        except (TypeError, ValueError, RecursionError) as e:
            raise ParseError(f"snapshot is not valid JSON: {e}") from e

        if not isinstance(decoded, dict):
            raise ParseError(f"snapshot must be a JSON object, got {type(decoded).__name__}")

        try:
            return cls.model_validate(decoded)
        except (PydanticValidationError, RecursionError) as e:
            raise ParseError(f"snapshot failed validation: {e}") from e

    def to_json(self) -> str:
        """Encode as the compact JSON snapshot stored with each exchange."""
        return json.dumps(self.model_dump(mode="json"), ensure_ascii=False)

    def with_field(self, name: str, value: Any) -> "FragmentSet":
        """Return a copy with one field replaced.

        Raises:
            KeyError: If name is not a fragment field
        """
        if name not in FIELD_NAMES:
            raise KeyError(f"Unknown fragment field: {name}")
        data = dict(self)
        data[name] = value
        return type(self).model_validate(data)

    def fragment(self, name: str) -> Fragment:
        """Get any field as a fragment variant (text fields become TextFragment)."""
        if name not in FIELD_NAMES:
            raise KeyError(f"Unknown fragment field: {name}")
        value = getattr(self, name)
        if isinstance(value, str):
            return TextFragment(text=value)
        return value
