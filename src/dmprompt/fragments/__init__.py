"""Fragment data model for dmprompt.

Defines the editable fragment set and the text-or-structured variant.
"""

from .models import (
    FIELD_NAMES,
    STRUCTURED_FIELDS,
    TEXT_FIELDS,
    Fragment,
    FragmentSet,
    StructuredFragment,
    TextFragment,
    parse_fragment,
)

__all__ = [
    "FIELD_NAMES",
    "STRUCTURED_FIELDS",
    "TEXT_FIELDS",
    "Fragment",
    "FragmentSet",
    "StructuredFragment",
    "TextFragment",
    "parse_fragment",
]
