import math

from ..config import CHARS_PER_TOKEN
from ..fragments import FIELD_NAMES, FragmentSet, StructuredFragment


def flatten(fragment_set: FragmentSet) -> str:
    """Join every field's text with single spaces.

    Structured fragments contribute their editor text when they came from
    one, otherwise their compact JSON form.
    """
    parts = []
    for name in FIELD_NAMES:
        fragment = fragment_set.fragment(name)
        if isinstance(fragment, StructuredFragment):
            parts.append(fragment.to_text())
        else:
            parts.append(fragment.text)
    return " ".join(parts)


def estimate_tokens(fragment_set: FragmentSet) -> int:
    """Rough token count: one token per four characters, rounded up."""
    return math.ceil(len(flatten(fragment_set)) / CHARS_PER_TOKEN)
