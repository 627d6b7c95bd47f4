"""Key-token extraction: the procedure words and numbers a readback is graded on."""

from __future__ import annotations

from typing import FrozenSet

from .base import KeyTokenSet
from .normalizer import extract_numbers, tokenize

# Closed vocabulary. Callsigns and filler never count towards a grade.
KEY_VOCABULARY: FrozenSet[str] = frozenset({
    # instructions
    "descend", "climb", "maintain", "turn", "heading", "speed", "contact",
    "cleared", "hold", "short", "line", "wait", "taxi", "takeoff", "expect",
    # directions
    "left", "right",
    # facilities and procedures
    "tower", "approach", "ground", "departure", "runway",
    "ils", "rnav", "gps", "localizer",
    # altitude terms
    "unrestricted", "altitude", "feet", "flight", "level",
})


def extract_key_tokens(text: str) -> KeyTokenSet:
    """
    Extract vocabulary words and numeric tokens from a transmission.

    Words come from the normalized text; numbers come from the raw text so
    that decimals like ``119.5`` survive intact. Order and duplicates are
    preserved in both lists.
    """
    tokens = tuple(word for word in tokenize(text) if word in KEY_VOCABULARY)
    numbers = tuple(extract_numbers(text))
    return KeyTokenSet(tokens=tokens, numbers=numbers)
