from __future__ import annotations

from typing import List
import re

_DISALLOWED_RE = re.compile(r"[^a-z0-9\s.]")
_WHITESPACE_RE = re.compile(r"\s+")
# ASCII digits only; decimals such as 119.5 stay one token
_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?", re.ASCII)


def normalize_text(text: str) -> str:
    """Lower-case, blank out anything but letters/digits/whitespace/periods, collapse spaces."""
    if not text:
        return ""
    text = text.lower()
    text = _DISALLOWED_RE.sub(" ", text)
    text = _WHITESPACE_RE.sub(" ", text)
    return text.strip()


def tokenize(text: str) -> List[str]:
    """Split normalized text into words."""
    normalized = normalize_text(text)
    return normalized.split(" ") if normalized else []


def extract_numbers(text: str) -> List[str]:
    """All integer/decimal substrings of the raw text, left to right, duplicates kept."""
    if not text:
        return []
    return _NUMBER_RE.findall(text)
