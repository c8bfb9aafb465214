"""
Version comparison for dotted host/add-on version strings.

Handles mixed numeric/alpha segments so that pre-release builds sort below
the release they lead up to:

    compare_versions("91.0b1", "91.0")   -> -1
    compare_versions("91.0.1", "91.1")   -> -1
    compare_versions("115.0", "115")     ->  0
"""

import re
from typing import List

_NON_NUMERIC = re.compile(r"[^0-9.]+")
_NON_WORD = re.compile(r"[\W_]+", re.ASCII)
# Trailing ".0" runs in front of a pre-release marker ("1.0.0b" == "1b")
_TRAILING_MARKER = re.compile(r"(?:\.0+)*(\.-[0-9]+)(\.[0-9]+)?\.*$")


def _marker_segment(match: "re.Match") -> str:
    """Replace a run of non-numeric characters with a negative segment."""
    run = _NON_WORD.sub("", match.group(0), count=1)
    if not run:
        return ".."
    return f".{ord(run.lower()[0]) - 65536}."


def _to_int(segment: str) -> int:
    try:
        return int(segment)
    except ValueError:
        return 0


def _prepare(version) -> List[int]:
    text = "" if version is None else str(version)
    text = _NON_NUMERIC.sub(_marker_segment, text)
    text = _TRAILING_MARKER.sub(lambda m: m.group(1) + (m.group(2) or ""), text)
    return [_to_int(segment) for segment in text.split(".")]


def compare_versions(a, b) -> int:
    """
    Compare two version strings.

    Returns:
        1 if a > b, -1 if a < b, 0 if equal. Missing segments count as 0,
        so "91" == "91.0" and the empty string equals "0".
    """
    left = _prepare(a)
    right = _prepare(b)
    for i in range(max(len(left), len(right))):
        x = left[i] if i < len(left) else 0
        y = right[i] if i < len(right) else 0
        if x > y:
            return 1
        if x < y:
            return -1
    return 0


def is_at_least(version, reference) -> bool:
    """True when version is the same as or newer than reference."""
    return compare_versions(version, reference) >= 0
