"""Text heuristics.

Deterministic checks for telling real job text from filler:
- placeholder / keyboard-mash detection (`is_gibberish`)
- letter counting (`count_letters`)
- word-level repetition (`unique_word_ratio`)

Every function here is total: any string (including "") or None gives an answer,
never an exception.
"""

from __future__ import annotations

import re
from typing import List, Optional

# 5+ of the same character in a row ("aaaaa", "11111", "-----").
REPEATED_CHAR_RE = re.compile(r"(.)\1{4,}")

PLACEHOLDER_PATTERNS = [
    re.compile(
        r"(test|asd|qwe|zxc|abc|xyz|lorem|ipsum|placeholder|sample|example|demo|temp|tmp)[0-9]*",
        flags=re.IGNORECASE,
    ),
    re.compile(r"[0-9]+"),  # only digits
    re.compile(r"[^a-zA-Z]+"),  # no letters at all
    re.compile(r"[.,;:\-_!?]+"),  # only punctuation
]

KEYBOARD_ROWS = ("qwertyuiop", "asdfghjkl", "zxcvbnm", "1234567890")
KEYBOARD_WINDOW = 5

_KEYBOARD_RUNS = tuple(
    row[i : i + KEYBOARD_WINDOW] for row in KEYBOARD_ROWS for i in range(len(row) - KEYBOARD_WINDOW + 1)
)

_LETTER_RE = re.compile(r"[a-zA-Z]")
_WHITESPACE_RE = re.compile(r"\s+")


def is_gibberish(text: Optional[str]) -> bool:
    """Return True for placeholder, filler or keyboard-mash text."""
    trimmed = (text or "").strip()

    if REPEATED_CHAR_RE.search(trimmed):
        return True

    if any(pat.fullmatch(trimmed) for pat in PLACEHOLDER_PATTERNS):
        return True

    lower = trimmed.lower()
    return any(run in lower for run in _KEYBOARD_RUNS)


def count_letters(text: Optional[str]) -> int:
    """Count ASCII letters."""
    return len(_LETTER_RE.findall(text or ""))


def word_tokens(text: Optional[str]) -> List[str]:
    """Lower-cased whitespace split. Leading/trailing whitespace yields empty tokens."""
    return _WHITESPACE_RE.split((text or "").lower())


def unique_word_ratio(text: Optional[str]) -> float:
    words = word_tokens(text)
    return len(set(words)) / len(words)
