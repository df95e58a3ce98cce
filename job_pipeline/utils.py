"""Utility helpers shared across the pipeline."""

from __future__ import annotations

import hashlib
import math
import re
from typing import Any, Iterable, List

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def stable_id(*parts: str) -> str:
    """Create a deterministic identifier from a set of string parts."""
    joined = "|".join(p.strip() for p in parts if p is not None)
    return hashlib.sha256(joined.encode("utf-8")).hexdigest()


def uniq_preserve_order(items: Iterable[str]) -> List[str]:
    """Deduplicate case-insensitively while preserving first-seen order and casing."""
    seen = set()
    out: List[str] = []
    for it in items:
        if not it:
            continue
        key = it.strip().lower()
        if key in seen:
            continue
        seen.add(key)
        out.append(it)
    return out


def parse_int(value: Any, default: int = 0) -> int:
    """Parse the leading integer of a value, returning `default` when there is none.

    Mirrors the lenient behaviour HR forms rely on: "12" -> 12, "12k" -> 12,
    "abc" -> default. Numbers are truncated towards zero.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return default
        return int(value)
    if isinstance(value, str):
        m = _LEADING_INT_RE.match(value)
        if m:
            return int(m.group(1))
    return default


def parse_float(value: Any, default: float = 0.0) -> float:
    """Parse a float from a number or numeric string, returning `default` on failure."""
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else default
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return default
        return parsed if math.isfinite(parsed) else default
    return default


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (the behaviour UIs display)."""
    return int(math.floor(value + 0.5))
