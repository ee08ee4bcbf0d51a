"""
PHP shorthand byte values ("512M", "1G", "128k").
"""

import re
from typing import Optional

_NUMERIC_PREFIX = re.compile(r"^\s*([+-]?\d+)")

# Unit levels from the largest down; each level multiplies by 1024 once and
# a suffix applies its own level and every level below it.
_UNIT_LEVELS = ("g", "m", "k")


def return_bytes(value: Optional[str]) -> int:
    """
    Convert a memory limit string to a byte count.

    "512M" -> 536870912, "1G" -> 1073741824, "64" -> 64, "" -> 0.
    The numeric prefix is taken as an integer (0 if there is none), so "-1"
    comes back as -1. Callers decide what a negative limit means.
    """
    if value is None:
        return 0
    val = value.strip()
    if not val:
        return 0

    match = _NUMERIC_PREFIX.match(val)
    number = int(match.group(1)) if match else 0

    last = val[-1].lower()
    if last in _UNIT_LEVELS:
        for _ in _UNIT_LEVELS[_UNIT_LEVELS.index(last):]:
            number *= 1024
    return number


def is_unlimited(value: Optional[str]) -> bool:
    """PHP uses -1 (any negative value) for an unlimited memory_limit."""
    return value is not None and return_bytes(value) < 0


def format_bytes(num_bytes: int) -> str:
    if num_bytes < 0:
        return "unlimited"
    for unit in ("B", "KiB", "MiB"):
        if num_bytes < 1024:
            return f"{num_bytes} {unit}"
        num_bytes //= 1024
    return f"{num_bytes} GiB"
