"""
Dotted version comparison and the version scoring tables.
"""

import operator
import re
from typing import Callable, Dict, List, Optional, Sequence, Tuple

_OPERATORS: Dict[str, Callable[[Tuple[int, ...], Tuple[int, ...]], bool]] = {
    ">=": operator.ge,
    ">": operator.gt,
    "<=": operator.le,
    "<": operator.lt,
    "==": operator.eq,
    "!=": operator.ne,
    "ge": operator.ge,
    "gt": operator.gt,
    "le": operator.le,
    "lt": operator.lt,
    "eq": operator.eq,
    "ne": operator.ne,
}

_LEADING_DIGITS = re.compile(r"^\s*(\d+)")


def version_segments(version: str) -> List[int]:
    """
    Split a dotted version into integer segments.

    Parsing stops at the first segment without a leading number, and a
    non-numeric suffix on a segment is dropped: "8.3.2-1ubuntu1" -> [8, 3, 2].
    """
    segments: List[int] = []
    for part in version.strip().split("."):
        match = _LEADING_DIGITS.match(part)
        if not match:
            break
        segments.append(int(match.group(1)))
        if match.end() != len(part):
            break
    return segments


def compare_versions(left: str, right: str, op: str = ">=") -> bool:
    """
    Compare two dotted versions numerically, segment by segment.

    Missing segments count as 0, so "8.3" == "8.3.0" and "8.10.0" > "8.9.0".

    Raises:
        ValueError: if op is not a known comparison operator
    """
    try:
        compare = _OPERATORS[op]
    except KeyError:
        raise ValueError(f"Unknown comparison operator: {op!r}") from None

    a = version_segments(left)
    b = version_segments(right)
    width = max(len(a), len(b))
    a += [0] * (width - len(a))
    b += [0] * (width - len(b))
    return compare(tuple(a), tuple(b))


def tiered_score(
    version: Optional[str],
    tiers: Sequence[Tuple[str, float]],
    floor: float = 0.0,
) -> float:
    """
    Score a version against (minimum_version, score) tiers, best tier first.

    An undetectable version (None, empty or without a leading number) scores 0.
    """
    if not version or not version_segments(version):
        return 0.0
    for minimum, score in tiers:
        if compare_versions(version, minimum, ">="):
            return float(score)
    return float(floor)
