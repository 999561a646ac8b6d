"""
Version comparison utilities for pkgworld.

pkg-config metadata carries free-form version strings (``1.2.11``,
``2.0.0-beta``, ``1.0~rc1``, ``20230802``). Versions that are valid PEP 440
are compared with :mod:`packaging`; anything else falls back to the
segment-wise comparison used by pkg-config and rpm, where alphanumeric
runs are compared numerically or lexically and ``~`` sorts before
everything, including the end of the string.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from packaging.version import InvalidVersion, Version, parse

_SEGMENT_RE = re.compile(r"~|\d+|[A-Za-z]+")


def compare_versions(a: Optional[str], b: Optional[str]) -> int:
    """Compare two version strings.

    Args:
        a: Left-hand version; ``None`` is treated as ``"0"``.
        b: Right-hand version; ``None`` is treated as ``"0"``.

    Returns:
        ``-1`` if ``a < b``, ``0`` if equal, ``1`` if ``a > b``.

    Examples:
        >>> compare_versions("1.2.10", "1.2.9")
        1
        >>> compare_versions("1.0~rc1", "1.0")
        -1
        >>> compare_versions("1.0", "1.0")
        0
    """
    left = a if a else "0"
    right = b if b else "0"

    if left.lower() == right.lower():
        return 0

    parsed = _parse_pep440_pair(left, right)
    if parsed is not None:
        left_version, right_version = parsed
        if left_version == right_version:
            return 0
        return 1 if left_version > right_version else -1

    return _compare_segments(left, right)


def _parse_pep440_pair(a: str, b: str) -> Optional[Tuple[Version, Version]]:
    """Parse both versions as PEP 440, or return None if either is invalid."""
    try:
        left = parse(a)
        right = parse(b)
    except InvalidVersion:
        return None
    if not isinstance(left, Version) or not isinstance(right, Version):
        return None
    return left, right


def _segments(value: str) -> List[str]:
    """Split a version into ``~``, numeric and alphabetic segments."""
    return _SEGMENT_RE.findall(value)


def _compare_segments(a: str, b: str) -> int:
    """Compare two versions segment by segment, pkg-config style."""
    left = _segments(a)
    right = _segments(b)

    for index in range(max(len(left), len(right))):
        one = left[index] if index < len(left) else None
        two = right[index] if index < len(right) else None

        if one == "~" or two == "~":
            if one != "~":
                return 1
            if two != "~":
                return -1
            continue

        if one is None or two is None:
            break

        one_numeric = one.isdigit()
        two_numeric = two.isdigit()

        # numeric segments are newer than alphabetic ones
        if one_numeric != two_numeric:
            return 1 if one_numeric else -1

        if one_numeric:
            one_value, two_value = int(one), int(two)
            if one_value != two_value:
                return 1 if one_value > two_value else -1
        elif one != two:
            return 1 if one > two else -1

    if len(left) == len(right):
        return 0
    return 1 if len(left) > len(right) else -1
