"""Input normalization for the read path."""

import re
from typing import Optional

DEFAULT_LIMIT = 1000
MAX_LIMIT = 10000

# Leading sign and ASCII digits after optional whitespace; the rest is ignored.
_LEADING_INT = re.compile(r"^\s*([+-]?[0-9]+)")


def sanitize_limit(raw: Optional[str]) -> int:
    """
    Clamp a raw ``limit`` query parameter into [1, MAX_LIMIT].

    Absent, non-numeric and non-positive values fall back to DEFAULT_LIMIT;
    values above MAX_LIMIT are reduced to it. This never raises: the read path
    has no 4xx responses.
    """
    if raw is None:
        return DEFAULT_LIMIT

    match = _LEADING_INT.match(str(raw))
    if not match:
        return DEFAULT_LIMIT

    value = int(match.group(1))
    if value <= 0:
        return DEFAULT_LIMIT
    return min(value, MAX_LIMIT)
