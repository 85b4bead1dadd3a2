"""String validation helpers."""

from typing import Optional


def is_null_or_empty(value: Optional[str]) -> bool:
    """Check whether the string is ``None`` or empty."""
    return value is None or len(value) == 0


def is_null_or_whitespace(value: Optional[str]) -> bool:
    """Check whether the string is ``None``, empty or only whitespace."""
    return value is None or len(value.strip()) == 0
