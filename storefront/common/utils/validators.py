import re
from typing import Any


# one "@", no whitespace, and a dot inside the domain part
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def is_valid_email(value: Any) -> bool:
    if is_blank(value):
        return False
    return bool(EMAIL_PATTERN.match(value.strip()))


def ensure_int(value: Any, field: str) -> int:
    """Accept ints, integral floats and numeric strings; reject everything else."""
    if isinstance(value, bool) or value is None:
        raise ValueError(f"{field} must be an integer")
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        raise ValueError(f"{field} must be an integer") from None
    if isinstance(value, float) and number != value:
        raise ValueError(f"{field} must be an integer")
    return number


def ensure_positive_int(value: Any, field: str) -> int:
    number = ensure_int(value, field)
    if number < 1:
        raise ValueError(f"{field} must be > 0")
    return number
