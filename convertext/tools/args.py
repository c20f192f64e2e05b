"""Argument parsing helpers shared by catalog tools."""

from typing import Optional


def parse_int_in_range(
    value: str,
    minimum: int,
    maximum: int,
    default: Optional[int] = None,
) -> Optional[int]:
    """
    Parse a tool argument as an integer within ``[minimum, maximum]``.

    Args:
        value: Raw string argument (as produced by the evaluator)
        minimum: Smallest accepted value
        maximum: Largest accepted value
        default: Returned when the argument is empty

    Returns:
        The integer, or None when the argument is missing or out of range
    """
    raw = (value or "").strip()
    if not raw:
        return default
    try:
        number = int(raw)
    except ValueError:
        try:
            as_float = float(raw)
        except ValueError:
            return None
        if not as_float.is_integer():
            return None
        number = int(as_float)
    if number < minimum or number > maximum:
        return None
    return number
