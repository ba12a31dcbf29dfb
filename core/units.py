"""Human-readable size parsing."""

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from models.errors import InvalidSizeFormat

UNIT_MULTIPLIERS = {
    "b": 1,
    "kb": 1000,
    "mb": 1000 ** 2,
    "gb": 1000 ** 3,
    "kib": 1024,
    "mib": 1024 ** 2,
    "gib": 1024 ** 3,
}

_SIZE_PATTERN = re.compile(r"^\s*(?P<number>[-+]?(?:\d+\.?\d*|\.\d+))\s*(?P<unit>[A-Za-z]*)\s*$")


def parse_size(value: str) -> int:
    """
    Parse a size string such as ``"1 MiB"`` or ``"500kB"`` into bytes.

    Decimal units (kB, MB, GB) use powers of 1000, binary units (KiB, MiB, GiB)
    powers of 1024. Units are case-insensitive and a bare number is a byte
    count. Fractional values are rounded to the nearest byte.

    Raises:
        InvalidSizeFormat: If there is no numeric prefix, the unit is unknown
            or the size is negative
    """
    if not isinstance(value, str):
        raise InvalidSizeFormat(repr(value), "expected a string")

    match = _SIZE_PATTERN.match(value)
    if not match:
        raise InvalidSizeFormat(value, "expected <number> <unit>")

    unit = match.group("unit").lower() or "b"
    multiplier = UNIT_MULTIPLIERS.get(unit)
    if multiplier is None:
        raise InvalidSizeFormat(value, f"unknown unit {match.group('unit')!r}")

    try:
        number = Decimal(match.group("number"))
    except InvalidOperation as e:
        raise InvalidSizeFormat(value, "invalid number") from e
    if number < 0:
        raise InvalidSizeFormat(value, "size cannot be negative")

    return int((number * multiplier).to_integral_value(rounding=ROUND_HALF_UP))


def format_size(size: int) -> str:
    """Format a byte count the way error messages show it."""
    return f"{size} byte{'' if size == 1 else 's'}"
