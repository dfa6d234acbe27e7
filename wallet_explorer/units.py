"""
Base-unit normalization.

Amounts arrive as integer strings in the smallest unit. Scaling by
10**decimals is done with integer arithmetic only; float conversion loses
precision past ~15 significant digits, which 18-decimal tokens exceed.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional


DEFAULT_DECIMALS = 18

# ERC-20 decimals is a uint8
MAX_DECIMALS = 255


def parse_int(value: Any, default: Optional[int] = 0) -> Optional[int]:
    """
    Parse an integer from an int, a decimal string or a 0x hex string.

    Anything else (floats, bools, fractional strings, garbage) gives default.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        return default

    text = value.strip()
    if not text:
        return default
    try:
        if text.lower().startswith(("0x", "-0x")):
            return int(text, 16)
        return int(text, 10)
    except ValueError:
        return default


def parse_decimals(value: Any, default: int = DEFAULT_DECIMALS) -> int:
    """Token decimals, falling back to default when absent or out of range."""
    decimals = parse_int(value, None)
    if decimals is None or decimals < 0 or decimals > MAX_DECIMALS:
        return default
    return decimals


def format_units(raw: Any, decimals: Any = DEFAULT_DECIMALS) -> str:
    """
    Render raw / 10**decimals as an exact decimal string.

    Trailing fractional zeros are dropped: ("1000000000000000000", 18) -> "1",
    ("500", 2) -> "5", ("1", 18) -> "0.000000000000000001". An unparsable
    raw value renders as "0".
    """
    amount = parse_int(raw, None)
    if amount is None:
        return "0"

    places = parse_decimals(decimals)
    if places == 0:
        return str(amount)

    whole, frac = divmod(abs(amount), 10 ** places)
    frac_digits = str(frac).rjust(places, "0").rstrip("0")
    text = f"{whole}.{frac_digits}" if frac_digits else str(whole)
    return f"-{text}" if amount < 0 else text


def is_positive(raw: Any) -> bool:
    """True when a raw base-unit amount is strictly greater than zero."""
    amount = parse_int(raw, None)
    return amount is not None and amount > 0


def to_decimal(value: Any) -> Decimal:
    """Decimal for an already-scaled amount string; invalid input is zero."""
    if value is None or isinstance(value, bool):
        return Decimal(0)
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return Decimal(0)
    if not result.is_finite():
        return Decimal(0)
    return result
