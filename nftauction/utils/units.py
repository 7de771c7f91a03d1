"""
Unit conversion between human-readable amounts and integer base units.

Amounts on chain are integers in the smallest unit (wei for the native
asset, 10**-decimals for an ERC20). Decimal keeps the conversion exact.
"""

from decimal import Decimal, InvalidOperation, localcontext
from typing import Union

ETHER_DECIMALS = 18

# Enough digits for any uint256 amount
_PRECISION = 100

Number = Union[str, int, Decimal]


def parse_units(value: Number, decimals: int) -> int:
    """
    Convert a human-readable amount to base units.

    parse_units("1.5", 18) == 1_500_000_000_000_000_000

    Raises:
        ValueError: on malformed input, negative amounts, or more fractional
            digits than the unit supports
    """
    if isinstance(value, float):
        raise ValueError("Use str or Decimal for amounts, not float")
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {value!r}")

    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    if amount < 0:
        raise ValueError(f"Amount cannot be negative: {value!r}")

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        scaled = amount.scaleb(decimals)
        if scaled != scaled.to_integral_value():
            raise ValueError(f"Amount {value!r} has more than {decimals} decimals")
        return int(scaled)


def format_units(amount: int, decimals: int) -> str:
    """Convert base units to a human-readable string without trailing zeros."""
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        text = format(Decimal(amount).scaleb(-decimals), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def parse_ether(value: Number) -> int:
    """Convert an ether amount to wei."""
    return parse_units(value, ETHER_DECIMALS)


def format_ether(amount: int) -> str:
    """Convert wei to an ether string."""
    return format_units(amount, ETHER_DECIMALS)
