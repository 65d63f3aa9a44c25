"""Conversion between decimal currency strings and integer minor units.

Amounts arrive from Shopify as decimal strings ("1234.50"). They are turned into
integer cents exactly once, rounding half away from zero, and every sum or split
after that is integer arithmetic.
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext

from sales_snapshot.domain.exceptions import InvalidAmount

MINOR_UNITS_PER_MAJOR = 100

_CENT = Decimal(1)
_DECIMAL_STRING = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)", re.ASCII)


def to_minor_units(amount: str) -> int:
    """
    Parse a decimal amount and return it in minor units.

    Accepts plain ASCII decimals ("12", "-0.50", ".5"); exponents, digit
    separators and non-ASCII digits are rejected. Ties round away from zero:
    "0.005" -> 1, "-0.005" -> -1.

    Raises:
        InvalidAmount: If the value is not a finite base-10 decimal
    """
    if not isinstance(amount, (str, int, Decimal)) or isinstance(amount, bool):
        raise InvalidAmount(amount)
    if isinstance(amount, str) and not _DECIMAL_STRING.fullmatch(amount.strip()):
        raise InvalidAmount(amount)
    try:
        value = Decimal(amount.strip() if isinstance(amount, str) else amount)
    except (InvalidOperation, ValueError) as e:
        raise InvalidAmount(amount) from e
    if not value.is_finite():
        raise InvalidAmount(amount)

    # Enough precision that scaling is exact and quantize is the only rounding
    digits = len(value.as_tuple().digits)
    try:
        with localcontext() as ctx:
            ctx.prec = max(ctx.prec, digits, value.adjusted() + 1) + 4
            scaled = (value * MINOR_UNITS_PER_MAJOR).quantize(_CENT, rounding=ROUND_HALF_UP)
    except ArithmeticError as e:
        raise InvalidAmount(amount) from e
    return int(scaled)


def to_decimal_string(minor: int) -> str:
    """Render minor units as a decimal string with two fractional digits"""
    sign = "-" if minor < 0 else ""
    major, cents = divmod(abs(minor), MINOR_UNITS_PER_MAJOR)
    return f"{sign}{major}.{cents:02d}"


def divide_round_half_away(numerator: int, denominator: int) -> int:
    """Integer division rounding to nearest, ties away from zero (denominator > 0)"""
    quotient, remainder = divmod(abs(numerator), denominator)
    if 2 * remainder >= denominator:
        quotient += 1
    return -quotient if numerator < 0 else quotient
