"""
Decimal-String Arithmetic

Money values travel through the adapter as decimal strings ("0.00010000",
"29500.5"). Converting them to float before doing arithmetic would introduce
binary rounding errors, so every computation on them goes through Precise,
which works on decimal.Decimal with a wide context and returns strings again.

Conventions:
    - Any None operand yields None (a missing field stays missing)
    - Results are plain decimal strings without exponent or trailing zeros
    - Division truncates to 18 fractional digits
    - Division by zero raises decimal.DivisionByZero; callers that can see a
      zero denominator check for it first

Example:
    >>> Precise.string_sub("110", "100")
    '10'
    >>> Precise.string_div("10", "100")
    '0.1'
"""

from decimal import Context, Decimal, DivisionByZero, ROUND_DOWN, ROUND_HALF_UP
from typing import Optional, Union

_CONTEXT = Context(prec=128, rounding=ROUND_DOWN)

DIVISION_PRECISION = 18

Number = Union[str, int, float, Decimal]


def to_decimal(value: Number) -> Decimal:
    # str() first so floats keep their shortest repr instead of the binary expansion
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def decimal_to_string(value: Decimal) -> str:
    if value == 0:
        return "0"
    text = format(value.normalize(_CONTEXT), "f")
    return text


class Precise:
    """Static helpers for exact arithmetic on decimal strings."""

    @staticmethod
    def string_add(a: Optional[Number], b: Optional[Number]) -> Optional[str]:
        if a is None or b is None:
            return None
        return decimal_to_string(_CONTEXT.add(to_decimal(a), to_decimal(b)))

    @staticmethod
    def string_sub(a: Optional[Number], b: Optional[Number]) -> Optional[str]:
        if a is None or b is None:
            return None
        return decimal_to_string(_CONTEXT.subtract(to_decimal(a), to_decimal(b)))

    @staticmethod
    def string_mul(a: Optional[Number], b: Optional[Number]) -> Optional[str]:
        if a is None or b is None:
            return None
        return decimal_to_string(_CONTEXT.multiply(to_decimal(a), to_decimal(b)))

    @staticmethod
    def string_div(
        a: Optional[Number],
        b: Optional[Number],
        precision: int = DIVISION_PRECISION
    ) -> Optional[str]:
        """
        Divide a by b, truncating the quotient to `precision` fractional digits.

        Raises:
            decimal.DivisionByZero: If b is zero
        """
        if a is None or b is None:
            return None
        denominator = to_decimal(b)
        if denominator == 0:
            raise DivisionByZero(f"Division of {a} by zero")
        quotient = _CONTEXT.divide(to_decimal(a), denominator)
        quantum = Decimal(1).scaleb(-precision)
        return decimal_to_string(quotient.quantize(quantum, rounding=ROUND_DOWN, context=_CONTEXT))

    @staticmethod
    def string_eq(a: Optional[Number], b: Optional[Number]) -> Optional[bool]:
        if a is None or b is None:
            return None
        return to_decimal(a) == to_decimal(b)

    @staticmethod
    def string_gt(a: Optional[Number], b: Optional[Number]) -> Optional[bool]:
        if a is None or b is None:
            return None
        return to_decimal(a) > to_decimal(b)

    @staticmethod
    def string_to_precision(value: Number, digits: int, truncate: bool = True) -> str:
        """
        Format value with at most `digits` fractional digits.

        Amounts are truncated (never round a volume up past what the account
        holds); prices are rounded half-up.
        """
        rounding = ROUND_DOWN if truncate else ROUND_HALF_UP
        quantum = Decimal(1).scaleb(-digits)
        return decimal_to_string(to_decimal(value).quantize(quantum, rounding=rounding, context=_CONTEXT))


def parse_number(value: Optional[str]) -> Optional[float]:
    """Convert a decimal string to the numeric output type."""
    if value is None:
        return None
    return float(value)
