"""
Fixed-point price normalization.

Converts the scalar pulled out of the external payload into an unsigned
64-bit integer scaled by ``10 ** decimals``.  Both string and numeric JSON
values go through ``decimal.Decimal`` built from their text form, so a
price never passes through binary floating point before scaling.
"""
import re
from decimal import ROUND_HALF_EVEN, Context, Decimal, InvalidOperation, localcontext
from typing import Any

from src.feedrelay.exceptions import (
    NumericParseError,
    PriceOverflowError,
    ValueTypeError,
)
from src.feedrelay.oracle.bcs import U64_MAX

# Plain decimal literal: sign, digits, optional fraction, optional exponent.
_DECIMAL_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

# u64 max has 20 digits, so anything whose scaled magnitude reaches 10**20
# overflows regardless of its remaining digits.
_MAX_ADJUSTED_EXPONENT = 19


def to_decimal(value: Any) -> Decimal:
    """Convert a JSON string or number into a ``Decimal``.

    Raises:
        ValueTypeError: If *value* is an object, array, bool or null.
        NumericParseError: If a string is not a plain decimal literal, or its
            exponent is outside the range ``Decimal`` can represent.
    """
    # bool is a subclass of int and must not be treated as a number.
    if isinstance(value, bool) or value is None or isinstance(value, (dict, list)):
        raise ValueTypeError(
            f"Price value is neither a string nor a number: {value!r}"
        )

    if isinstance(value, str):
        if not _DECIMAL_RE.fullmatch(value):
            raise NumericParseError(
                f"Price value is not a valid number string: {value!r}"
            )
        return _parse_literal(value)

    if isinstance(value, Decimal):
        if not value.is_finite():
            raise NumericParseError(f"Price value is not finite: {value}")
        return value

    if isinstance(value, (int, float)):
        text = repr(value)
        if not _DECIMAL_RE.fullmatch(text):
            raise NumericParseError(f"Price value is not finite: {text}")
        return _parse_literal(text)

    raise ValueTypeError(
        f"Price value is neither a string nor a number: {type(value).__name__}"
    )


def _parse_literal(text: str) -> Decimal:
    try:
        return Decimal(text)
    except InvalidOperation as e:
        raise NumericParseError(
            f"Price value exponent is out of range: {text[:40]!r}"
        ) from e


def normalize(extracted: Any, decimals: int) -> int:
    """Scale *extracted* by ``10 ** decimals`` into an unsigned 64-bit integer.

    The scaled value is rounded half-to-even to the nearest integer.

    Args:
        extracted: JSON string or number holding the price.
        decimals: Number of decimal places kept in the fixed-point result.

    Returns:
        The fixed-point price, ``0 <= price <= 2**64 - 1``.

    Raises:
        ValueTypeError: See ``to_decimal``.
        NumericParseError: See ``to_decimal``.
        PriceOverflowError: If the scaled price is negative or exceeds
            ``2**64 - 1``.
    """
    if decimals < 0:
        raise ValueError(f"decimals must be non-negative, got {decimals}")

    value = to_decimal(extracted)

    if value < 0:
        raise PriceOverflowError(
            f"Scaled price is negative and cannot be represented as u64: {value}"
        )

    if value != 0 and value.adjusted() + decimals > _MAX_ADJUSTED_EXPONENT:
        raise PriceOverflowError(
            f"Scaled price is too large to fit in u64 (decimals: {decimals})"
        )

    # Enough precision to keep every digit of the scaled value exact.
    precision = max(28, len(value.as_tuple().digits) + decimals + 2)
    with localcontext(Context(prec=precision)):
        scaled = value.scaleb(decimals)
        price = int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_EVEN))

    if price > U64_MAX:
        raise PriceOverflowError(
            f"Scaled price is too large to fit in u64 (decimals: {decimals})"
        )

    return price
