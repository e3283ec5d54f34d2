"""Amount normalisation

Square returns cash-drawer amounts as minor units (pence), Xero returns invoice
amounts as major units. Both sides are normalised to a 2dp Decimal before any
equality check so float noise can never decide a match.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN
from typing import Union

CENT = Decimal("0.01")
MINOR_UNITS_PER_MAJOR = Decimal(100)

Amount = Union[Decimal, int, float, str]


class InvalidAmount(ValueError):
    """Raised when a value cannot be represented as a finite decimal amount."""

    def __init__(self, value):
        super().__init__(f"invalid amount: {value!r}")
        self.value = value


def _to_decimal(value: Amount) -> Decimal:
    if isinstance(value, bool) or value is None:
        raise InvalidAmount(value)
    if isinstance(value, Decimal):
        dec = value
    else:
        # str() first: Decimal(0.1) would carry the binary representation error
        try:
            dec = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise InvalidAmount(value)
    if not dec.is_finite():
        raise InvalidAmount(value)
    return dec


def to_canonical(value: Amount) -> Decimal:
    """Major-unit amount -> Decimal rounded to exactly 2 fractional digits."""
    return _to_decimal(value).quantize(CENT, rounding=ROUND_HALF_EVEN)


def from_minor_units(value: Amount) -> Decimal:
    """Minor-unit amount (e.g. 6038 pence) -> canonical major units (60.38)."""
    return (_to_decimal(value) / MINOR_UNITS_PER_MAJOR).quantize(CENT, rounding=ROUND_HALF_EVEN)


def amounts_equal(a: Amount, b: Amount) -> bool:
    return to_canonical(a) == to_canonical(b)


def format_amount(value: Amount) -> str:
    return f"{to_canonical(value):,.2f}"
