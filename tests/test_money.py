from decimal import Decimal

import pytest

from money import InvalidAmount, amounts_equal, format_amount, from_minor_units, to_canonical


def test_minor_units_to_canonical():
    assert from_minor_units(12345) == Decimal("123.45")
    assert str(from_minor_units(6038)) == "60.38"


def test_normalising_twice_is_idempotent():
    for pence in (0, 1, 99, 100, 6038, 12345, 1000000):
        once = from_minor_units(pence)
        assert to_canonical(once) == once
        assert str(to_canonical(once)) == str(once)


def test_float_noise_does_not_affect_equality():
    assert to_canonical(0.1 + 0.2) == Decimal("0.30")
    assert from_minor_units(6038.0) == to_canonical(60.38)
    assert amounts_equal(60.38, Decimal("60.380"))


def test_always_two_fractional_digits():
    assert to_canonical(25) == Decimal("25.00")
    assert to_canonical(25).as_tuple().exponent == -2
    assert to_canonical("60.4").as_tuple().exponent == -2


def test_midpoint_rounds_half_even():
    assert to_canonical(Decimal("0.125")) == Decimal("0.12")
    assert to_canonical(Decimal("0.135")) == Decimal("0.14")


@pytest.mark.parametrize("bad", [float("nan"), float("inf"), "NaN", "abc", "", None, True])
def test_invalid_amount(bad):
    with pytest.raises(InvalidAmount):
        to_canonical(bad)


def test_invalid_minor_units():
    with pytest.raises(InvalidAmount):
        from_minor_units(float("-inf"))


def test_format_amount():
    assert format_amount(Decimal("1234.5")) == "1,234.50"
