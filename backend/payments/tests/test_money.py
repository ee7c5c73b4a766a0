"""
Unit tests for payments.money module.

These tests are CRITICAL for preventing penny drift between order totals,
rider liabilities and drawer balances.
"""

import pytest
from decimal import Decimal

from payments.money import (
    currency_exponent,
    quantize_decimal,
    quantize,
    to_decimal,
    format_money,
)


class TestCurrencyExponent:
    """Test currency exponent lookup."""

    def test_two_decimal_currencies(self):
        assert currency_exponent("PKR") == 2
        assert currency_exponent("usd") == 2

    def test_zero_and_three_decimal_currencies(self):
        assert currency_exponent("JPY") == 0
        assert currency_exponent("KWD") == 3

    def test_unknown_currency_defaults_to_two(self):
        assert currency_exponent("XYZ") == 2
        assert currency_exponent(None) == 2

    def test_quantize_decimal(self):
        assert quantize_decimal("PKR") == Decimal("0.01")
        assert quantize_decimal("JPY") == Decimal("1")
        assert quantize_decimal("KWD") == Decimal("0.001")


class TestQuantize:
    """Banker's rounding to the currency's minor unit"""

    def test_rounds_half_to_even(self):
        assert quantize("PKR", "10.125") == Decimal("10.12")
        assert quantize("PKR", "10.135") == Decimal("10.14")

    def test_pads_whole_amounts(self):
        assert quantize("PKR", 1500) == Decimal("1500.00")
        assert str(quantize("PKR", 1500)) == "1500.00"

    def test_float_input_goes_through_str(self):
        assert quantize("PKR", 0.1 + 0.2) == Decimal("0.30")

    def test_zero_decimal_currency(self):
        assert quantize("JPY", "1234.5") == Decimal("1234")

    def test_repeated_line_totals_do_not_drift(self):
        """Three lines at 333.333 add up to the rounded sum, not 1000.00"""
        lines = [quantize("PKR", "333.333") for _ in range(3)]
        assert sum(lines) == Decimal("999.99")


class TestToDecimal:
    def test_parses_strings_and_ints(self):
        assert to_decimal("4400") == Decimal("4400")
        assert to_decimal(250) == Decimal("250")

    def test_decimal_passes_through(self):
        value = Decimal("12.50")
        assert to_decimal(value) is value

    def test_rejects_garbage(self):
        with pytest.raises(ValueError, match="Invalid tendered amount"):
            to_decimal("abc", "tendered amount")

    def test_rejects_none(self):
        with pytest.raises(ValueError):
            to_decimal(None)


class TestFormatMoney:
    def test_rupees(self):
        assert format_money("PKR", "1500") == "Rs 1,500.00"

    def test_negative_variance(self):
        assert format_money("PKR", Decimal("-200")) == "-Rs 200.00"

    def test_unknown_currency_uses_code(self):
        assert format_money("QAR", "12.5") == "QAR 12.50"
