"""
Monetary precision helpers.

Every amount the engine stores or compares goes through ``quantize`` so
that totals, rider liabilities and drawer balances never drift by a
fraction of a minor unit.

Key Principles:
1. NEVER use float for money
2. Quantize at each step that produces a stored amount
3. Use ROUND_HALF_EVEN (banker's rounding) to prevent systematic bias
"""

from decimal import Decimal, ROUND_HALF_EVEN, getcontext
from typing import Union

getcontext().prec = 28

ZERO = Decimal("0")

# Currency minor unit exponents (how many decimal places)
CURRENCY_EXPONENT = {
    "PKR": 2,  # Pakistani Rupee (paisa)
    "INR": 2,  # Indian Rupee (paise)
    "AED": 2,  # UAE Dirham (fils)
    "SAR": 2,  # Saudi Riyal (halala)
    "USD": 2,  # United States Dollar (cents)
    "GBP": 2,  # British Pound (pence)
    "EUR": 2,  # Euro (cents)

    # Zero-decimal currencies
    "JPY": 0,
    "KRW": 0,

    # 3-decimal currencies
    "KWD": 3,
    "BHD": 3,
    "OMR": 3,
}

CURRENCY_SYMBOLS = {
    "PKR": "Rs ",
    "INR": "₹",
    "USD": "$",
    "GBP": "£",
    "EUR": "€",
    "JPY": "¥",
}


def currency_exponent(currency: str) -> int:
    """
    Number of decimal places for a currency (defaults to 2).

    >>> currency_exponent("PKR")
    2
    >>> currency_exponent("KWD")
    3
    """
    return CURRENCY_EXPONENT.get((currency or "").upper(), 2)


def quantize_decimal(currency: str) -> Decimal:
    """Smallest unit of the currency as a Decimal (0.01 for PKR)."""
    return Decimal(10) ** -currency_exponent(currency)


def quantize(currency: str, amount: Union[Decimal, str, int, float]) -> Decimal:
    """
    Round to currency decimals using banker's rounding (ROUND_HALF_EVEN).

    >>> quantize("PKR", "10.125")
    Decimal('10.12')
    >>> quantize("PKR", 1500)
    Decimal('1500.00')
    """
    if isinstance(amount, float):
        # Convert float to string first to avoid precision issues
        amount = str(amount)

    return Decimal(amount).quantize(quantize_decimal(currency), rounding=ROUND_HALF_EVEN)


def to_decimal(value, field="amount") -> Decimal:
    """
    Parse user input into a Decimal.

    Raises:
        ValueError: If the value is not a valid number
    """
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (ArithmeticError, TypeError, ValueError):
        raise ValueError(f"Invalid {field}: {value!r}")


def format_money(currency: str, amount: Union[Decimal, str, int]) -> str:
    """
    Format an amount as a human-readable currency string.

    >>> format_money("PKR", "1500")
    'Rs 1,500.00'
    """
    amount = quantize(currency, amount)
    symbol = CURRENCY_SYMBOLS.get((currency or "").upper(), f"{currency} ")
    exponent = currency_exponent(currency)
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.{exponent}f}"
