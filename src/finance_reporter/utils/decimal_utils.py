"""Decimal utilities for money handling.

All monetary calculations use Decimal to avoid floating-point precision issues.
"""

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP


# Currency symbols to strip
CURRENCY_SYMBOLS = {"$", "€", "£", "¥", "₹", "৳", "₽", "₩"}

# Regex for parentheses-enclosed negatives: ($1,234.56) or (1234.56)
PARENS_NEGATIVE_PATTERN = re.compile(r"^\s*\(\s*([^)]+)\s*\)\s*$")

ZERO = Decimal("0")


def parse_amount(raw_amount: object) -> tuple[Decimal, bool]:
    """Parse a raw amount into a Decimal.

    Handles plain numbers (1234.56), currency prefixes ($1,234.56),
    leading minus signs and parenthesised negatives (($12.00)).

    Args:
        raw_amount: The raw amount (string, int, float or Decimal).

    Returns:
        Tuple of (absolute amount as Decimal, is_negative flag).

    Raises:
        ValueError: If the amount cannot be parsed.
    """
    if isinstance(raw_amount, bool) or raw_amount is None:
        raise ValueError(f"Cannot parse amount '{raw_amount}'")
    if isinstance(raw_amount, Decimal):
        return abs(raw_amount), raw_amount < 0
    if isinstance(raw_amount, (int, float)):
        # Convert float to string first for precision
        amount = Decimal(str(raw_amount))
        return abs(amount), amount < 0

    original = str(raw_amount)
    amount_str = original.strip()
    if not amount_str:
        raise ValueError("Empty amount string")

    is_negative = False

    parens_match = PARENS_NEGATIVE_PATTERN.match(amount_str)
    if parens_match:
        amount_str = parens_match.group(1).strip()
        is_negative = True

    if amount_str.startswith("-"):
        is_negative = True
        amount_str = amount_str[1:].strip()

    for symbol in CURRENCY_SYMBOLS:
        amount_str = amount_str.replace(symbol, "")
    amount_str = amount_str.replace(",", "").replace(" ", "")

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Cannot parse amount '{original}': {e}") from e

    return abs(amount), is_negative


def quantize_money(amount: Decimal, decimal_places: int = 2) -> Decimal:
    """Round an amount half-up to a fixed number of decimal places."""
    quantize_str = "0." + "0" * decimal_places if decimal_places else "0"
    return amount.quantize(Decimal(quantize_str), rounding=ROUND_HALF_UP)


def format_currency(
    amount: Decimal,
    decimal_places: int = 2,
    include_sign: bool = True,
) -> str:
    """Format a Decimal amount for display.

    Args:
        amount: The amount to format.
        decimal_places: Number of decimal places (default 2).
        include_sign: Whether to include sign for negative amounts.

    Returns:
        Formatted string like "-1234.56" or "1234.56".
    """
    rounded = quantize_money(amount, decimal_places)
    if rounded == 0:
        rounded = abs(rounded)  # Normalize -0.00

    if include_sign and rounded < 0:
        return str(rounded)
    return str(abs(rounded))


def format_money(amount: Decimal, symbol: str = "$", decimal_places: int = 2) -> str:
    """Format an amount with a currency symbol, sign before the symbol.

    >>> format_money(Decimal("-5"), "$")
    '-$5.00'
    """
    text = format_currency(abs(amount), decimal_places, include_sign=False)
    if quantize_money(amount, decimal_places) < 0:
        return f"-{symbol}{text}"
    return f"{symbol}{text}"


def sum_amounts(amounts: list[Decimal]) -> Decimal:
    """Sum a list of Decimal amounts.

    Args:
        amounts: List of Decimal amounts.

    Returns:
        Sum as Decimal (zero for an empty list).
    """
    total = ZERO
    for amount in amounts:
        total += amount
    return total


def decimal_to_number(amount: Decimal) -> int | float:
    """Convert a Decimal to a JSON number, keeping whole values integral."""
    if amount == amount.to_integral_value():
        return int(amount)
    return float(amount)
