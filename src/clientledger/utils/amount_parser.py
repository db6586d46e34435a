"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re
from typing import Union


def parse_amount(value: Union[str, int, float, Decimal]) -> Decimal:
    """Parse an amount into a Decimal.

    Handles JSON numbers as well as various string formats:
    - "123.45"
    - "-123.45"
    - "₹1,234.56"
    - "(123.45)" (negative in parentheses)

    Args:
        value: Amount as number or string

    Returns:
        Decimal amount

    Raises:
        ValueError: If the amount cannot be parsed
    """
    if isinstance(value, bool):
        raise ValueError(f"Could not parse amount '{value}'")
    if isinstance(value, (int, float, Decimal)):
        # str() keeps the shortest repr, avoiding binary float noise
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
        if not amount.is_finite():
            raise ValueError(f"Could not parse amount '{value}'")
        return amount

    if not value or not value.strip():
        raise ValueError("Empty amount string")

    amount_str = value.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols, thousands separators and whitespace
    amount_str = re.sub(r"[$€£¥₹,\s]", "", amount_str)

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{value}'") from e
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{value}'")
    return -amount if is_negative else amount
