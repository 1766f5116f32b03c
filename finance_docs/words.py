"""
Amount-in-words conversion using the Indian numbering system.

Groups are thousand, lakh and crore rather than uniform thousands, e.g.
1,50,000 -> "One Lakh Fifty Thousand Rupees Only".
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

from num2words import num2words

from .config import CURRENCY_UNITS, DEFAULT_CURRENCY, MAX_AMOUNT, ErrorCategory
from .exceptions import ValidationError


MINOR_UNIT = Decimal("0.01")


def units_for(currency: str) -> tuple[str, str]:
    """Return the (major, minor) unit names for a currency code."""
    try:
        return CURRENCY_UNITS[currency.upper()]
    except KeyError:
        raise ValidationError(
            f"No currency units known for {currency}",
            errors=[f"{ErrorCategory.FORMAT_ERROR.value}:currency"],
        )


def integer_to_words(number: int) -> str:
    """Spell a non-negative integer, e.g. 150000 -> "One Lakh Fifty Thousand"."""
    words = num2words(number, lang="en_IN").replace(",", "")
    return words.title()


def amount_to_words(
    amount: Union[Decimal, int, float, str],
    units: tuple[str, str] = CURRENCY_UNITS[DEFAULT_CURRENCY],
) -> str:
    """
    Convert a monetary amount to words.

    Args:
        amount: Non-negative amount; rounded half-up to the minor unit
        units: (major, minor) unit names, e.g. ("Rupees", "Paise")

    Returns:
        Sentence fragment such as
        "One Thousand Two Hundred Rupees and Fifty Paise Only"

    Raises:
        ValidationError: if the amount is negative or above MAX_AMOUNT
    """
    value = Decimal(str(amount))
    if value < 0 or value > MAX_AMOUNT:
        raise ValidationError(
            f"Cannot express amount in words: {value}",
            errors=[f"{ErrorCategory.RANGE_ERROR.value}:amount"],
        )
    value = value.quantize(MINOR_UNIT, rounding=ROUND_HALF_UP)

    major_unit, minor_unit = units
    major = int(value)
    minor = int((value - major) * 100)

    words = f"{integer_to_words(major)} {major_unit}"
    if minor:
        words += f" and {integer_to_words(minor)} {minor_unit}"
    return f"{words} Only"
