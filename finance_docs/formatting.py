"""
Display formatting shared by the renderers and the CLI.

These are plain functions over values; they hold no state.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from .config import CURRENCY_SYMBOLS, DISPLAY_DATE_FORMAT, DOCUMENT_TITLES
from .schemas import TotalsModel


def _group_digits(digits: str, indian: bool) -> str:
    if not indian:
        return f"{int(digits):,}"
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_money(amount: Decimal, currency: str = "INR") -> str:
    """
    Format an amount with its currency symbol and two decimals.

    INR uses Indian digit grouping: 118000 -> "₹1,18,000.00".
    """
    value = Decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    whole, _, fraction = f"{abs(value):.2f}".partition(".")
    symbol = CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    return f"{sign}{symbol}{_group_digits(whole, currency == 'INR')}.{fraction}"


def format_number(value: Decimal) -> str:
    """Format a quantity or rate without trailing zeros: 2.50 -> "2.5"."""
    text = format(Decimal(value).normalize(), "f")
    return text if text != "-0" else "0"


def format_date(value: Optional[date]) -> str:
    """Format a date for display, e.g. "15 Jan 2024"."""
    return value.strftime(DISPLAY_DATE_FORMAT) if value else ""


def document_title(document_type: str) -> str:
    """Heading for a document type, e.g. "Tax Invoice"."""
    key = getattr(document_type, "value", document_type)
    return DOCUMENT_TITLES.get(key, str(key).title())


def format_totals_text(totals: TotalsModel) -> str:
    """
    Format a TotalsModel as human-readable text for CLI output.

    Args:
        totals: TotalsModel to format

    Returns:
        Formatted string for display
    """
    currency = totals.currency
    lines = [
        "=" * 50,
        "DOCUMENT TOTALS",
        "=" * 50,
        f"Grand total:         {format_money(totals.rounded_grand_total, currency)}",
        f"Subtotal:            {format_money(totals.subtotal, currency)}",
        f"Taxes:               {format_money(totals.taxes, currency)}",
        "",
    ]

    if totals.tax_breakup:
        lines.append("Tax Breakup:")
        lines.append("-" * 40)
        for name, amount in totals.tax_breakup.items():
            lines.append(f"  {name}: {format_money(amount, currency)}")
        lines.append("")

    if totals.shipping or totals.additional_charges_total:
        lines.append(f"Shipping:            {format_money(totals.shipping, currency)}")
        lines.append(f"Additional charges:  {format_money(totals.additional_charges_total, currency)}")
        lines.append("")

    if totals.rounding_adjustment:
        lines.append(f"Rounding ({totals.rounding.value}):    {format_money(totals.rounding_adjustment, currency)}")
        lines.append("")

    lines.append("=" * 50)

    return "\n".join(lines)
