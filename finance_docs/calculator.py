"""
Totals calculator for business documents.

Turns a validated DocumentDescription into a TotalsModel:
- per-line gross, discount, net (tax base) and taxes
- subtotal, tax total and a tax breakup keyed by tax name
- shipping and additional charges, added after taxes
- grand-total rounding according to the document's policy

All arithmetic is Decimal, so identical input always yields identical totals.
"""

from decimal import ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_UP, Decimal

from .config import RoundingPolicy
from .schemas import DocumentDescription, LineAmounts, LineItem, TotalsModel
from .validator import validate_document


ZERO = Decimal("0")
HUNDRED = Decimal("100")
WHOLE_UNIT = Decimal("1")

_ROUNDING_MODES = {
    RoundingPolicy.NEAREST: ROUND_HALF_UP,
    RoundingPolicy.UP: ROUND_CEILING,
    RoundingPolicy.DOWN: ROUND_FLOOR,
}


def apply_rounding(amount: Decimal, policy: RoundingPolicy) -> Decimal:
    """
    Round a grand total to whole currency units.

    ``nearest`` rounds ties away from zero (0.5 rounds up), ``up`` is the
    ceiling, ``down`` the floor and ``none`` returns the amount unchanged.
    """
    if policy == RoundingPolicy.NONE:
        return amount
    return amount.quantize(WHOLE_UNIT, rounding=_ROUNDING_MODES[policy])


def compute_line(index: int, item: LineItem) -> LineAmounts:
    """Compute the amounts of a single line item (1-based ``index``)."""
    gross = item.quantity * item.unit_price

    discount = ZERO
    if item.discount is not None:
        if item.discount.type == "percent":
            discount = gross * item.discount.value / HUNDRED
        else:
            discount = item.discount.value
    net = max(gross - discount, ZERO)

    taxes: dict[str, Decimal] = {}
    for tax in item.tax:
        taxes[tax.name] = taxes.get(tax.name, ZERO) + net * tax.rate / HUNDRED
    line_tax = sum(taxes.values(), ZERO)

    return LineAmounts(
        index=index,
        gross=gross,
        discount=gross - net,
        net=net,
        tax=line_tax,
        total=net + line_tax,
        taxes=taxes,
    )


def compute_totals(doc: DocumentDescription) -> TotalsModel:
    """
    Compute the verified totals for a document.

    Args:
        doc: The document description; it is validated first

    Returns:
        TotalsModel with per-line amounts, tax breakup and rounded grand total

    Raises:
        ValidationError: if any validation rule fails (no totals are produced)
    """
    validate_document(doc)

    lines = [compute_line(i, item) for i, item in enumerate(doc.line_items, start=1)]

    tax_breakup: dict[str, Decimal] = {}
    for line in lines:
        for name, amount in line.taxes.items():
            tax_breakup[name] = tax_breakup.get(name, ZERO) + amount

    subtotal = sum((line.net for line in lines), ZERO)
    discount_total = sum((line.discount for line in lines), ZERO)
    taxes = sum((line.tax for line in lines), ZERO)
    charges = sum((charge.amount for charge in doc.additional_charges), ZERO)

    pre_rounding_total = subtotal + taxes + doc.shipping + charges
    rounded = apply_rounding(pre_rounding_total, doc.rounding)

    return TotalsModel(
        currency=doc.currency,
        rounding=doc.rounding,
        lines=lines,
        subtotal=subtotal,
        discount_total=discount_total,
        taxes=taxes,
        tax_breakup=tax_breakup,
        shipping=doc.shipping,
        additional_charges_total=charges,
        pre_rounding_total=pre_rounding_total,
        rounding_adjustment=rounded - pre_rounding_total,
        rounded_grand_total=rounded,
    )
