"""
Validation rules for document descriptions.

This module defines the rules a document must satisfy before totals are
computed, organized by category:
- Completeness rules: Check for required content
- Format rules: Validate allowed values
- Range rules: Reject negative or out-of-bounds amounts and rates
- Business rules: Enforce document-type and date constraints

Each rule is implemented as a function that returns an error code if
validation fails, or None if validation passes.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from .config import MAX_AMOUNT, MAX_TAX_RATE, SUPPORTED_CURRENCIES, DocumentType, ErrorCategory
from .schemas import DocumentDescription


# Type alias for rule check functions
# The function takes a DocumentDescription and returns an error code or None
RuleCheckFn = Callable[[DocumentDescription], Optional[str]]


@dataclass
class ValidationRule:
    """
    Represents a single validation rule.

    Attributes:
        code: Machine-readable error code (e.g., "range_error:quantity")
        description: Human-readable description of the rule
        category: Category of the rule (completeness, format, range, business)
        check: Function that performs the validation check
    """
    code: str
    description: str
    category: ErrorCategory
    check: RuleCheckFn


# ============================================================================
# Completeness Rules
# ============================================================================

def check_line_items_present(doc: DocumentDescription) -> Optional[str]:
    """A document needs at least one line item."""
    if not doc.line_items:
        return f"{ErrorCategory.MISSING_FIELD.value}:line_items"
    return None


# ============================================================================
# Format Rules
# ============================================================================

def check_currency_valid(doc: DocumentDescription) -> Optional[str]:
    """Currency must be one of the supported currency codes."""
    if doc.currency not in SUPPORTED_CURRENCIES:
        return f"{ErrorCategory.FORMAT_ERROR.value}:currency"
    return None


# ============================================================================
# Range Rules
# ============================================================================

def check_quantities(doc: DocumentDescription) -> Optional[str]:
    """Quantities must not be negative."""
    if any(item.quantity < 0 for item in doc.line_items):
        return f"{ErrorCategory.RANGE_ERROR.value}:quantity"
    return None


def check_unit_prices(doc: DocumentDescription) -> Optional[str]:
    """Unit prices must not be negative."""
    if any(item.unit_price < 0 for item in doc.line_items):
        return f"{ErrorCategory.RANGE_ERROR.value}:unit_price"
    return None


def check_discounts(doc: DocumentDescription) -> Optional[str]:
    """
    Discounts must be non-negative; percent discounts may not exceed 100 and
    flat discounts may not exceed the line's gross amount.

    Rationale: a discount larger than the line would produce a negative
    line amount, which is malformed input rather than something to clamp.
    """
    for item in doc.line_items:
        discount = item.discount
        if discount is None:
            continue
        if discount.value < 0:
            return f"{ErrorCategory.RANGE_ERROR.value}:discount"
        if discount.type == "percent" and discount.value > 100:
            return f"{ErrorCategory.RANGE_ERROR.value}:discount"
        if discount.type == "flat" and discount.value > item.quantity * item.unit_price:
            return f"{ErrorCategory.RANGE_ERROR.value}:discount"
    return None


def check_tax_rates(doc: DocumentDescription) -> Optional[str]:
    """Tax rates must lie between 0 and MAX_TAX_RATE percent."""
    for item in doc.line_items:
        for tax in item.tax:
            if tax.rate < 0 or tax.rate > MAX_TAX_RATE:
                return f"{ErrorCategory.RANGE_ERROR.value}:tax_rate"
    return None


def check_shipping(doc: DocumentDescription) -> Optional[str]:
    """Shipping must not be negative."""
    if doc.shipping < 0:
        return f"{ErrorCategory.RANGE_ERROR.value}:shipping"
    return None


def check_additional_charges(doc: DocumentDescription) -> Optional[str]:
    """Additional charges must not be negative."""
    if any(charge.amount < 0 for charge in doc.additional_charges):
        return f"{ErrorCategory.RANGE_ERROR.value}:additional_charge"
    return None


def check_total_amount(doc: DocumentDescription) -> Optional[str]:
    """
    The largest total the document could reach must not exceed MAX_AMOUNT.

    The bound assumes no discounts and every line's full tax rate, so totals
    that pass stay within the precision the amounts are rounded with.
    """
    bound = max(doc.shipping, 0) + sum(max(charge.amount, 0) for charge in doc.additional_charges)
    for item in doc.line_items:
        gross = max(item.quantity, 0) * max(item.unit_price, 0)
        rate = sum(max(tax.rate, 0) for tax in item.tax)
        bound += gross + gross * rate / 100
    if bound > MAX_AMOUNT:
        return f"{ErrorCategory.RANGE_ERROR.value}:amount"
    return None


# ============================================================================
# Business Rules
# ============================================================================

def check_date_fields(doc: DocumentDescription) -> Optional[str]:
    """
    Invoices and bills carry a due date; quotations carry a validity date.
    Exactly one of the two must be set, matching the document type.
    """
    if doc.document_type == DocumentType.QUOTATION:
        ok = doc.valid_until is not None and doc.due_date is None
    else:
        ok = doc.due_date is not None and doc.valid_until is None
    if not ok:
        return f"{ErrorCategory.BUSINESS_RULE.value}:date_fields"
    return None


def check_due_date_valid(doc: DocumentDescription) -> Optional[str]:
    """
    The due date (or validity date) must not be earlier than the document date.

    Rationale: A payment cannot be due before the document is issued.
    """
    deadline = doc.due_date or doc.valid_until
    if deadline is None:
        return None

    if deadline < doc.doc_date:
        return f"{ErrorCategory.BUSINESS_RULE.value}:invalid_due_date"

    return None


# ============================================================================
# Rule Registry
# ============================================================================

# All validation rules in execution order
VALIDATION_RULES: list[ValidationRule] = [
    # Completeness rules
    ValidationRule(
        code="missing_field:line_items",
        description="A document must have at least one line item",
        category=ErrorCategory.MISSING_FIELD,
        check=check_line_items_present,
    ),

    # Format rules
    ValidationRule(
        code="format_error:currency",
        description="Currency must be a supported ISO currency code",
        category=ErrorCategory.FORMAT_ERROR,
        check=check_currency_valid,
    ),

    # Range rules
    ValidationRule(
        code="range_error:quantity",
        description="Line item quantities must not be negative",
        category=ErrorCategory.RANGE_ERROR,
        check=check_quantities,
    ),
    ValidationRule(
        code="range_error:unit_price",
        description="Line item unit prices must not be negative",
        category=ErrorCategory.RANGE_ERROR,
        check=check_unit_prices,
    ),
    ValidationRule(
        code="range_error:discount",
        description="Discounts must be 0-100% or a flat amount up to the line gross",
        category=ErrorCategory.RANGE_ERROR,
        check=check_discounts,
    ),
    ValidationRule(
        code="range_error:tax_rate",
        description="Tax rates must be between 0 and 100 percent",
        category=ErrorCategory.RANGE_ERROR,
        check=check_tax_rates,
    ),
    ValidationRule(
        code="range_error:shipping",
        description="Shipping must not be negative",
        category=ErrorCategory.RANGE_ERROR,
        check=check_shipping,
    ),
    ValidationRule(
        code="range_error:additional_charge",
        description="Additional charges must not be negative",
        category=ErrorCategory.RANGE_ERROR,
        check=check_additional_charges,
    ),
    ValidationRule(
        code="range_error:amount",
        description="The document total must not exceed the configured maximum amount",
        category=ErrorCategory.RANGE_ERROR,
        check=check_total_amount,
    ),

    # Business rules
    ValidationRule(
        code="business_rule:date_fields",
        description="Invoices/bills need a due date, quotations a validity date",
        category=ErrorCategory.BUSINESS_RULE,
        check=check_date_fields,
    ),
    ValidationRule(
        code="business_rule:invalid_due_date",
        description="Due/validity date must not be earlier than the document date",
        category=ErrorCategory.BUSINESS_RULE,
        check=check_due_date_valid,
    ),
]


def get_rules_by_category(category: ErrorCategory) -> list[ValidationRule]:
    """Get all rules belonging to a specific category."""
    return [rule for rule in VALIDATION_RULES if rule.category == category]


def get_rule_descriptions() -> dict[str, str]:
    """Get a mapping of rule codes to their descriptions."""
    return {rule.code: rule.description for rule in VALIDATION_RULES}
