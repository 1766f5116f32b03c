"""
Validation engine for document descriptions.

Runs every rule against a document and raises a single ValidationError
listing all failures, so no totals are computed from malformed input.
"""

from typing import Optional

from .config import logger
from .exceptions import ValidationError
from .rules import VALIDATION_RULES, ValidationRule
from .schemas import DocumentDescription


def collect_errors(
    doc: DocumentDescription,
    rules: Optional[list[ValidationRule]] = None
) -> list[str]:
    """
    Run all rules against a document.

    Args:
        doc: The DocumentDescription to check
        rules: Optional list of rules to apply (defaults to all VALIDATION_RULES)

    Returns:
        List of error codes, in rule order; empty when the document is valid
    """
    if rules is None:
        rules = VALIDATION_RULES

    errors: list[str] = []
    for rule in rules:
        error_code = rule.check(doc)
        if error_code:
            errors.append(error_code)
    return errors


def validate_document(
    doc: DocumentDescription,
    rules: Optional[list[ValidationRule]] = None
) -> None:
    """
    Validate a document, raising if any rule fails.

    Raises:
        ValidationError: with ``errors`` set to every failing rule code
    """
    errors = collect_errors(doc, rules)
    if errors:
        logger.info(f"Document {doc.doc_no} failed validation: {', '.join(errors)}")
        raise ValidationError(
            f"Document {doc.doc_no} is invalid: {', '.join(errors)}",
            errors=errors,
        )
