"""
Configuration constants and enums for the Finance Docs engine.
"""

import logging
import os
from decimal import Decimal
from enum import Enum
from typing import Final


# ============================================================================
# Document Enums
# ============================================================================

class DocumentType(str, Enum):
    """Kinds of business document the engine can generate."""
    INVOICE = "invoice"
    QUOTATION = "quotation"
    BILL = "bill"


class RoundingPolicy(str, Enum):
    """Grand-total rounding policies."""
    NONE = "none"
    NEAREST = "nearest"
    UP = "up"
    DOWN = "down"


class FormatKind(str, Enum):
    """Output formats produced by the renderers."""
    MARKDOWN = "markdown"
    HTML_EMAIL = "html_email"
    PDF_READY = "pdf_ready"
    JSON = "json"


# File extensions used when writing rendered outputs to disk
FORMAT_EXTENSIONS: Final[dict[str, str]] = {
    FormatKind.MARKDOWN.value: "md",
    FormatKind.HTML_EMAIL.value: "html",
    FormatKind.PDF_READY.value: "html",
    FormatKind.JSON.value: "json",
}

# ============================================================================
# Currencies
# ============================================================================

DEFAULT_CURRENCY: Final[str] = os.getenv("DEFAULT_CURRENCY", "INR")

SUPPORTED_CURRENCIES: Final[set[str]] = {
    "INR",  # Indian Rupee
    "USD",  # US Dollar
    "EUR",  # Euro
    "GBP",  # British Pound
    "AED",  # UAE Dirham
    "SGD",  # Singapore Dollar
}

CURRENCY_SYMBOLS: Final[dict[str, str]] = {
    "INR": "₹",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "AED": "AED ",
    "SGD": "S$",
}

# (major unit, minor unit) names used for amount-in-words
CURRENCY_UNITS: Final[dict[str, tuple[str, str]]] = {
    "INR": ("Rupees", "Paise"),
    "USD": ("Dollars", "Cents"),
    "EUR": ("Euros", "Cents"),
    "GBP": ("Pounds", "Pence"),
    "AED": ("Dirhams", "Fils"),
    "SGD": ("Dollars", "Cents"),
}

# ============================================================================
# Computation Limits & Tolerances
# ============================================================================

# Tolerance for amount comparisons: one minor currency unit
AMOUNT_TOLERANCE: Final[float] = float(os.getenv("AMOUNT_TOLERANCE", "0.01"))

# Highest tax rate (percent) accepted on a line item
MAX_TAX_RATE: Final[float] = float(os.getenv("MAX_TAX_RATE", "100"))

# Largest document total the engine will compute; en_IN words stop below 1000 crore
MAX_AMOUNT: Final[Decimal] = Decimal(os.getenv("MAX_AMOUNT", "9999999999"))

# ============================================================================
# Display
# ============================================================================

DISPLAY_DATE_FORMAT: Final[str] = "%d %b %Y"  # 15 Jan 2024

DOCUMENT_TITLES: Final[dict[str, str]] = {
    DocumentType.INVOICE.value: "Tax Invoice",
    DocumentType.QUOTATION.value: "Quotation",
    DocumentType.BILL.value: "Bill",
}

# ============================================================================
# Payment QR
# ============================================================================

QR_BOX_SIZE: Final[int] = int(os.getenv("QR_BOX_SIZE", "8"))
QR_BORDER: Final[int] = int(os.getenv("QR_BORDER", "4"))
# Payloads that need a larger symbol than this are not encoded
QR_MAX_VERSION: Final[int] = int(os.getenv("QR_MAX_VERSION", "20"))

# ============================================================================
# Error Code Prefixes
# ============================================================================

class ErrorCategory(str, Enum):
    """Categories for validation error codes."""
    MISSING_FIELD = "missing_field"
    FORMAT_ERROR = "format_error"
    RANGE_ERROR = "range_error"
    BUSINESS_RULE = "business_rule"


# ============================================================================
# Recompute Orchestrator
# ============================================================================

ORCHESTRATOR_MAX_WORKERS: Final[int] = int(os.getenv("ORCHESTRATOR_MAX_WORKERS", "4"))

# ============================================================================
# API Configuration
# ============================================================================

API_HOST: Final[str] = os.getenv("API_HOST", "0.0.0.0")
API_PORT: Final[int] = int(os.getenv("API_PORT", "8000"))

# ============================================================================
# Logging Configuration
# ============================================================================

LOG_LEVEL: Final[str] = os.getenv("LOG_LEVEL", "INFO")

def setup_logging() -> logging.Logger:
    """Configure and return the application logger."""
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("finance_docs")


logger = setup_logging()
