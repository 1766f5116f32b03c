"""
Shared fixtures for the Finance Docs tests.
"""

import copy

import pytest

from finance_docs.schemas import DocumentDescription


BASE_PAYLOAD = {
    "document_type": "invoice",
    "doc_no": "INV-2024-001",
    "doc_date": "2024-01-15",
    "due_date": "2024-01-30",
    "currency": "INR",
    "company": {
        "name": "Design Arena Studio",
        "address": "Indiranagar, Bengaluru",
        "gst": "29ABCDE1234F1Z5",
        "email": "billing@designarena.in",
        "phone": "+91 98450 00000",
    },
    "bill_to": {
        "name": "Northwind Traders",
        "address": "MG Road, Bengaluru",
        "gst": "29AAACN1234K1Z2",
    },
    "line_items": [
        {
            "description": "Brand identity design",
            "hsn_sac": "998391",
            "quantity": 2,
            "unit": "unit",
            "unit_price": 500,
            "tax": [{"name": "CGST", "rate": 9}, {"name": "SGST", "rate": 9}],
        }
    ],
    "shipping": 0,
    "additional_charges": [],
    "rounding": "nearest",
    "notes": "Thank you for your business.",
    "terms": ["Payment due within 15 days."],
    "bank_details": {
        "account_name": "Design Arena Studio",
        "account_no": "50200012345678",
        "bank": "HDFC Bank",
        "ifsc": "HDFC0000123",
        "upi_id": "studio@okbank",
    },
    "outputs": {
        "formats": ["markdown", "html_email", "pdf_ready", "json"],
        "show_amount_in_words": True,
        "show_qr": True,
    },
}


def build_payload(**overrides) -> dict:
    """Return a fresh copy of the base payload with top-level overrides applied."""
    payload = copy.deepcopy(BASE_PAYLOAD)
    payload.update(copy.deepcopy(overrides))
    return payload


def build_document(**overrides) -> DocumentDescription:
    """Build a DocumentDescription from the base payload plus overrides."""
    return DocumentDescription.model_validate(build_payload(**overrides))


@pytest.fixture
def payload() -> dict:
    """A valid document payload as plain JSON-compatible data."""
    return build_payload()


@pytest.fixture
def make_doc():
    """Factory fixture: make_doc(**overrides) -> DocumentDescription."""
    return build_document


@pytest.fixture
def valid_doc() -> DocumentDescription:
    """One line of 2 x 500 with CGST 9% and SGST 9%, rounded to nearest."""
    return build_document()


def build_line(**fields) -> dict:
    """A line-item payload; defaults to 1 x 1000 with no tax."""
    item = {"description": "Consulting", "quantity": 1, "unit": "hrs", "unit_price": 1000, "tax": []}
    item.update(fields)
    return item


@pytest.fixture
def make_line():
    """Factory fixture: make_line(**fields) -> line-item payload dict."""
    return build_line
