"""
Sample document used as the starting point for new documents.
"""

from datetime import date, timedelta
from typing import Optional

from .schemas import DocumentDescription


def default_document(today: Optional[date] = None) -> DocumentDescription:
    """Return a complete sample invoice dated ``today`` and due in 15 days."""
    issued = today or date.today()
    return DocumentDescription.model_validate({
        "document_type": "invoice",
        "doc_no": "DA-2024-001",
        "doc_date": issued.isoformat(),
        "due_date": (issued + timedelta(days=15)).isoformat(),
        "currency": "INR",
        "company": {
            "name": "Design Arena Studio",
            "tagline": "Brand, product and motion design",
            "address": "4th Floor, Indiranagar 100ft Road, Bengaluru 560038",
            "gst": "29ABCDE1234F1Z5",
            "email": "billing@designarena.in",
            "phone": "+91 98450 00000",
            "website": "designarena.in",
        },
        "bill_to": {
            "name": "Northwind Retail Pvt Ltd",
            "address": "12 MG Road, Bengaluru 560001",
            "gst": "29AAACN1234K1Z2",
            "email": "accounts@northwind.in",
            "phone": "+91 80 4000 0000",
        },
        "line_items": [
            {
                "description": "Brand identity system",
                "hsn_sac": "998391",
                "quantity": 1,
                "unit": "project",
                "unit_price": 85000,
                "discount": {"type": "percent", "value": 10},
                "tax": [{"name": "CGST", "rate": 9}, {"name": "SGST", "rate": 9}],
            },
            {
                "description": "Landing page design",
                "hsn_sac": "998391",
                "quantity": 12,
                "unit": "hrs",
                "unit_price": 2500,
                "tax": [{"name": "CGST", "rate": 9}, {"name": "SGST", "rate": 9}],
            },
        ],
        "shipping": 0,
        "additional_charges": [{"label": "Print proofs", "amount": 1499.5}],
        "rounding": "nearest",
        "notes": "Thank you for choosing Design Arena.",
        "terms": [
            "Payment due within 15 days of the invoice date.",
            "Late payments attract 1.5% interest per month.",
        ],
        "bank_details": {
            "account_name": "Design Arena Studio",
            "account_no": "50200012345678",
            "bank": "HDFC Bank, Indiranagar",
            "ifsc": "HDFC0000123",
            "upi_id": "designarena@hdfcbank",
        },
        "outputs": {
            "formats": ["markdown", "html_email", "pdf_ready", "json"],
            "show_amount_in_words": True,
            "show_qr": True,
        },
    })
