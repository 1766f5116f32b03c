"""
UPI payment request builder.

Builds a ``upi://pay`` deep link for the document's grand total and encodes
it as a PNG QR code data URL. Encoding is deterministic and touches no
network or filesystem.
"""

import base64
from decimal import ROUND_HALF_UP, Decimal
from io import BytesIO
from typing import Optional
from urllib.parse import quote, urlencode

import qrcode
from qrcode.exceptions import DataOverflowError

from .config import DEFAULT_CURRENCY, QR_BORDER, QR_BOX_SIZE, QR_MAX_VERSION, logger
from .schemas import BankDetails, PaymentQR


def build_upi_uri(
    upi_id: str,
    payee_name: str,
    amount: Decimal,
    currency: str = DEFAULT_CURRENCY,
    note: Optional[str] = None,
) -> str:
    """
    Build a UPI deep link.

    Example:
        upi://pay?pa=studio@okbank&pn=Design%20Arena&am=1180.00&cu=INR
    """
    params = {
        "pa": upi_id.strip(),
        "pn": payee_name.strip(),
        "am": str(Decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)),
        "cu": currency,
    }
    if note:
        params["tn"] = note
    return "upi://pay?" + urlencode(params, quote_via=quote, safe="@")


def encode_qr_image(data: str) -> Optional[str]:
    """
    Encode a string as a PNG QR code and return it as a data URL.

    Returns None when the data does not fit in a symbol of QR_MAX_VERSION.
    """
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=QR_BOX_SIZE,
        border=QR_BORDER,
    )
    qr.add_data(data)
    try:
        qr.make(fit=True)
    except DataOverflowError:
        logger.warning(f"QR payload of {len(data)} chars exceeds QR capacity")
        return None

    if qr.version > QR_MAX_VERSION:
        logger.warning(f"QR payload needs version {qr.version}, above limit {QR_MAX_VERSION}")
        return None

    img = qr.make_image(fill_color="black", back_color="white")
    buffer = BytesIO()
    img.save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")


def build_payment(
    bank: Optional[BankDetails],
    amount: Decimal,
    payee_name: Optional[str] = None,
    currency: str = DEFAULT_CURRENCY,
    note: Optional[str] = None,
) -> Optional[PaymentQR]:
    """
    Build the payment request for a document.

    Args:
        bank: Bank details; only ``upi_id`` and ``account_name`` are used
        amount: Amount to request (the rounded grand total)
        payee_name: Fallback payee name when the bank account name is empty
        currency: ISO currency code
        note: Optional transaction note, e.g. the document number

    Returns:
        PaymentQR, or None when no UPI id is configured. If the URI cannot be
        encoded, ``image_payload`` is None and the URI is still returned.
    """
    if bank is None or not bank.upi_id or not bank.upi_id.strip():
        return None

    name = bank.account_name or payee_name or ""
    uri = build_upi_uri(bank.upi_id, name, amount, currency, note)
    return PaymentQR(uri_string=uri, image_payload=encode_qr_image(uri))
