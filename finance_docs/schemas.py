"""
Pydantic models for document descriptions and computed results.

This module defines the core data structures used throughout Finance Docs:
- DocumentDescription and its parts (parties, line items, taxes, charges)
- TotalsModel with per-line amounts and the tax breakup
- DerivedArtifacts (amount in words, payment QR)
- GeneratedOutputs, the combined result of one generation run

Numeric ranges are deliberately not constrained here: out-of-range values
must reach the validation rules so they are reported with rule codes.
"""

from datetime import date
from decimal import Decimal
from typing import Annotated, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, PlainSerializer, field_validator

from .config import DEFAULT_CURRENCY, DocumentType, FormatKind, RoundingPolicy


# Decimal amounts travel as JSON numbers
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


# ============================================================================
# Document Description
# ============================================================================

class Tax(BaseModel):
    """A named tax applied to a line item's discounted amount."""
    name: str = Field(..., min_length=1, description="Tax name, e.g. CGST, SGST, IGST")
    rate: Money = Field(..., description="Rate in percent")

    model_config = {"frozen": True}


class Discount(BaseModel):
    """Per-line discount, applied to the gross amount before tax."""
    type: Literal["percent", "flat"] = Field(..., description="Percent of gross, or a flat amount")
    value: Money = Field(..., description="Percentage (0-100) or flat amount")

    model_config = {"frozen": True}


class LineItem(BaseModel):
    """
    One billable row of a document.

    Attributes:
        description: Text description of the item or service
        hsn_sac: Optional HSN/SAC tax classification code
        quantity: Number of units
        unit: Free-text unit (e.g., "hrs", "pcs", "project")
        unit_price: Price per unit
        discount: Optional discount applied before tax
        tax: Taxes applied additively to the discounted amount
    """
    description: str = Field(..., description="Item or service description")
    hsn_sac: Optional[str] = Field(None, description="HSN/SAC classification code")
    quantity: Money = Field(..., description="Number of units")
    unit: str = Field("unit", description="Unit of measure")
    unit_price: Money = Field(..., description="Price per unit")
    discount: Optional[Discount] = Field(None, description="Optional discount")
    tax: list[Tax] = Field(default_factory=list, description="Taxes applied to this line")

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [
                {
                    "description": "Brand identity design",
                    "hsn_sac": "998391",
                    "quantity": 2,
                    "unit": "unit",
                    "unit_price": 500,
                    "discount": {"type": "percent", "value": 10},
                    "tax": [{"name": "CGST", "rate": 9}, {"name": "SGST", "rate": 9}],
                }
            ]
        },
    }


class ContactProfile(BaseModel):
    """Contact details of the issuing company or the billed party."""
    name: str = Field(..., description="Legal or display name")
    address: Optional[str] = Field(None, description="Postal address")
    tax_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("tax_id", "gst"),
        description="Tax identification number (GSTIN, VAT ID, ...)",
    )
    email: Optional[str] = Field(None, description="Contact email")
    phone: Optional[str] = Field(None, description="Contact phone")
    tagline: Optional[str] = Field(None, description="Optional tagline")
    website: Optional[str] = Field(None, description="Optional website")
    logo_url: Optional[str] = Field(None, description="Optional logo URL")

    model_config = {"frozen": True}


class AdditionalCharge(BaseModel):
    """A labelled charge added after taxes (delivery fee, surcharge, ...)."""
    label: str = Field(..., description="Charge label")
    amount: Money = Field(..., description="Charge amount")

    model_config = {"frozen": True}


class BankDetails(BaseModel):
    """Bank and UPI details printed on the document and used for the payment QR."""
    account_name: Optional[str] = None
    account_no: Optional[str] = None
    bank: Optional[str] = None
    ifsc: Optional[str] = Field(None, description="Bank routing code")
    upi_id: Optional[str] = Field(None, description="UPI payee address, e.g. studio@okbank")

    model_config = {"frozen": True}


class OutputPreferences(BaseModel):
    """Which formats to render and which derived sections to show."""
    formats: list[FormatKind] = Field(
        default_factory=lambda: list(FormatKind),
        description="Requested output formats",
    )
    show_amount_in_words: bool = Field(True, description="Include the amount-in-words section")
    show_qr: bool = Field(True, description="Include the payment QR section")

    @field_validator("formats")
    @classmethod
    def dedupe_formats(cls, v: list[FormatKind]) -> list[FormatKind]:
        """Drop repeated formats, keeping the first occurrence."""
        return list(dict.fromkeys(v))

    model_config = {"frozen": True}


class DocumentDescription(BaseModel):
    """
    Complete description of an invoice, quotation or bill.

    Supplied fresh on every recompute and never mutated by the engine.
    """

    # ========================================================================
    # Identity & Dates
    # ========================================================================
    document_type: DocumentType = Field(..., description="invoice, quotation or bill")
    doc_no: str = Field(..., min_length=1, description="Document number")
    doc_date: date = Field(..., description="Date of issue")
    due_date: Optional[date] = Field(None, description="Payment due date (invoice/bill)")
    valid_until: Optional[date] = Field(None, description="Offer validity date (quotation)")
    currency: str = Field(DEFAULT_CURRENCY, min_length=3, max_length=3, description="ISO currency code")

    # ========================================================================
    # Parties
    # ========================================================================
    company: ContactProfile = Field(..., description="Issuing company")
    bill_to: ContactProfile = Field(..., description="Billed party")

    # ========================================================================
    # Amounts
    # ========================================================================
    line_items: list[LineItem] = Field(default_factory=list, description="Ordered line items")
    shipping: Money = Field(Decimal("0"), description="Shipping, added after taxes")
    additional_charges: list[AdditionalCharge] = Field(default_factory=list)
    rounding: RoundingPolicy = Field(RoundingPolicy.NONE, description="Grand-total rounding policy")

    # ========================================================================
    # Footer
    # ========================================================================
    notes: Optional[str] = None
    terms: list[str] = Field(default_factory=list)
    bank_details: Optional[BankDetails] = None
    outputs: OutputPreferences = Field(default_factory=OutputPreferences)

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        """Normalize currency code to uppercase."""
        return v.upper().strip()

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [
                {
                    "document_type": "invoice",
                    "doc_no": "INV-2024-001",
                    "doc_date": "2024-01-15",
                    "due_date": "2024-01-30",
                    "currency": "INR",
                    "company": {"name": "Design Arena Studio", "gst": "29ABCDE1234F1Z5"},
                    "bill_to": {"name": "Northwind Traders"},
                    "line_items": [
                        {
                            "description": "Brand identity design",
                            "quantity": 2,
                            "unit": "unit",
                            "unit_price": 500,
                            "tax": [{"name": "CGST", "rate": 9}, {"name": "SGST", "rate": 9}],
                        }
                    ],
                    "rounding": "nearest",
                    "bank_details": {"account_name": "Design Arena Studio", "upi_id": "studio@okbank"},
                    "outputs": {
                        "formats": ["markdown", "json"],
                        "show_amount_in_words": True,
                        "show_qr": False,
                    },
                }
            ]
        },
    }


# ============================================================================
# Computed Totals
# ============================================================================

class LineAmounts(BaseModel):
    """Computed amounts for one line item, in input order."""
    index: int = Field(..., ge=1, description="1-based position of the line")
    gross: Money = Field(..., description="quantity x unit_price")
    discount: Money = Field(..., description="Discount taken off the gross amount")
    net: Money = Field(..., description="Discounted, pre-tax amount (the tax base)")
    tax: Money = Field(..., description="Sum of taxes on this line")
    total: Money = Field(..., description="net + tax")
    taxes: dict[str, Money] = Field(default_factory=dict, description="Tax amount per tax name")

    model_config = {"frozen": True}


class TotalsModel(BaseModel):
    """
    Verified totals for a document.

    ``tax_breakup`` buckets sum to ``taxes``; ``rounded_grand_total`` is
    ``pre_rounding_total + rounding_adjustment``.
    """
    currency: str
    rounding: RoundingPolicy
    lines: list[LineAmounts] = Field(default_factory=list)
    subtotal: Money = Field(..., description="Sum of discounted line amounts")
    discount_total: Money = Field(..., description="Sum of line discounts")
    taxes: Money = Field(..., description="Sum of all line taxes")
    tax_breakup: dict[str, Money] = Field(default_factory=dict, description="Tax name -> aggregated amount")
    shipping: Money
    additional_charges_total: Money
    pre_rounding_total: Money = Field(..., description="subtotal + taxes + shipping + charges")
    rounding_adjustment: Money
    rounded_grand_total: Money

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [
                {
                    "currency": "INR",
                    "rounding": "nearest",
                    "subtotal": 1000.0,
                    "discount_total": 0.0,
                    "taxes": 180.0,
                    "tax_breakup": {"CGST": 90.0, "SGST": 90.0},
                    "shipping": 0.0,
                    "additional_charges_total": 0.0,
                    "pre_rounding_total": 1180.0,
                    "rounding_adjustment": 0.0,
                    "rounded_grand_total": 1180.0,
                }
            ]
        },
    }


# ============================================================================
# Derived Artifacts & Results
# ============================================================================

class PaymentQR(BaseModel):
    """A UPI payment request and its QR image (absent if it could not be encoded)."""
    uri_string: str = Field(..., description="upi://pay?... deep link")
    image_payload: Optional[str] = Field(None, description="data:image/png;base64,... QR image")

    model_config = {"frozen": True}


class DerivedArtifacts(BaseModel):
    """Artifacts derived from the totals, switched by the output preferences."""
    amount_in_words: Optional[str] = None
    payment: Optional[PaymentQR] = None

    model_config = {"frozen": True}


class GeneratedOutputs(BaseModel):
    """
    Result of one generation run.

    ``outputs`` holds exactly the requested formats that rendered; formats
    whose renderer failed appear in ``render_errors`` instead.
    """
    totals: TotalsModel
    amount_in_words: Optional[str] = None
    qr_uri_string: Optional[str] = None
    qr_image_payload: Optional[str] = None
    outputs: dict[str, str] = Field(default_factory=dict, description="Format -> rendered text")
    render_errors: dict[str, str] = Field(default_factory=dict, description="Format -> error message")

    model_config = {"frozen": True}


# ============================================================================
# API Request/Response Models
# ============================================================================

class AmountInWordsRequest(BaseModel):
    """Request body for the /amount-in-words endpoint."""
    amount: Decimal = Field(..., description="Amount to convert")
    currency: str = Field(DEFAULT_CURRENCY, description="ISO currency code")

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.upper().strip()


class AmountInWordsResponse(BaseModel):
    """Response for the /amount-in-words endpoint."""
    amount: Money
    currency: str
    words: str
