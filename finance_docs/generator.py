"""
Document generation pipeline.

Runs the totals calculator, derives the amount in words and the payment QR
when requested, and renders every requested format. A renderer failure is
scoped to its own format; a validation failure aborts the whole run.
"""

from .calculator import compute_totals
from .config import logger
from .exceptions import RenderError
from .payment_qr import build_payment
from .renderers import RENDERERS
from .schemas import DerivedArtifacts, DocumentDescription, GeneratedOutputs, TotalsModel
from .words import amount_to_words, units_for


def derive_artifacts(doc: DocumentDescription, totals: TotalsModel) -> DerivedArtifacts:
    """Build the amount in words and payment QR, each only if switched on."""
    words = None
    if doc.outputs.show_amount_in_words:
        words = amount_to_words(totals.rounded_grand_total, units_for(doc.currency))

    payment = None
    if doc.outputs.show_qr:
        payment = build_payment(
            doc.bank_details,
            totals.rounded_grand_total,
            payee_name=doc.company.name,
            currency=doc.currency,
            note=doc.doc_no,
        )

    return DerivedArtifacts(amount_in_words=words, payment=payment)


def generate_outputs(doc: DocumentDescription) -> GeneratedOutputs:
    """
    Compute totals and render all requested formats for a document.

    Args:
        doc: The document description

    Returns:
        GeneratedOutputs with one entry per requested format, either in
        ``outputs`` or, if its renderer failed, in ``render_errors``

    Raises:
        ValidationError: if the document is malformed (nothing is rendered)
    """
    logger.info(f"Generating {len(doc.outputs.formats)} format(s) for {doc.document_type.value} {doc.doc_no}")

    totals = compute_totals(doc)
    derived = derive_artifacts(doc, totals)

    outputs: dict[str, str] = {}
    render_errors: dict[str, str] = {}
    for fmt in doc.outputs.formats:
        try:
            outputs[fmt.value] = RENDERERS[fmt](doc, totals, derived)
        except RenderError as e:
            logger.warning(f"Rendering {fmt.value} failed for {doc.doc_no}: {e}")
            render_errors[fmt.value] = str(e)

    payment = derived.payment
    return GeneratedOutputs(
        totals=totals,
        amount_in_words=derived.amount_in_words,
        qr_uri_string=payment.uri_string if payment else None,
        qr_image_payload=payment.image_payload if payment else None,
        outputs=outputs,
        render_errors=render_errors,
    )
