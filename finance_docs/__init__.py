"""
Finance Docs

Computes verified totals for invoices, quotations and bills and renders
them as Markdown, HTML email, print-ready HTML and canonical JSON, with a
live-recompute orchestrator that only ever publishes the newest result.
"""

__version__ = "0.1.0"
__author__ = "Finance Docs Team"

from .schemas import DocumentDescription, LineItem, TotalsModel, GeneratedOutputs
from .exceptions import DocumentEngineError, ValidationError, RenderError
from .calculator import compute_totals
from .words import amount_to_words
from .payment_qr import build_payment
from .renderers import render_markdown, render_html_email, render_pdf_ready, render_json
from .generator import generate_outputs
from .orchestrator import RecomputeOrchestrator, RunStatus

__all__ = [
    "DocumentDescription",
    "LineItem",
    "TotalsModel",
    "GeneratedOutputs",
    "DocumentEngineError",
    "ValidationError",
    "RenderError",
    "compute_totals",
    "amount_to_words",
    "build_payment",
    "render_markdown",
    "render_html_email",
    "render_pdf_ready",
    "render_json",
    "generate_outputs",
    "RecomputeOrchestrator",
    "RunStatus",
]
