"""
FastAPI application for Finance Docs.

Provides REST API endpoints for:
- Health check
- Document generation (totals plus rendered formats)
- Totals and amount-in-words
- Live preview backed by the recompute orchestrator
"""

from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .calculator import compute_totals
from .config import API_HOST, API_PORT, logger
from .exceptions import ValidationError
from .generator import generate_outputs
from .orchestrator import PublishedState, RecomputeOrchestrator
from .samples import default_document
from .schemas import (
    AmountInWordsRequest,
    AmountInWordsResponse,
    DocumentDescription,
    GeneratedOutputs,
    TotalsModel,
)
from .words import amount_to_words, units_for


# ============================================================================
# FastAPI App Configuration
# ============================================================================

app = FastAPI(
    title="Finance Docs API",
    description="""
    Business document generation API.

    Computes verified totals for invoices, quotations and bills and renders
    them as Markdown, HTML email, print-ready HTML and canonical JSON.

    ## Features

    - **Generate**: Totals, amount in words, UPI payment QR and all requested formats
    - **Totals**: Subtotal, tax breakup, charges and rounded grand total
    - **Preview**: Live recompute where only the latest edit is ever published
    """,
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Configure CORS for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# One orchestrator backs the live preview
orchestrator = RecomputeOrchestrator()


# ============================================================================
# Request/Response Models
# ============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str


class PreviewState(BaseModel):
    """The currently published preview."""
    generation: int
    status: str
    outputs: Optional[GeneratedOutputs] = None
    error: Optional[str] = None
    error_codes: List[str] = []


class PreviewResponse(BaseModel):
    """Response for the preview endpoints."""
    latest_generation: int
    run_generation: Optional[int] = None
    run_status: Optional[str] = None
    published: Optional[PreviewState] = None


def _preview_state(state: Optional[PublishedState]) -> Optional[PreviewState]:
    if state is None:
        return None
    return PreviewState(
        generation=state.generation,
        status=state.status.value,
        outputs=state.outputs,
        error=state.error,
        error_codes=state.error_codes,
    )


# ============================================================================
# API Endpoints
# ============================================================================

@app.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check() -> HealthResponse:
    """
    Health check endpoint.

    Returns the service status and version information.
    """
    from . import __version__
    return HealthResponse(status="ok", version=__version__)


@app.post(
    "/generate",
    response_model=GeneratedOutputs,
    response_model_exclude_none=True,
    tags=["Documents"],
    summary="Generate a document in all requested formats",
)
def generate(doc: DocumentDescription) -> GeneratedOutputs:
    """
    Compute totals and render every requested format.

    **Result:**
    - `totals`: subtotal, tax breakup, charges, rounding and grand total
    - `amount_in_words`, `qr_uri_string`, `qr_image_payload` when switched on
    - `outputs`: one entry per requested format
    - `render_errors`: formats whose renderer failed

    Malformed documents are rejected with 422 and the failing rule codes.
    """
    logger.info(f"Received generate request for {doc.doc_no}")
    return generate_outputs(doc)


@app.post("/totals", response_model=TotalsModel, tags=["Documents"], summary="Compute totals")
def totals(doc: DocumentDescription) -> TotalsModel:
    """Compute the totals model of a document without rendering it."""
    return compute_totals(doc)


@app.post(
    "/amount-in-words",
    response_model=AmountInWordsResponse,
    tags=["Documents"],
    summary="Spell an amount in words",
)
def amount_in_words(request: AmountInWordsRequest) -> AmountInWordsResponse:
    """Spell an amount using the Indian numbering system (lakh, crore)."""
    words = amount_to_words(request.amount, units_for(request.currency))
    return AmountInWordsResponse(amount=request.amount, currency=request.currency, words=words)


@app.post(
    "/preview",
    response_model=PreviewResponse,
    response_model_exclude_none=True,
    tags=["Preview"],
    summary="Submit an edit",
)
async def submit_preview(doc: DocumentDescription) -> PreviewResponse:
    """
    Recompute the live preview for an edited document.

    Overlapping submissions are allowed; only the most recent one is
    published. A submission that was overtaken reports `superseded`, and
    `published` then shows the newer result (or nothing yet).
    """
    run = await orchestrator.recompute_async(doc)
    return PreviewResponse(
        latest_generation=orchestrator.latest_generation,
        run_generation=run.generation,
        run_status=run.status.value,
        published=_preview_state(orchestrator.current),
    )


@app.get(
    "/preview",
    response_model=PreviewResponse,
    response_model_exclude_none=True,
    tags=["Preview"],
    summary="Current preview",
)
async def get_preview() -> PreviewResponse:
    """Return the currently published preview, if any."""
    return PreviewResponse(
        latest_generation=orchestrator.latest_generation,
        published=_preview_state(orchestrator.current),
    )


@app.get("/sample", response_model=DocumentDescription, tags=["Documents"])
async def sample() -> DocumentDescription:
    """Return a sample document description to start editing from."""
    return default_document()


@app.get("/rules", tags=["System"])
async def list_rules():
    """
    List all validation rules applied before totals are computed.

    Returns the rule codes and descriptions, organized by category.
    """
    from .rules import VALIDATION_RULES, get_rules_by_category
    from .config import ErrorCategory

    rules_by_category = {}
    for category in ErrorCategory:
        category_rules = get_rules_by_category(category)
        if category_rules:
            rules_by_category[category.value] = [
                {"code": rule.code, "description": rule.description}
                for rule in category_rules
            ]

    return {
        "total_rules": len(VALIDATION_RULES),
        "rules_by_category": rules_by_category,
    }


# ============================================================================
# Error Handlers
# ============================================================================

@app.exception_handler(ValidationError)
async def document_validation_handler(request: Request, exc: ValidationError):
    """Report malformed documents with their rule codes."""
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc), "errors": exc.errors},
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


# ============================================================================
# Startup/Shutdown Events
# ============================================================================

@app.on_event("startup")
async def startup_event():
    """Log startup information."""
    logger.info(f"Finance Docs API starting on {API_HOST}:{API_PORT}")


@app.on_event("shutdown")
async def shutdown_event():
    """Stop the preview worker pool."""
    orchestrator.shutdown(wait=False)
    logger.info("Finance Docs API shutting down")


# ============================================================================
# Main Entry Point
# ============================================================================

def run_server():
    """Run the API server using uvicorn."""
    import uvicorn
    uvicorn.run(app, host=API_HOST, port=API_PORT)


if __name__ == "__main__":
    run_server()
