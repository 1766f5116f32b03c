"""
Command-line interface for Finance Docs.

Provides the following commands:
- generate: Compute totals and write every requested output format
- totals: Print the computed totals of a document
- words: Spell an amount using the Indian numbering system
- sample: Write a sample document description to start from
"""

import json
import re
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError as PydanticValidationError

from .calculator import compute_totals
from .config import FORMAT_EXTENSIONS, FormatKind, logger
from .exceptions import ValidationError
from .formatting import format_totals_text
from .generator import generate_outputs
from .samples import default_document
from .schemas import DocumentDescription
from .words import amount_to_words, units_for


# Create Typer app
app = typer.Typer(
    name="finance-docs",
    help="Generate invoices, quotations and bills in multiple formats",
    add_completion=False,
)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def load_document(path: Path) -> DocumentDescription:
    """
    Parse a JSON file into a DocumentDescription.

    Exits with status 1 on malformed JSON or a payload that does not match
    the document schema; such input never reaches the engine.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return DocumentDescription.model_validate(data)
    except json.JSONDecodeError as e:
        typer.echo(f"Error: Invalid JSON in input file: {e}", err=True)
        raise typer.Exit(code=1)
    except PydanticValidationError as e:
        typer.echo(f"Error: Input does not describe a document:\n{e}", err=True)
        raise typer.Exit(code=1)


def output_filename(doc_no: str, fmt: str) -> str:
    """
    Build the <doc_no>-<format>.<ext> file name for a rendered output.

    Characters outside [A-Za-z0-9._-] (path separators included) become "-",
    so "INV/2024/001" is written as "INV-2024-001-markdown.md".
    """
    stem = _UNSAFE_FILENAME_CHARS.sub("-", doc_no).strip(".") or "document"
    kind = FormatKind(fmt)
    return f"{stem}-{kind.value}.{FORMAT_EXTENSIONS[kind]}"


def _report_validation_error(e: ValidationError) -> None:
    typer.echo(f"Error: {e}", err=True)
    for code in e.errors:
        typer.echo(f"  - {code}", err=True)


@app.command()
def generate(
    input_file: Path = typer.Option(
        ...,
        "--input",
        "-i",
        help="JSON file containing the document description",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
    out_dir: Path = typer.Option(
        Path("."),
        "--out-dir",
        "-o",
        help="Directory to write rendered outputs to",
        file_okay=False,
        dir_okay=True,
    ),
    formats: Optional[List[FormatKind]] = typer.Option(
        None,
        "--format",
        "-f",
        help="Format to render (repeatable); defaults to the document's own preferences",
    ),
) -> None:
    """
    Render a document into its requested output formats.

    Each format is written to <doc_no>-<format>.<ext> in the output directory.
    """
    doc = load_document(input_file)
    if formats:
        preferences = doc.outputs.model_copy(update={"formats": list(dict.fromkeys(formats))})
        doc = doc.model_copy(update={"outputs": preferences})

    try:
        result = generate_outputs(doc)
    except ValidationError as e:
        _report_validation_error(e)
        raise typer.Exit(code=1)

    out_dir.mkdir(parents=True, exist_ok=True)
    for fmt, content in result.outputs.items():
        target = out_dir / output_filename(doc.doc_no, fmt)
        target.write_text(content, encoding="utf-8")
        typer.echo(f"[OK] {fmt:<10} -> {target}")

    for fmt, message in result.render_errors.items():
        typer.echo(f"[FAILED] {fmt:<10} {message}", err=True)

    typer.echo("\n" + format_totals_text(result.totals))
    if result.amount_in_words:
        typer.echo(f"\n{result.amount_in_words}")

    if result.render_errors:
        raise typer.Exit(code=1)


@app.command()
def totals(
    input_file: Path = typer.Option(
        ...,
        "--input",
        "-i",
        help="JSON file containing the document description",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the totals model as JSON",
    ),
) -> None:
    """Compute and print the totals of a document."""
    doc = load_document(input_file)

    try:
        result = compute_totals(doc)
    except ValidationError as e:
        _report_validation_error(e)
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(result.model_dump_json(indent=2))
    else:
        typer.echo(format_totals_text(result))


@app.command()
def words(
    amount: str = typer.Argument(..., help="Amount to spell, e.g. 1180.50"),
    currency: str = typer.Option("INR", "--currency", "-c", help="ISO currency code"),
) -> None:
    """Spell an amount in words (Indian numbering system)."""
    try:
        value = Decimal(amount)
    except InvalidOperation:
        typer.echo(f"Error: Not a number: {amount}", err=True)
        raise typer.Exit(code=1)

    try:
        typer.echo(amount_to_words(value, units_for(currency)))
    except ValidationError as e:
        _report_validation_error(e)
        raise typer.Exit(code=1)


@app.command()
def sample(
    output: Path = typer.Option(
        "sample_document.json",
        "--output",
        "-o",
        help="Where to write the sample document",
    ),
) -> None:
    """Write a sample document description to start from."""
    doc = default_document()
    output.write_text(doc.model_dump_json(indent=2), encoding="utf-8")
    logger.info(f"Wrote sample document {doc.doc_no} to {output}")
    typer.echo(f"[OK] Sample document written to: {output}")


@app.command()
def version() -> None:
    """Show version information."""
    from . import __version__
    typer.echo(f"Finance Docs v{__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
