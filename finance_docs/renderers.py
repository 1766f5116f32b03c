"""
Output renderers for computed documents.

Four independent pure functions, one per output format:
- render_markdown: plain-text document using Markdown headings and tables
- render_html_email: self-contained inline-styled HTML fragment
- render_pdf_ready: standalone print-oriented HTML page
- render_json: canonical JSON of the document, totals and derived artifacts

Each takes (doc, totals, derived) and returns a string. The helpers below
return plain values; no renderer keeps state between calls.
"""

import html
import json
import re
from typing import Callable, Optional

from .config import DocumentType, FormatKind
from .exceptions import RenderError
from .formatting import document_title, format_date, format_money, format_number
from .schemas import (
    BankDetails,
    ContactProfile,
    DerivedArtifacts,
    DocumentDescription,
    PaymentQR,
    TotalsModel,
)


Renderer = Callable[[DocumentDescription, TotalsModel, DerivedArtifacts], str]

# C0 controls (other than tab, newline, carriage return) and DEL have no
# representation in Markdown or HTML text
_UNRENDERABLE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


# ============================================================================
# Shared Helpers
# ============================================================================

def _iter_strings(value):
    if isinstance(value, str):
        yield value
    elif isinstance(value, dict):
        for item in value.values():
            yield from _iter_strings(item)
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from _iter_strings(item)


def _ensure_renderable(doc: DocumentDescription, fmt: FormatKind) -> None:
    for text in _iter_strings(doc.model_dump()):
        match = _UNRENDERABLE.search(text)
        if match:
            raise RenderError(
                fmt.value,
                f"unsupported control character {match.group()!r} in {text[:30]!r}",
            )


def _meta_rows(doc: DocumentDescription) -> list[tuple[str, str]]:
    """Document number and date rows for the header block."""
    rows = [(f"{doc.document_type.value.title()} No", doc.doc_no), ("Date", format_date(doc.doc_date))]
    if doc.document_type == DocumentType.QUOTATION:
        rows.append(("Valid Until", format_date(doc.valid_until)))
    else:
        rows.append(("Due Date", format_date(doc.due_date)))
    return rows


def _party_lines(profile: ContactProfile) -> list[str]:
    """Address block lines below the party name."""
    lines = []
    if profile.tagline:
        lines.append(profile.tagline)
    if profile.address:
        lines.append(profile.address)
    if profile.tax_id:
        lines.append(f"GSTIN: {profile.tax_id}")
    contact = [part for part in (profile.email, profile.phone, profile.website) if part]
    if contact:
        lines.append(" · ".join(contact))
    return lines


def _item_rows(doc: DocumentDescription, totals: TotalsModel) -> list[list[str]]:
    """Line-item table cells, in input order."""
    currency = totals.currency
    rows = []
    for item, line in zip(doc.line_items, totals.lines):
        rows.append([
            str(line.index),
            item.description,
            item.hsn_sac or "-",
            f"{format_number(item.quantity)} {item.unit}".strip(),
            format_money(item.unit_price, currency),
            format_money(line.discount, currency) if line.discount else "-",
            format_money(line.net, currency),
            format_money(line.tax, currency),
            format_money(line.total, currency),
        ])
    return rows


ITEM_HEADERS = ["#", "Description", "HSN/SAC", "Qty", "Rate", "Discount", "Taxable", "Tax", "Amount"]


def _summary_rows(doc: DocumentDescription, totals: TotalsModel) -> list[tuple[str, str]]:
    """Totals block rows, ending with the grand total."""
    currency = totals.currency
    rows = [("Subtotal", format_money(totals.subtotal, currency))]
    rates: dict[str, set] = {}
    for item in doc.line_items:
        for tax in item.tax:
            rates.setdefault(tax.name, set()).add(tax.rate)
    for name, amount in totals.tax_breakup.items():
        # Show the rate only when every line taxes this name at the same rate
        if len(rates[name]) == 1:
            label = f"{name} ({format_number(next(iter(rates[name])))}%)"
        else:
            label = name
        rows.append((label, format_money(amount, currency)))
    if totals.shipping:
        rows.append(("Shipping", format_money(totals.shipping, currency)))
    for charge in doc.additional_charges:
        rows.append((charge.label or "Additional charge", format_money(charge.amount, currency)))
    if totals.rounding_adjustment:
        rows.append(("Rounding Adjustment", format_money(totals.rounding_adjustment, currency)))
    rows.append(("Grand Total", format_money(totals.rounded_grand_total, currency)))
    return rows


def _bank_rows(bank: Optional[BankDetails]) -> list[tuple[str, str]]:
    if bank is None:
        return []
    fields = [
        ("Account Name", bank.account_name),
        ("Account No", bank.account_no),
        ("Bank", bank.bank),
        ("IFSC", bank.ifsc),
        ("UPI ID", bank.upi_id),
    ]
    return [(label, value) for label, value in fields if value]


def _words(doc: DocumentDescription, derived: DerivedArtifacts) -> Optional[str]:
    return derived.amount_in_words if doc.outputs.show_amount_in_words else None


def _payment(doc: DocumentDescription, derived: DerivedArtifacts) -> Optional[PaymentQR]:
    return derived.payment if doc.outputs.show_qr else None


def _terms(doc: DocumentDescription) -> list[str]:
    return [term.strip() for term in doc.terms if term.strip()]


# ============================================================================
# Markdown
# ============================================================================

def _md_cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\r\n", " ").replace("\n", " ")


def _md_table(headers: list[str], rows: list[list[str]], align: list[str]) -> list[str]:
    lines = [
        "| " + " | ".join(_md_cell(h) for h in headers) + " |",
        "|" + "|".join(align) + "|",
    ]
    for row in rows:
        lines.append("| " + " | ".join(_md_cell(cell) for cell in row) + " |")
    return lines


def render_markdown(doc: DocumentDescription, totals: TotalsModel, derived: DerivedArtifacts) -> str:
    """Render the document as Markdown, byte-stable for identical input."""
    _ensure_renderable(doc, FormatKind.MARKDOWN)

    out = [f"# {document_title(doc.document_type)}", "", f"**{_md_cell(doc.company.name)}**  "]
    out += [f"{_md_cell(line)}  " for line in _party_lines(doc.company)]
    out.append("")

    meta = _meta_rows(doc)
    out += _md_table([label for label, _ in meta], [[value for _, value in meta]], ["---"] * len(meta))
    out += ["", "## Bill To", "", f"**{_md_cell(doc.bill_to.name)}**  "]
    out += [f"{_md_cell(line)}  " for line in _party_lines(doc.bill_to)]

    out += ["", "## Items", ""]
    out += _md_table(ITEM_HEADERS, _item_rows(doc, totals), ["---:", "---", "---"] + ["---:"] * 6)

    out += ["", "## Summary", ""]
    summary = [[label, value] for label, value in _summary_rows(doc, totals)]
    summary[-1] = [f"**{summary[-1][0]}**", f"**{summary[-1][1]}**"]
    out += _md_table(["Particulars", "Amount"], summary, ["---", "---:"])

    words = _words(doc, derived)
    if words:
        out += ["", f"**Amount in words:** {words}"]

    payment = _payment(doc, derived)
    if payment:
        out += ["", "## Payment", "", f"Scan or open to pay via UPI: `{payment.uri_string}`"]
        if payment.image_payload:
            out += ["", f"![Payment QR]({payment.image_payload})"]

    if doc.notes and doc.notes.strip():
        out += ["", "## Notes", "", doc.notes.strip()]

    terms = _terms(doc)
    if terms:
        out += ["", "## Terms & Conditions", ""]
        out += [f"{i}. {term}" for i, term in enumerate(terms, start=1)]

    bank = _bank_rows(doc.bank_details)
    if bank:
        out += ["", "## Bank Details", ""]
        out += [f"- **{label}:** {value}" for label, value in bank]

    return "\n".join(out) + "\n"


# ============================================================================
# HTML Email
# ============================================================================

_E = html.escape

_EMAIL_CELL = "padding:8px 10px;border-bottom:1px solid #e5e7eb;font-size:13px;color:#1b1f3b;"
_EMAIL_HEAD = "padding:8px 10px;background:#1b1f3b;color:#ffffff;font-size:12px;text-align:left;"


def _email_party(title: str, profile: ContactProfile) -> str:
    lines = "".join(
        f'<div style="font-size:13px;color:#4b5563;">{_E(line)}</div>' for line in _party_lines(profile)
    )
    return (
        f'<td style="vertical-align:top;padding:0 12px 0 0;width:50%;">'
        f'<div style="font-size:11px;letter-spacing:2px;text-transform:uppercase;color:#c8aa6e;">{_E(title)}</div>'
        f'<div style="font-size:16px;font-weight:600;color:#1b1f3b;">{_E(profile.name)}</div>'
        f"{lines}</td>"
    )


def render_html_email(doc: DocumentDescription, totals: TotalsModel, derived: DerivedArtifacts) -> str:
    """Render an inline-styled HTML fragment for email bodies and previews."""
    _ensure_renderable(doc, FormatKind.HTML_EMAIL)

    parts = [
        '<div style="font-family:Arial,Helvetica,sans-serif;max-width:720px;margin:0 auto;'
        'background:#ffffff;border:1px solid #e5e7eb;border-radius:12px;padding:24px;">',
        f'<h1 style="margin:0 0 4px;font-size:22px;color:#1b1f3b;">{_E(document_title(doc.document_type))}</h1>',
        '<p style="margin:0 0 16px;font-size:13px;color:#4b5563;">'
        + " &middot; ".join(f"<strong>{_E(label)}:</strong> {_E(value)}" for label, value in _meta_rows(doc))
        + "</p>",
        '<table role="presentation" style="width:100%;border-collapse:collapse;margin-bottom:16px;"><tr>'
        + _email_party("From", doc.company)
        + _email_party("Bill To", doc.bill_to)
        + "</tr></table>",
    ]

    header = "".join(f'<th style="{_EMAIL_HEAD}">{_E(h)}</th>' for h in ITEM_HEADERS)
    body = "".join(
        "<tr>" + "".join(f'<td style="{_EMAIL_CELL}">{_E(cell)}</td>' for cell in row) + "</tr>"
        for row in _item_rows(doc, totals)
    )
    parts.append(
        '<table style="width:100%;border-collapse:collapse;margin-bottom:16px;">'
        f"<thead><tr>{header}</tr></thead><tbody>{body}</tbody></table>"
    )

    summary = _summary_rows(doc, totals)
    rows = "".join(
        f'<tr><td style="{_EMAIL_CELL}">{_E(label)}</td>'
        f'<td style="{_EMAIL_CELL}text-align:right;">{_E(value)}</td></tr>'
        for label, value in summary[:-1]
    )
    label, value = summary[-1]
    rows += (
        f'<tr><td style="{_EMAIL_CELL}font-weight:700;font-size:15px;">{_E(label)}</td>'
        f'<td style="{_EMAIL_CELL}font-weight:700;font-size:15px;text-align:right;">{_E(value)}</td></tr>'
    )
    parts.append(f'<table style="width:100%;max-width:360px;margin-left:auto;border-collapse:collapse;">{rows}</table>')

    words = _words(doc, derived)
    if words:
        parts.append(
            f'<p style="margin:12px 0;font-size:13px;color:#1b1f3b;"><strong>Amount in words:</strong> {_E(words)}</p>'
        )

    payment = _payment(doc, derived)
    if payment:
        parts.append('<div style="margin:16px 0;padding:12px;background:#f7f8fc;border-radius:8px;">')
        if payment.image_payload:
            parts.append(
                f'<img src="{_E(payment.image_payload)}" alt="UPI payment QR" width="140" height="140" '
                'style="display:block;margin-bottom:8px;">'
            )
        parts.append(
            f'<div style="font-size:12px;color:#4b5563;word-break:break-all;">{_E(payment.uri_string)}</div></div>'
        )

    if doc.notes and doc.notes.strip():
        notes = _E(doc.notes.strip()).replace("\n", "<br>")
        parts.append(
            '<h2 style="font-size:14px;color:#1b1f3b;margin:16px 0 4px;">Notes</h2>'
            f'<p style="margin:0;font-size:13px;color:#4b5563;">{notes}</p>'
        )

    terms = _terms(doc)
    if terms:
        items = "".join(f"<li>{_E(term)}</li>" for term in terms)
        parts.append(
            '<h2 style="font-size:14px;color:#1b1f3b;margin:16px 0 4px;">Terms &amp; Conditions</h2>'
            f'<ol style="margin:0;padding-left:18px;font-size:13px;color:#4b5563;">{items}</ol>'
        )

    bank = _bank_rows(doc.bank_details)
    if bank:
        items = "".join(f"<li><strong>{_E(label)}:</strong> {_E(value)}</li>" for label, value in bank)
        parts.append(
            '<h2 style="font-size:14px;color:#1b1f3b;margin:16px 0 4px;">Bank Details</h2>'
            f'<ul style="margin:0;padding-left:18px;font-size:13px;color:#4b5563;">{items}</ul>'
        )

    parts.append("</div>")
    return "\n".join(parts)


# ============================================================================
# PDF-ready HTML
# ============================================================================

PRINT_CSS = """
@page { size: A4; margin: 12mm; }
* { box-sizing: border-box; }
body { margin: 0; font-family: Arial, Helvetica, sans-serif; color: #1b1f3b; font-size: 11px; }
.page { width: 186mm; min-height: 273mm; margin: 0 auto; }
.header { display: flex; justify-content: space-between; border-bottom: 2px solid #1b1f3b; padding-bottom: 8px; }
.header h1 { margin: 0; font-size: 20px; text-transform: uppercase; letter-spacing: 2px; }
.logo { max-height: 48px; }
.meta td { padding: 2px 8px 2px 0; }
.parties { display: flex; gap: 16px; margin: 12px 0; }
.party { flex: 1; }
.party .label { font-size: 9px; text-transform: uppercase; letter-spacing: 2px; color: #8a7440; }
.party .name { font-size: 13px; font-weight: bold; }
table.items { width: 100%; border-collapse: collapse; }
table.items th { background: #1b1f3b; color: #ffffff; padding: 6px; text-align: left; }
table.items td { padding: 6px; border-bottom: 1px solid #d1d5db; }
table.items td.num, table.items th.num { text-align: right; }
table.items tr { page-break-inside: avoid; }
table.summary { width: 45%; margin-left: auto; border-collapse: collapse; margin-top: 8px; }
table.summary td { padding: 4px 6px; }
table.summary td.num { text-align: right; }
table.summary tr.grand td { font-weight: bold; font-size: 13px; border-top: 2px solid #1b1f3b; }
.section { margin-top: 12px; page-break-inside: avoid; }
.section h2 { font-size: 12px; margin: 0 0 4px; text-transform: uppercase; }
.qr img { width: 120px; height: 120px; }
.qr .uri { font-size: 9px; word-break: break-all; }
@media print { .page { width: auto; min-height: auto; } }
""".strip()


def render_pdf_ready(doc: DocumentDescription, totals: TotalsModel, derived: DerivedArtifacts) -> str:
    """Render a standalone print-oriented HTML page for an external PDF converter."""
    _ensure_renderable(doc, FormatKind.PDF_READY)

    title = document_title(doc.document_type)
    company = doc.company
    logo = f'<img class="logo" src="{_E(company.logo_url)}" alt="{_E(company.name)}">' if company.logo_url else ""
    meta = "".join(f"<tr><td>{_E(label)}</td><td><strong>{_E(value)}</strong></td></tr>" for label, value in _meta_rows(doc))

    def party(label: str, profile: ContactProfile) -> str:
        lines = "".join(f"<div>{_E(line)}</div>" for line in _party_lines(profile))
        return f'<div class="party"><div class="label">{_E(label)}</div><div class="name">{_E(profile.name)}</div>{lines}</div>'

    numeric = {0, 3, 4, 5, 6, 7, 8}
    head = "".join(
        f'<th class="num">{_E(h)}</th>' if i in numeric else f"<th>{_E(h)}</th>" for i, h in enumerate(ITEM_HEADERS)
    )
    body = "".join(
        "<tr>"
        + "".join(
            f'<td class="num">{_E(cell)}</td>' if i in numeric else f"<td>{_E(cell)}</td>" for i, cell in enumerate(row)
        )
        + "</tr>"
        for row in _item_rows(doc, totals)
    )

    summary = _summary_rows(doc, totals)
    summary_html = "".join(
        f'<tr><td>{_E(label)}</td><td class="num">{_E(value)}</td></tr>' for label, value in summary[:-1]
    )
    label, value = summary[-1]
    summary_html += f'<tr class="grand"><td>{_E(label)}</td><td class="num">{_E(value)}</td></tr>'

    sections = []
    words = _words(doc, derived)
    if words:
        sections.append(f'<div class="section words"><strong>Amount in words:</strong> {_E(words)}</div>')

    payment = _payment(doc, derived)
    if payment:
        image = f'<img src="{_E(payment.image_payload)}" alt="UPI payment QR">' if payment.image_payload else ""
        sections.append(
            f'<div class="section qr"><h2>Scan to Pay</h2>{image}<div class="uri">{_E(payment.uri_string)}</div></div>'
        )

    if doc.notes and doc.notes.strip():
        notes = _E(doc.notes.strip()).replace("\n", "<br>")
        sections.append(f'<div class="section"><h2>Notes</h2><p>{notes}</p></div>')

    terms = _terms(doc)
    if terms:
        items = "".join(f"<li>{_E(term)}</li>" for term in terms)
        sections.append(f'<div class="section"><h2>Terms &amp; Conditions</h2><ol>{items}</ol></div>')

    bank = _bank_rows(doc.bank_details)
    if bank:
        rows = "".join(f"<tr><td>{_E(label)}</td><td><strong>{_E(value)}</strong></td></tr>" for label, value in bank)
        sections.append(f'<div class="section"><h2>Bank Details</h2><table class="meta">{rows}</table></div>')

    return "\n".join([
        "<!DOCTYPE html>",
        '<html lang="en">',
        "<head>",
        '<meta charset="utf-8">',
        f"<title>{_E(title)} {_E(doc.doc_no)}</title>",
        f"<style>\n{PRINT_CSS}\n</style>",
        "</head>",
        "<body>",
        '<div class="page">',
        f'<div class="header"><div>{logo}<h1>{_E(title)}</h1></div><table class="meta">{meta}</table></div>',
        f'<div class="parties">{party("From", company)}{party("Bill To", doc.bill_to)}</div>',
        f'<table class="items"><thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>',
        f'<table class="summary">{summary_html}</table>',
        *sections,
        "</div>",
        "</body>",
        "</html>",
    ]) + "\n"


# ============================================================================
# Canonical JSON
# ============================================================================

def render_json(doc: DocumentDescription, totals: TotalsModel, derived: DerivedArtifacts) -> str:
    """
    Serialize the full computed result as canonical JSON.

    Keys follow model field order and amounts are JSON numbers, so the
    output is identical across runs for the same input.
    """
    payload = {
        "document": doc.model_dump(mode="json"),
        "totals": totals.model_dump(mode="json"),
    }
    words = _words(doc, derived)
    if words:
        payload["amount_in_words"] = words
    payment = _payment(doc, derived)
    if payment:
        payload["qr_uri_string"] = payment.uri_string
        if payment.image_payload:
            payload["qr_image_payload"] = payment.image_payload
    return json.dumps(payload, indent=2, ensure_ascii=False)


# ============================================================================
# Renderer Registry
# ============================================================================

RENDERERS: dict[FormatKind, Renderer] = {
    FormatKind.MARKDOWN: render_markdown,
    FormatKind.HTML_EMAIL: render_html_email,
    FormatKind.PDF_READY: render_pdf_ready,
    FormatKind.JSON: render_json,
}
