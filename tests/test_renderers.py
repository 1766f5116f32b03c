"""
Tests for the output renderers.

These tests verify each format's structure, the section switches and
renderer purity.
"""

import json

import pytest

from finance_docs.calculator import compute_totals
from finance_docs.exceptions import RenderError
from finance_docs.generator import derive_artifacts
from finance_docs.renderers import (
    RENDERERS,
    render_html_email,
    render_json,
    render_markdown,
    render_pdf_ready,
)


def _render_inputs(doc):
    totals = compute_totals(doc)
    return doc, totals, derive_artifacts(doc, totals)


# ============================================================================
# Markdown
# ============================================================================

class TestMarkdown:

    def test_sections(self, valid_doc):
        text = render_markdown(*_render_inputs(valid_doc))

        assert text.startswith("# Tax Invoice\n")
        assert "| Invoice No | Date | Due Date |" in text
        assert "| INV-2024-001 | 15 Jan 2024 | 30 Jan 2024 |" in text
        assert "## Bill To" in text
        assert "| 1 | Brand identity design | 998391 | 2 unit | ₹500.00 | - | ₹1,000.00 | ₹180.00 | ₹1,180.00 |" in text
        assert "| CGST (9%) | ₹90.00 |" in text
        assert "| **Grand Total** | **₹1,180.00** |" in text
        assert "**Amount in words:** One Thousand One Hundred And Eighty Rupees Only" in text
        assert "## Terms & Conditions\n\n1. Payment due within 15 days." in text
        assert "- **IFSC:** HDFC0000123" in text

    def test_pipes_escaped_in_cells(self, make_doc, make_line):
        doc = make_doc(line_items=[make_line(description="Design | Build")])
        assert "Design \\| Build" in render_markdown(*_render_inputs(doc))

    def test_rounding_row_only_when_adjusted(self, make_doc, make_line):
        flat = render_markdown(*_render_inputs(make_doc()))
        assert "Rounding Adjustment" not in flat

        doc = make_doc(line_items=[make_line(unit_price="1180.40")])
        assert "| Rounding Adjustment | -₹0.40 |" in render_markdown(*_render_inputs(doc))

    def test_quotation_shows_validity(self, make_doc):
        doc = make_doc(document_type="quotation", due_date=None, valid_until="2024-02-14")
        text = render_markdown(*_render_inputs(doc))
        assert text.startswith("# Quotation\n")
        assert "| Quotation No | Date | Valid Until |" in text

    def test_payment_section(self, valid_doc):
        text = render_markdown(*_render_inputs(valid_doc))
        assert "`upi://pay?pa=studio@okbank" in text
        assert "![Payment QR](data:image/png;base64," in text


# ============================================================================
# HTML
# ============================================================================

class TestHtmlEmail:

    def test_self_contained_fragment(self, valid_doc):
        text = render_html_email(*_render_inputs(valid_doc))

        assert text.startswith("<div")
        assert "<link" not in text
        assert "<script" not in text
        assert "<html" not in text
        assert 'style="' in text
        assert "₹1,180.00" in text

    def test_user_text_escaped(self, make_doc, make_line):
        doc = make_doc(line_items=[make_line(description="<b>Bold</b> & co")])
        text = render_html_email(*_render_inputs(doc))
        assert "&lt;b&gt;Bold&lt;/b&gt; &amp; co" in text
        assert "<b>Bold</b>" not in text


class TestPdfReady:

    def test_standalone_print_document(self, valid_doc):
        text = render_pdf_ready(*_render_inputs(valid_doc))

        assert text.startswith("<!DOCTYPE html>")
        assert text.rstrip().endswith("</html>")
        assert "@page { size: A4;" in text
        assert '<div class="page">' in text
        assert "<title>Tax Invoice INV-2024-001</title>" in text
        assert "<script" not in text

    def test_logo_included_when_set(self, make_doc, payload):
        company = dict(payload["company"], logo_url="https://example.com/logo.png")
        text = render_pdf_ready(*_render_inputs(make_doc(company=company)))
        assert '<img class="logo" src="https://example.com/logo.png"' in text


# ============================================================================
# JSON
# ============================================================================

class TestJson:

    def test_payload_structure(self, valid_doc):
        data = json.loads(render_json(*_render_inputs(valid_doc)))

        assert list(data) == ["document", "totals", "amount_in_words", "qr_uri_string", "qr_image_payload"]
        assert data["document"]["doc_no"] == "INV-2024-001"
        assert data["document"]["company"]["tax_id"] == "29ABCDE1234F1Z5"
        assert data["totals"]["tax_breakup"] == {"CGST": 90.0, "SGST": 90.0}
        assert data["totals"]["rounded_grand_total"] == 1180.0

    def test_amounts_are_numbers(self, valid_doc):
        data = json.loads(render_json(*_render_inputs(valid_doc)))
        assert isinstance(data["totals"]["subtotal"], float)
        assert isinstance(data["document"]["line_items"][0]["unit_price"], float)


# ============================================================================
# Cross-format Behaviour
# ============================================================================

class TestSwitches:
    """show_amount_in_words and show_qr remove their sections entirely."""

    def test_words_switched_off(self, make_doc):
        doc = make_doc(outputs={"formats": ["markdown"], "show_amount_in_words": False, "show_qr": True})
        inputs = _render_inputs(doc)
        for renderer in RENDERERS.values():
            text = renderer(*inputs)
            assert "Amount in words" not in text
            assert "amount_in_words" not in text.replace('"show_amount_in_words"', "")

    def test_qr_switched_off(self, make_doc):
        doc = make_doc(outputs={"formats": ["markdown"], "show_amount_in_words": True, "show_qr": False})
        inputs = _render_inputs(doc)
        for renderer in RENDERERS.values():
            text = renderer(*inputs)
            assert "upi://" not in text
            assert "data:image/png" not in text
        assert "qr_image_payload" not in json.loads(render_json(*inputs))


class TestPurity:

    @pytest.mark.parametrize("renderer", list(RENDERERS.values()))
    def test_identical_input_identical_output(self, valid_doc, renderer):
        inputs = _render_inputs(valid_doc)
        assert renderer(*inputs) == renderer(*inputs)

    @pytest.mark.parametrize("renderer", list(RENDERERS.values()))
    def test_independent_runs_identical(self, make_doc, renderer):
        assert renderer(*_render_inputs(make_doc())) == renderer(*_render_inputs(make_doc()))


class TestRenderErrors:

    @pytest.mark.parametrize("renderer", [render_markdown, render_html_email, render_pdf_ready])
    def test_control_characters_rejected(self, make_doc, make_line, renderer):
        doc = make_doc(line_items=[make_line(description="Bell\x07")])
        with pytest.raises(RenderError):
            renderer(*_render_inputs(doc))

    def test_json_accepts_control_characters(self, make_doc, make_line):
        doc = make_doc(line_items=[make_line(description="Bell\x07")])
        data = json.loads(render_json(*_render_inputs(doc)))
        assert data["document"]["line_items"][0]["description"] == "Bell\x07"
