"""
Tests for the generation pipeline.
"""

import pytest

from finance_docs.exceptions import ValidationError
from finance_docs.generator import generate_outputs


class TestRequestedFormats:

    def test_all_formats(self, valid_doc):
        result = generate_outputs(valid_doc)
        assert list(result.outputs) == ["markdown", "html_email", "pdf_ready", "json"]
        assert result.render_errors == {}

    def test_unrequested_formats_absent(self, make_doc):
        doc = make_doc(outputs={"formats": ["json", "markdown"], "show_amount_in_words": True, "show_qr": True})
        result = generate_outputs(doc)
        assert set(result.outputs) == {"json", "markdown"}
        assert "html_email" not in result.outputs

    def test_duplicate_formats_rendered_once(self, make_doc):
        doc = make_doc(outputs={"formats": ["json", "json"]})
        assert list(generate_outputs(doc).outputs) == ["json"]

    def test_no_formats(self, make_doc):
        result = generate_outputs(make_doc(outputs={"formats": []}))
        assert result.outputs == {}
        assert result.totals.rounded_grand_total == 1180


class TestDerivedArtifacts:

    def test_words_and_qr(self, valid_doc):
        result = generate_outputs(valid_doc)
        assert result.amount_in_words == "One Thousand One Hundred And Eighty Rupees Only"
        assert result.qr_uri_string == (
            "upi://pay?pa=studio@okbank&pn=Design%20Arena%20Studio&am=1180.00&cu=INR&tn=INV-2024-001"
        )
        assert result.qr_image_payload.startswith("data:image/png;base64,")

    def test_qr_switched_off(self, make_doc):
        doc = make_doc(outputs={"formats": ["json"], "show_qr": False})
        result = generate_outputs(doc)
        assert result.qr_image_payload is None
        assert result.qr_uri_string is None
        assert "qr_image_payload" not in result.model_dump(exclude_none=True)

    def test_words_switched_off(self, make_doc):
        result = generate_outputs(make_doc(outputs={"formats": ["json"], "show_amount_in_words": False}))
        assert result.amount_in_words is None

    def test_no_upi_id(self, make_doc, payload):
        bank = dict(payload["bank_details"], upi_id=None)
        result = generate_outputs(make_doc(bank_details=bank))
        assert result.qr_uri_string is None
        assert "upi://" not in result.outputs["markdown"]


class TestErrors:

    def test_validation_error_aborts_run(self, make_doc):
        with pytest.raises(ValidationError) as exc_info:
            generate_outputs(make_doc(line_items=[]))
        assert exc_info.value.errors == ["missing_field:line_items"]

    def test_render_error_scoped_to_format(self, make_doc, make_line):
        doc = make_doc(line_items=[make_line(description="Tab\x0bbed")])
        result = generate_outputs(doc)

        assert list(result.outputs) == ["json"]
        assert set(result.render_errors) == {"markdown", "html_email", "pdf_ready"}
        assert result.render_errors["markdown"].startswith("markdown:")
        assert result.totals.subtotal == 1000

    def test_oversized_amounts_reported_as_range_error(self, make_doc, make_line):
        doc = make_doc(line_items=[make_line(quantity=10**15, unit_price=10**13)], rounding="nearest")
        with pytest.raises(ValidationError) as exc_info:
            generate_outputs(doc)
        assert exc_info.value.errors == ["range_error:amount"]
