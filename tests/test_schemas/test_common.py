"""Tests for common schemas."""

import pytest
from PIL import Image

from pdf_color_splitter.schemas.common import (
    Diagnostic,
    ErrorKind,
    PageClassification,
    PageOrigin,
    PixelBuffer,
    RunOutcome,
    RunReport,
)


class TestPixelBuffer:
    def test_size_mismatch(self):
        with pytest.raises(ValueError, match="needs 16 bytes"):
            PixelBuffer(2, 2, b"\x00" * 12)

    def test_negative_size(self):
        with pytest.raises(ValueError, match="Invalid buffer size"):
            PixelBuffer(-1, 2, b"")

    def test_solid(self):
        buffer = PixelBuffer.solid(3, 2, (1, 2, 3, 4))
        assert buffer.pixel_count == 6
        assert buffer.samples[:8] == bytes([1, 2, 3, 4, 1, 2, 3, 4])

    @pytest.mark.parametrize("mode", ["RGB", "L", "RGBA", "P"])
    def test_from_image_any_mode(self, mode):
        img = Image.new(mode, (5, 4))
        buffer = PixelBuffer.from_image(img)
        assert (buffer.width, buffer.height) == (5, 4)
        assert len(buffer.samples) == 5 * 4 * 4


class TestPageOrigin:
    def test_separator(self):
        assert PageOrigin.separator().is_separator
        assert not PageOrigin("a.pdf", 0).is_separator


class TestDiagnostic:
    def test_file_level(self):
        diag = Diagnostic(ErrorKind.IO, "gone", filename="a.pdf")
        assert diag.level == "file"
        assert diag.to_dict() == {
            "kind": "io", "level": "file", "filename": "a.pdf", "message": "gone",
        }

    def test_page_level_uses_one_based_page(self):
        diag = Diagnostic(ErrorKind.TRANSCRIBE, "bad", filename="a.pdf", page_index=2)
        assert diag.level == "page"
        assert diag.to_dict()["page"] == 3

    def test_output_level(self):
        diag = Diagnostic(ErrorKind.ENCODE, "full disk", output=PageClassification.COLOR)
        assert diag.level == "output"
        assert diag.to_dict()["output"] == "color"


class TestRunReport:
    def test_to_dict(self):
        report = RunReport(
            color_pages=2,
            bw_pages=3,
            render_fallbacks=1,
            diagnostics=(Diagnostic(ErrorKind.DECODE, "junk", filename="x.pdf"),),
            outcome=RunOutcome.COMPLETED,
        )
        data = report.to_dict()

        assert data["outcome"] == "completed"
        assert data["pages"] == {"color": 2, "bw": 3, "total": 5}
        assert data["render_fallbacks"] == 1
        assert data["diagnostics"][0]["kind"] == "decode"
        assert report.has_diagnostics

    def test_empty_report(self):
        report = RunReport()
        assert report.total_pages == 0
        assert not report.has_diagnostics


def test_run_outcomes_are_report_outcomes_only():
    assert {o.value for o in RunOutcome} == {"completed", "no_pages_produced"}
