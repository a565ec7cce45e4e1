"""End-to-end split runs over real PDFs built with pymupdf."""

from pathlib import Path

import fitz
import pytest

from pdf_color_splitter import (
    ErrorKind,
    RunOutcome,
    SplitConfig,
    SplitPipeline,
    run_split,
)


def test_two_files_with_separators(make_pdf, read_labels) -> None:
    """A (color, bw, color) + B (bw), threshold 50, separators on."""
    a = make_pdf("A.pdf", ["color", "bw", "color"])
    b = make_pdf("B.pdf", ["bw"])

    result = run_split([a, b], threshold=50, insert_separators=True)
    report = result.report

    assert report.outcome is RunOutcome.COMPLETED
    assert (report.color_pages, report.bw_pages) == (2, 2)
    assert not report.has_diagnostics
    assert read_labels(result.color_pdf) == ["A p1", "A p3"]
    assert read_labels(result.bw_pdf) == ["A p2", "", "B p1"]


def test_single_unreadable_file(tmp_path: Path) -> None:
    result = run_split([tmp_path / "nope.pdf"])
    report = result.report

    assert report.outcome is RunOutcome.NO_PAGES_PRODUCED
    assert report.total_pages == 0
    assert [d.kind for d in report.diagnostics] == [ErrorKind.IO]
    assert result.color_pdf is None
    assert result.bw_pdf is None


def test_corrupt_file_is_skipped(make_pdf, read_labels, tmp_path: Path) -> None:
    corrupt = tmp_path / "corrupt.pdf"
    corrupt.write_bytes(b"this is not a pdf")
    good = make_pdf("good.pdf", ["bw", "color"])

    result = run_split([corrupt, good], insert_separators=True)

    assert result.report.outcome is RunOutcome.COMPLETED
    assert [(d.kind, d.filename) for d in result.report.diagnostics] == [
        (ErrorKind.DECODE, str(corrupt))
    ]
    assert read_labels(result.bw_pdf) == ["good p1"]
    assert read_labels(result.color_pdf) == ["good p2"]


def test_page_order_across_files(make_pdf, read_labels) -> None:
    files = [
        make_pdf("one.pdf", ["bw", "color", "bw"]),
        make_pdf("two.pdf", ["color", "color"]),
        make_pdf("three.pdf", ["bw", "bw", "color"]),
    ]

    result = run_split(files, insert_separators=False)

    assert read_labels(result.color_pdf) == ["one p2", "two p1", "two p2", "three p3"]
    assert read_labels(result.bw_pdf) == ["one p1", "one p3", "three p1", "three p2"]


def test_all_bw_produces_single_output(make_pdf) -> None:
    result = run_split([make_pdf("text.pdf", ["bw", "bw"])])

    assert result.color_pdf is None
    with fitz.open(stream=result.bw_pdf, filetype="pdf") as doc:
        assert doc.page_count == 2


@pytest.mark.parametrize("threshold", [10, 50, 100])
def test_color_page_detected_at_any_threshold(make_pdf, threshold) -> None:
    result = run_split([make_pdf("c.pdf", ["color"])], threshold=threshold)
    assert result.report.color_pages == 1


def test_pipeline_with_config_and_progress(make_pdf) -> None:
    events = []
    config = SplitConfig(threshold=40, insert_separators=True, render_scale=0.3)
    pipeline = SplitPipeline(config=config, on_progress=events.append)

    result = pipeline.run([make_pdf("p.pdf", ["color", "bw"])])

    assert result.report.total_pages == 2
    assert [e.page_index for e in events] == [None, 0, 1]
