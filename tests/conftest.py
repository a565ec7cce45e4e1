"""Shared fixtures: PDF builders and a clean configuration environment."""

import logging
from pathlib import Path
from typing import Callable, List, Sequence

import fitz
import pytest

logging.getLogger("pdf_color_splitter").setLevel(logging.DEBUG)

A4 = (595, 842)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep COLOR_SPLIT_* settings from the developer's shell out of tests."""
    for name in (
        "COLOR_SPLIT_THRESHOLD",
        "COLOR_SPLIT_SEPARATORS",
        "COLOR_SPLIT_OUTPUT_DIR",
        "COLOR_SPLIT_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_pdf(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a PDF whose pages are "color" or "bw".

    Color pages are mostly covered by a red rectangle; every page carries
    the text "<label> p<N>" so outputs can be matched back to their source.
    """

    def _make(name: str, kinds: Sequence[str], label: str = None) -> Path:
        label = label or Path(name).stem
        pdf_path = tmp_path / name
        doc = fitz.open()
        for page_num, kind in enumerate(kinds, start=1):
            page = doc.new_page(width=A4[0], height=A4[1])
            if kind == "color":
                page.draw_rect(
                    fitz.Rect(40, 100, 555, 800), color=(1, 0, 0), fill=(1, 0, 0)
                )
            page.insert_text((50, 60), f"{label} p{page_num}", fontsize=24)
        doc.save(pdf_path)
        doc.close()
        return pdf_path

    return _make


def page_labels(pdf_bytes: bytes) -> List[str]:
    """Text of every page of a PDF, "" for blank pages."""
    with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
        return [page.get_text().strip() for page in doc]


@pytest.fixture
def read_labels() -> Callable[[bytes], List[str]]:
    return page_labels
