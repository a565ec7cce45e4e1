"""PDF collaborators backed by pymupdf: page sources, output accumulators
and the backend that opens them.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Protocol, Tuple, Union

import fitz  # pymupdf

from ..preprocessing.renderer import RasterSource
from ..schemas.common import PageClassification, PageOrigin
from .errors import DecodeError, EncodeError, FileReadError, TranscribeError

logger = logging.getLogger(__name__)

# A4 in points, used for separators in an empty accumulator
DEFAULT_PAGE_SIZE = (595, 842)


@dataclass
class PageToken:
    """A page copied out of its source, ready to be appended once.

    Attributes:
        doc: Single-page pymupdf document holding the copy
        origin: Source file and page index
    """
    doc: fitz.Document
    origin: PageOrigin

    def close(self) -> None:
        self.doc.close()


class SourceDocument:
    """Read-only page container for one input file."""

    def __init__(self, doc: fitz.Document, filename: str):
        self.doc = doc
        self.filename = filename

    @classmethod
    def open(cls, data: bytes, filename: str) -> "SourceDocument":
        """Open PDF bytes as a page source.

        Raises:
            DecodeError: If the bytes are not a readable, unencrypted PDF
                with at least one page
        """
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            raise DecodeError(f"Cannot open {filename}: {e}", filename=filename) from e

        if doc.needs_pass:
            doc.close()
            raise DecodeError(f"{filename} is encrypted", filename=filename)

        if doc.page_count == 0:
            doc.close()
            raise DecodeError(f"{filename} has no pages", filename=filename)

        return cls(doc, filename)

    @property
    def page_count(self) -> int:
        return self.doc.page_count

    def copy_page(self, index: int) -> PageToken:
        """Copy one page with its original content.

        Args:
            index: 0-based page index

        Raises:
            TranscribeError: If the page cannot be copied
        """
        if index < 0 or index >= self.page_count:
            raise TranscribeError(
                f"Invalid page index {index} (document has {self.page_count} pages)",
                filename=self.filename,
                page_index=index,
            )

        single = fitz.open()
        try:
            single.insert_pdf(self.doc, from_page=index, to_page=index)
        except Exception as e:
            single.close()
            raise TranscribeError(
                f"Cannot copy page {index + 1} of {self.filename}: {e}",
                filename=self.filename,
                page_index=index,
            ) from e

        if single.page_count != 1:
            single.close()
            raise TranscribeError(
                f"Copy of page {index + 1} of {self.filename} came out empty",
                filename=self.filename,
                page_index=index,
            )

        return PageToken(doc=single, origin=PageOrigin(self.filename, index))

    def close(self) -> None:
        self.doc.close()


class OutputAccumulator:
    """Append-only output document for one page class."""

    def __init__(self, label: PageClassification):
        self.label = label
        self._doc = fitz.open()
        self._origins: List[PageOrigin] = []
        self._finalized = False

    def __len__(self) -> int:
        return len(self._origins)

    @property
    def is_empty(self) -> bool:
        return not self._origins

    @property
    def finalized(self) -> bool:
        return self._finalized

    @property
    def origins(self) -> Tuple[PageOrigin, ...]:
        """Origin of every page in output order (separators included)."""
        return tuple(self._origins)

    def _check_open(self) -> None:
        if self._finalized:
            raise RuntimeError(f"{self.label.value} output is already finalized")

    def append(self, token: PageToken) -> None:
        """Append a copied page. The token is consumed.

        Raises:
            TranscribeError: If the page cannot be inserted
        """
        self._check_open()
        before = self._doc.page_count
        try:
            self._doc.insert_pdf(token.doc)
        except Exception as e:
            if self._doc.page_count > before:
                self._doc.delete_pages(before, self._doc.page_count - 1)
            raise TranscribeError(
                f"Cannot insert page {token.origin.page_index + 1} of "
                f"{token.origin.filename}: {e}",
                filename=token.origin.filename,
                page_index=token.origin.page_index,
            ) from e
        finally:
            token.close()
        self._origins.append(token.origin)

    def append_blank(self) -> None:
        """Append a blank page sized like the last page."""
        self._check_open()
        if self._doc.page_count:
            rect = self._doc[-1].rect
            width, height = rect.width, rect.height
        else:
            width, height = DEFAULT_PAGE_SIZE
        self._doc.new_page(width=width, height=height)
        self._origins.append(PageOrigin.separator())

    def remove_last(self) -> None:
        """Drop the most recently appended page."""
        self._check_open()
        if not self._origins:
            raise IndexError("remove_last on empty accumulator")
        self._doc.delete_page(-1)
        self._origins.pop()

    def serialize(self) -> bytes:
        """Write the document to bytes. Can be called once.

        Raises:
            EncodeError: If pymupdf fails to write the document
        """
        self._check_open()
        try:
            return self._doc.tobytes(garbage=3, deflate=True)
        except Exception as e:
            raise EncodeError(f"Cannot write {self.label.value} output: {e}") from e
        finally:
            self._finalized = True
            self._doc.close()

    def discard(self) -> None:
        """Release the document without writing it."""
        if not self._finalized:
            self._finalized = True
            self._doc.close()


class PdfBackend(Protocol):
    """Collaborators the split pipeline depends on."""

    def read_file_bytes(self, handle) -> bytes:
        ...

    def open_page_source(self, data: bytes, filename: str):
        ...

    def open_raster_source(self, data: bytes, filename: str):
        ...

    def new_accumulator(self, label: PageClassification):
        ...


class PyMuPDFBackend:
    """Default backend: local files, pymupdf documents."""

    def read_file_bytes(self, handle: Union[str, Path]) -> bytes:
        """Read an input file.

        Raises:
            FileReadError: If the file cannot be read
        """
        path = Path(handle)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise FileReadError(f"Cannot read {path}: {e}", filename=str(handle)) from e
        logger.debug(f"Read {len(data)} bytes from {path}")
        return data

    def open_page_source(self, data: bytes, filename: str) -> SourceDocument:
        return SourceDocument.open(data, filename)

    def open_raster_source(self, data: bytes, filename: str) -> RasterSource:
        return RasterSource.open(data, filename)

    def new_accumulator(self, label: PageClassification) -> OutputAccumulator:
        return OutputAccumulator(label)
