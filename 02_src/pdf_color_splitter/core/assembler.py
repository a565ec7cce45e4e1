"""DocumentAssembler - builds the color and black & white outputs."""

import logging
from typing import Optional

from ..schemas.common import PageClassification
from .documents import PdfBackend, PyMuPDFBackend
from .errors import TranscribeError

logger = logging.getLogger(__name__)


class DocumentAssembler:
    """Copies original pages into per-class accumulators and serializes them.

    Pages are copied from the source document, never from the raster used
    for classification.
    """

    def __init__(self, backend: Optional[PdfBackend] = None):
        self.backend = backend or PyMuPDFBackend()

    def new_accumulator(self, label: PageClassification):
        return self.backend.new_accumulator(label)

    def append_page(
        self,
        acc,
        source,
        page_index: int,
        separator_before: bool = False,
    ) -> None:
        """Copy a page from source into acc.

        Args:
            acc: Target accumulator
            source: Source document
            page_index: 0-based page index in source
            separator_before: Put a blank page in front of the copied page

        Raises:
            PageCopyError: If the page cannot be copied; acc is left unchanged
        """
        token = source.copy_page(page_index)

        if separator_before:
            self.insert_separator(acc)

        try:
            acc.append(token)
        except TranscribeError:
            if separator_before:
                acc.remove_last()
            raise

    def insert_separator(self, acc) -> None:
        """Append one blank page to acc."""
        acc.append_blank()
        logger.debug(f"Inserted separator into {acc.label.value} output")

    def finalize(self, acc) -> bytes:
        """Serialize acc into a complete PDF.

        Raises:
            ValueError: If acc holds no pages
            EncodeError: If serialization fails
        """
        if acc.is_empty:
            raise ValueError(f"Refusing to finalize empty {acc.label.value} output")

        data = acc.serialize()
        logger.info(
            f"Finalized {acc.label.value} output: {len(acc)} pages, {len(data)} bytes"
        )
        return data
