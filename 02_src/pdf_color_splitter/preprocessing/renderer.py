"""Page rasterizer producing RGBA buffers for color classification."""

import logging
from typing import Optional

import fitz  # pymupdf
from PIL import Image

from ..core.errors import DecodeError, RenderError
from ..schemas.common import PixelBuffer
from ..schemas.config import DEFAULT_RENDER_SCALE

logger = logging.getLogger(__name__)


class RasterSource:
    """Renders pages of one in-memory PDF using pymupdf (fitz)."""

    def __init__(self, doc: fitz.Document, filename: str = "<memory>"):
        """Wrap an opened document.

        Args:
            doc: Opened pymupdf document
            filename: Name used in logs and errors
        """
        self.doc = doc
        self.filename = filename

    @classmethod
    def open(cls, data: bytes, filename: str = "<memory>") -> "RasterSource":
        """Open PDF bytes for rendering.

        Raises:
            DecodeError: If the bytes are not a readable PDF
        """
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            raise DecodeError(
                f"Cannot open {filename} for rendering: {e}", filename=filename
            ) from e

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

    def rasterize_page(self, index: int, scale: Optional[float] = None) -> PixelBuffer:
        """Render one page to an RGBA buffer.

        Args:
            index: 0-based page index
            scale: Zoom factor, None = DEFAULT_RENDER_SCALE

        Returns:
            PixelBuffer of the rendered page

        Raises:
            RenderError: If the page index is invalid or rendering fails
        """
        zoom = scale if scale is not None else DEFAULT_RENDER_SCALE

        if index < 0 or index >= self.page_count:
            raise RenderError(
                f"Invalid page index {index} (document has {self.page_count} pages)",
                filename=self.filename,
                page_index=index,
            )

        try:
            page = self.doc.load_page(index)
            pix = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom), alpha=False)
            mode = "RGB" if pix.alpha == 0 else "RGBA"
            img = Image.frombytes(mode, [pix.width, pix.height], pix.samples)
        except Exception as e:
            raise RenderError(
                f"Cannot render page {index + 1} of {self.filename}: {e}",
                filename=self.filename,
                page_index=index,
            ) from e

        logger.debug(
            f"Rendered page {index + 1} of {self.filename} "
            f"({pix.width}x{pix.height}, scale {zoom})"
        )
        return PixelBuffer.from_image(img)

    def close(self) -> None:
        self.doc.close()

    def __enter__(self) -> "RasterSource":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
