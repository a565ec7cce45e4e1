"""Error taxonomy for the split pipeline.

File-level errors (FileReadError, DecodeError) skip a whole input file,
page-level errors (TranscribeError) skip a single page, EncodeError drops one
output stream. RenderError never reaches the caller: the pipeline degrades the
page to black & white instead.
"""

from typing import Optional


class SplitError(RuntimeError):
    """Base class for recoverable pipeline errors.

    Attributes:
        filename: Input file the error relates to (None for output-level errors)
        page_index: 0-based page index (None for file/output-level errors)
    """

    def __init__(
        self,
        message: str,
        filename: Optional[str] = None,
        page_index: Optional[int] = None,
    ):
        super().__init__(message)
        self.filename = filename
        self.page_index = page_index


class FileReadError(SplitError):
    """Raised when an input file cannot be read."""


class DecodeError(SplitError):
    """Raised when input bytes cannot be opened as a PDF."""


class RenderError(SplitError):
    """Raised when a page cannot be rasterized."""


class TranscribeError(SplitError):
    """Raised when a page cannot be copied into an output document."""


PageCopyError = TranscribeError


class EncodeError(SplitError):
    """Raised when an output document cannot be serialized."""
