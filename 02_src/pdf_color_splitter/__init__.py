"""
PDF Color Splitter - separates color pages from black & white pages.

Pages of one or more PDFs are rendered at low resolution, classified with a
luminance-adaptive color detector and copied (unchanged) into two output
documents, keeping the original page order.
"""

__version__ = "0.1.0"

# Core classes
from .core.classifier import ColorClassifier, classify
from .core.assembler import DocumentAssembler
from .core.documents import OutputAccumulator, PyMuPDFBackend, SourceDocument
from .core.errors import (
    DecodeError,
    EncodeError,
    FileReadError,
    PageCopyError,
    RenderError,
    SplitError,
    TranscribeError,
)
from .core.pipeline import RunState, SplitPipeline, run_split
from .preprocessing.renderer import RasterSource

# Schemas
from .schemas.config import SplitConfig, validate_threshold
from .schemas.common import (
    Diagnostic,
    ErrorKind,
    PageClassification,
    PageOrigin,
    PixelBuffer,
    ProgressEvent,
    RunOutcome,
    RunReport,
    SplitResult,
)

__all__ = [
    # Version
    "__version__",

    # Core classes
    "ColorClassifier",
    "classify",
    "DocumentAssembler",
    "OutputAccumulator",
    "PyMuPDFBackend",
    "SourceDocument",
    "RasterSource",
    "SplitPipeline",
    "RunState",
    "run_split",

    # Errors
    "SplitError",
    "FileReadError",
    "DecodeError",
    "RenderError",
    "TranscribeError",
    "PageCopyError",
    "EncodeError",

    # Schemas - Config
    "SplitConfig",
    "validate_threshold",

    # Schemas - Common
    "Diagnostic",
    "ErrorKind",
    "PageClassification",
    "PageOrigin",
    "PixelBuffer",
    "ProgressEvent",
    "RunOutcome",
    "RunReport",
    "SplitResult",
]
