"""Core components: classifier, PDF collaborators, assembler and pipeline."""

from .errors import (
    DecodeError,
    EncodeError,
    FileReadError,
    PageCopyError,
    RenderError,
    SplitError,
    TranscribeError,
)
from .classifier import ColorClassifier, ColorStats, analyze, classify
from .documents import (
    OutputAccumulator,
    PageToken,
    PdfBackend,
    PyMuPDFBackend,
    SourceDocument,
)
from .assembler import DocumentAssembler
from .pipeline import RunState, SplitPipeline, run_split

__all__ = [
    # Errors
    "SplitError",
    "FileReadError",
    "DecodeError",
    "RenderError",
    "TranscribeError",
    "PageCopyError",
    "EncodeError",
    # Classification
    "ColorClassifier",
    "ColorStats",
    "analyze",
    "classify",
    # Documents
    "OutputAccumulator",
    "PageToken",
    "PdfBackend",
    "PyMuPDFBackend",
    "SourceDocument",
    "DocumentAssembler",
    # Pipeline
    "RunState",
    "SplitPipeline",
    "run_split",
]
