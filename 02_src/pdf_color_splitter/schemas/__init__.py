"""Data schemas for PDF color splitter."""

from .common import (
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
from .config import (
    DEFAULT_THRESHOLD,
    MAX_THRESHOLD,
    MIN_THRESHOLD,
    SplitConfig,
    clamp_threshold,
    validate_threshold,
)

__all__ = [
    "Diagnostic",
    "ErrorKind",
    "PageClassification",
    "PageOrigin",
    "PixelBuffer",
    "ProgressEvent",
    "RunOutcome",
    "RunReport",
    "SplitResult",
    "DEFAULT_THRESHOLD",
    "MAX_THRESHOLD",
    "MIN_THRESHOLD",
    "SplitConfig",
    "clamp_threshold",
    "validate_threshold",
]
