"""Common data schemas."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from PIL import Image


class PageClassification(str, Enum):
    """Output class of a page."""

    COLOR = "color"
    BLACK_AND_WHITE = "bw"


class ErrorKind(str, Enum):
    """Kind of a recoverable failure recorded in the run report."""

    IO = "io"
    DECODE = "decode"
    TRANSCRIBE = "transcribe"
    ENCODE = "encode"


class RunOutcome(str, Enum):
    """Outcome of a split run that returned a report.

    A run that fails raises instead of returning a report.
    """

    COMPLETED = "completed"
    NO_PAGES_PRODUCED = "no_pages_produced"


@dataclass(frozen=True)
class PixelBuffer:
    """RGBA raster of one page.

    Attributes:
        width: Width in pixels
        height: Height in pixels
        samples: Row-major RGBA bytes, 4 per pixel
    """
    width: int
    height: int
    samples: bytes

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Invalid buffer size {self.width}x{self.height}")
        expected = self.width * self.height * 4
        if len(self.samples) != expected:
            raise ValueError(
                f"Buffer of {self.width}x{self.height} needs {expected} bytes, "
                f"got {len(self.samples)}"
            )

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    @classmethod
    def from_image(cls, image: Image.Image) -> "PixelBuffer":
        """Build a buffer from a PIL image of any mode."""
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        return cls(image.width, image.height, image.tobytes())

    @classmethod
    def solid(
        cls, width: int, height: int, rgba: Tuple[int, int, int, int]
    ) -> "PixelBuffer":
        """Build a uniformly filled buffer."""
        return cls(width, height, bytes(rgba) * (width * height))


@dataclass(frozen=True)
class PageOrigin:
    """Where a page in an output document came from.

    Attributes:
        filename: Source file name, None for a separator page
        page_index: 0-based page index in the source, None for a separator page
    """
    filename: Optional[str]
    page_index: Optional[int]

    @classmethod
    def separator(cls) -> "PageOrigin":
        return cls(None, None)

    @property
    def is_separator(self) -> bool:
        return self.filename is None


@dataclass(frozen=True)
class Diagnostic:
    """Recoverable failure recorded during a run.

    Attributes:
        kind: Error kind
        message: Human-readable error message
        filename: Input file (None for output-level failures)
        page_index: 0-based page index (None for file/output-level failures)
        output: Output class for encode failures
    """
    kind: ErrorKind
    message: str
    filename: Optional[str] = None
    page_index: Optional[int] = None
    output: Optional[PageClassification] = None

    @property
    def level(self) -> str:
        if self.output is not None:
            return "output"
        if self.page_index is not None:
            return "page"
        return "file"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"kind": self.kind.value, "level": self.level}
        if self.filename is not None:
            data["filename"] = self.filename
        if self.page_index is not None:
            data["page"] = self.page_index + 1
        if self.output is not None:
            data["output"] = self.output.value
        data["message"] = self.message
        return data


@dataclass(frozen=True)
class ProgressEvent:
    """Progress notification for presentation layers.

    page_index is None for the event emitted when a file is opened.
    """
    filename: str
    file_index: int
    file_count: int
    page_index: Optional[int] = None
    page_count: Optional[int] = None


@dataclass(frozen=True)
class RunReport:
    """Summary of a finished split run.

    Attributes:
        color_pages: Pages routed to the color output
        bw_pages: Pages routed to the black & white output
        render_fallbacks: Pages classified black & white because rendering failed
        diagnostics: Recoverable failures in the order they happened
        outcome: Terminal outcome
    """
    color_pages: int = 0
    bw_pages: int = 0
    render_fallbacks: int = 0
    diagnostics: Tuple[Diagnostic, ...] = field(default_factory=tuple)
    outcome: RunOutcome = RunOutcome.COMPLETED

    @property
    def total_pages(self) -> int:
        return self.color_pages + self.bw_pages

    @property
    def has_diagnostics(self) -> bool:
        return bool(self.diagnostics)

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict suitable for YAML serialization."""
        return {
            "outcome": self.outcome.value,
            "pages": {
                "color": self.color_pages,
                "bw": self.bw_pages,
                "total": self.total_pages,
            },
            "render_fallbacks": self.render_fallbacks,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }


@dataclass(frozen=True)
class SplitResult:
    """Report plus the produced documents (None when a class has no output)."""
    report: RunReport
    color_pdf: Optional[bytes] = None
    bw_pdf: Optional[bytes] = None
