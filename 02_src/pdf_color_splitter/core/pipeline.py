"""SplitPipeline - routes every input page to the color or black & white output."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

from ..schemas.common import (
    Diagnostic,
    ErrorKind,
    PageClassification,
    ProgressEvent,
    RunOutcome,
    RunReport,
    SplitResult,
)
from ..schemas.config import DEFAULT_RENDER_SCALE, DEFAULT_THRESHOLD, SplitConfig
from .assembler import DocumentAssembler
from .classifier import ColorClassifier
from .documents import PdfBackend, PyMuPDFBackend
from .errors import DecodeError, EncodeError, FileReadError, RenderError, TranscribeError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressEvent], None]

CLASSES = (PageClassification.COLOR, PageClassification.BLACK_AND_WHITE)


class RunState(str, Enum):
    """Lifecycle of a pipeline run."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class _Tally:
    """Counters and diagnostics collected while a run is in progress."""
    color_pages: int = 0
    bw_pages: int = 0
    render_fallbacks: int = 0
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def count(self, label: PageClassification) -> None:
        if label is PageClassification.COLOR:
            self.color_pages += 1
        else:
            self.bw_pages += 1

    def freeze(self) -> RunReport:
        outcome = (
            RunOutcome.COMPLETED
            if self.color_pages + self.bw_pages
            else RunOutcome.NO_PAGES_PRODUCED
        )
        return RunReport(
            color_pages=self.color_pages,
            bw_pages=self.bw_pages,
            render_fallbacks=self.render_fallbacks,
            diagnostics=tuple(self.diagnostics),
            outcome=outcome,
        )


class SplitPipeline:
    """Splits a batch of PDFs into a color and a black & white document.

    Files are processed one at a time in input order and pages in page
    order, so each output mirrors the input order. Every per-file and
    per-page failure is recoverable:

    - unreadable or undecodable file: recorded, file skipped
    - page that fails to render: classified black & white, no diagnostic
    - page that fails to copy: recorded, page excluded from both outputs
    - output that fails to serialize: recorded, that output is absent
    """

    def __init__(
        self,
        config: Optional[SplitConfig] = None,
        backend: Optional[PdfBackend] = None,
        on_progress: Optional[ProgressCallback] = None,
    ):
        """Initialize split pipeline.

        Args:
            config: Split configuration (threshold, separators, render scale)
            backend: PDF collaborators, PyMuPDFBackend if not provided
            on_progress: Called with a ProgressEvent per file and per page
        """
        self.config = config or SplitConfig()
        self.backend = backend or PyMuPDFBackend()
        self.assembler = DocumentAssembler(self.backend)
        self.classifier = ColorClassifier(self.config.threshold)
        self.on_progress = on_progress
        self.state = RunState.IDLE

    def run(self, files: Sequence) -> SplitResult:
        """Run the split over files.

        Args:
            files: Input file handles (paths for the default backend)

        Returns:
            SplitResult with the frozen report and up to two PDFs

        Raises:
            MemoryError: On resource exhaustion; state becomes FAILED.
                Any other unexpected exception also leaves state FAILED.
        """
        if self.state is RunState.RUNNING:
            raise RuntimeError("SplitPipeline is already running")

        self.state = RunState.RUNNING
        accumulators = {label: self.assembler.new_accumulator(label) for label in CLASSES}
        try:
            result = self._run(list(files), accumulators)
        except MemoryError:
            self.state = RunState.FAILED
            logger.error("Split run aborted: out of memory")
            raise
        except BaseException as e:
            self.state = RunState.FAILED
            logger.error(f"Split run aborted: {e!r}")
            raise
        finally:
            for acc in accumulators.values():
                acc.discard()

        self.state = RunState.COMPLETED
        return result

    def _run(self, files: List, accumulators: Dict) -> SplitResult:
        logger.info(
            f"Starting split of {len(files)} files "
            f"(threshold={self.config.threshold:g}, "
            f"separators={self.config.insert_separators})"
        )

        tally = _Tally()
        # Set when a later file starts; cleared once that accumulator gets a page
        pending_separator = {label: False for label in CLASSES}
        opened = 0

        for file_index, handle in enumerate(files):
            source, raster = self._open_file(handle, tally)
            if source is None:
                continue

            try:
                if self.config.insert_separators and opened > 0:
                    for label in CLASSES:
                        pending_separator[label] = True
                opened += 1

                self._process_pages(
                    source, raster, file_index, len(files),
                    accumulators, pending_separator, tally,
                )
            finally:
                source.close()
                raster.close()

        outputs = self._finalize(accumulators, tally)
        report = tally.freeze()

        logger.info(
            f"Split finished: {report.outcome.value}, "
            f"color={report.color_pages}, bw={report.bw_pages}, "
            f"render_fallbacks={report.render_fallbacks}, "
            f"diagnostics={len(report.diagnostics)}"
        )

        return SplitResult(
            report=report,
            color_pdf=outputs.get(PageClassification.COLOR),
            bw_pdf=outputs.get(PageClassification.BLACK_AND_WHITE),
        )

    def _open_file(self, handle, tally: _Tally):
        """Read and open one input file.

        Returns:
            (source, raster) or (None, None) if the file was skipped
        """
        filename = str(handle)

        try:
            data = self.backend.read_file_bytes(handle)
        except FileReadError as e:
            logger.warning(f"Skipping {filename}: {e}")
            tally.diagnostics.append(Diagnostic(ErrorKind.IO, str(e), filename=filename))
            return None, None

        try:
            source = self.backend.open_page_source(data, filename)
        except DecodeError as e:
            logger.warning(f"Skipping {filename}: {e}")
            tally.diagnostics.append(Diagnostic(ErrorKind.DECODE, str(e), filename=filename))
            return None, None

        try:
            raster = self.backend.open_raster_source(data, filename)
        except DecodeError as e:
            source.close()
            logger.warning(f"Skipping {filename}: {e}")
            tally.diagnostics.append(Diagnostic(ErrorKind.DECODE, str(e), filename=filename))
            return None, None

        logger.info(f"Opened {filename} ({source.page_count} pages)")
        return source, raster

    def _process_pages(
        self,
        source,
        raster,
        file_index: int,
        file_count: int,
        accumulators: Dict,
        pending_separator: Dict[PageClassification, bool],
        tally: _Tally,
    ) -> None:
        filename = source.filename
        page_count = source.page_count
        self._emit(ProgressEvent(filename, file_index, file_count, None, page_count))

        for page_index in range(page_count):
            self._emit(
                ProgressEvent(filename, file_index, file_count, page_index, page_count)
            )

            label = self._classify_page(raster, filename, page_index, tally)
            acc = accumulators[label]
            separator_before = pending_separator[label] and not acc.is_empty

            try:
                self.assembler.append_page(
                    acc, source, page_index, separator_before=separator_before
                )
            except TranscribeError as e:
                logger.warning(f"Skipping page {page_index + 1} of {filename}: {e}")
                tally.diagnostics.append(
                    Diagnostic(
                        ErrorKind.TRANSCRIBE, str(e),
                        filename=filename, page_index=page_index,
                    )
                )
                continue

            pending_separator[label] = False
            tally.count(label)

    def _classify_page(
        self, raster, filename: str, page_index: int, tally: _Tally
    ) -> PageClassification:
        try:
            buffer = raster.rasterize_page(page_index, self.config.render_scale)
        except RenderError as e:
            logger.warning(
                f"Page {page_index + 1} of {filename} could not be rendered, "
                f"treating as black & white: {e}"
            )
            tally.render_fallbacks += 1
            return PageClassification.BLACK_AND_WHITE

        label = self.classifier.classify(buffer)
        logger.debug(f"Page {page_index + 1} of {filename}: {label.value}")
        return label

    def _finalize(self, accumulators: Dict, tally: _Tally) -> Dict[PageClassification, bytes]:
        outputs: Dict[PageClassification, bytes] = {}

        for label in CLASSES:
            acc = accumulators[label]
            if acc.is_empty:
                acc.discard()
                continue
            try:
                outputs[label] = self.assembler.finalize(acc)
            except EncodeError as e:
                logger.error(f"Dropping {label.value} output: {e}")
                tally.diagnostics.append(Diagnostic(ErrorKind.ENCODE, str(e), output=label))

        return outputs

    def _emit(self, event: ProgressEvent) -> None:
        if self.on_progress is not None:
            self.on_progress(event)


def run_split(
    files: Sequence,
    threshold: float = DEFAULT_THRESHOLD,
    insert_separators: bool = False,
    render_scale: Optional[float] = None,
    backend: Optional[PdfBackend] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> SplitResult:
    """Split files into color and black & white documents.

    Args:
        files: Input file handles, processed in order
        threshold: Color sensitivity in [10, 100]; higher is stricter
        insert_separators: Put a blank page between source files in each output
        render_scale: Rasterization scale override
        backend: PDF collaborators (default: pymupdf)
        on_progress: Progress callback

    Returns:
        SplitResult
    """
    config = SplitConfig(
        threshold=threshold,
        insert_separators=insert_separators,
        render_scale=render_scale or DEFAULT_RENDER_SCALE,
    )
    pipeline = SplitPipeline(config=config, backend=backend, on_progress=on_progress)
    return pipeline.run(files)
