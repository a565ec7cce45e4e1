"""CLI interface for splitting PDFs into color and black & white documents.

Each run writes into a timestamped directory:

    output-dir/run_2026-02-09_171500/
        color.pdf        color pages (absent if there are none)
        bw.pdf           black & white pages (absent if there are none)
        report.yaml      page counts and diagnostics
        logs/run.log     full log
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import yaml
from dotenv import load_dotenv

from .core.pipeline import SplitPipeline
from .schemas.common import ProgressEvent, RunOutcome, SplitResult
from .schemas.config import DEFAULT_RENDER_SCALE, MAX_THRESHOLD, MIN_THRESHOLD, SplitConfig

LOG_FORMAT = "%(asctime)s | %(name)s | %(message)s"
LOG_DATEFMT = "%H:%M:%S"

COLOR_FILENAME = "color.pdf"
BW_FILENAME = "bw.pdf"
REPORT_FILENAME = "report.yaml"

logger = logging.getLogger(__name__)


def setup_logging(log_level: str, log_file: Optional[Path] = None) -> None:
    """Setup logging: console + optional file handler.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Path to log file (UTF-8). If None, console only.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        stream=sys.stdout,
        force=True,
    )

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(level)
        fh.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
        logging.getLogger().addHandler(fh)


def validate_arguments(threshold: Optional[float], scale: Optional[float]) -> None:
    """Validate CLI arguments.

    Raises:
        SystemExit: If validation fails
    """
    if threshold is not None and not MIN_THRESHOLD <= threshold <= MAX_THRESHOLD:
        print(
            f"Error: --threshold must be between {MIN_THRESHOLD} and "
            f"{MAX_THRESHOLD}, got {threshold:g}",
            file=sys.stderr,
        )
        sys.exit(1)

    if scale is not None and scale <= 0:
        print(f"Error: --scale must be positive, got {scale:g}", file=sys.stderr)
        sys.exit(1)


def create_run_dir(parent_dir: Path) -> Path:
    """Create timestamped run subdirectory.

    Args:
        parent_dir: Parent directory for runs

    Returns:
        Path to created run directory, e.g. parent_dir/run_2026-02-09_171500/
    """
    ts = datetime.now().strftime("%Y-%m-%d_%H%M%S")
    run_dir = parent_dir / f"run_{ts}"
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir


def write_outputs(run_dir: Path, result: SplitResult) -> List[Path]:
    """Write produced PDFs and the YAML report into run_dir.

    Returns:
        Paths of the written PDFs
    """
    written = []
    for name, data in ((COLOR_FILENAME, result.color_pdf), (BW_FILENAME, result.bw_pdf)):
        if data is None:
            continue
        path = run_dir / name
        path.write_bytes(data)
        written.append(path)
        logger.info(f"Wrote {path} ({len(data)} bytes)")

    report_path = run_dir / REPORT_FILENAME
    with report_path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(result.report.to_dict(), f, allow_unicode=True, sort_keys=False)
    logger.info(f"Wrote {report_path}")

    return written


def log_progress(event: ProgressEvent) -> None:
    if event.page_index is None:
        logger.info(
            f"[{event.file_index + 1}/{event.file_count}] {event.filename} "
            f"({event.page_count} pages)"
        )
    else:
        logger.debug(
            f"[{event.file_index + 1}/{event.file_count}] {event.filename} "
            f"page {event.page_index + 1}/{event.page_count}"
        )


def main() -> int:
    """Main CLI entry point.

    Returns:
        0 on success, 1 if no pages were produced or on error
    """
    parser = argparse.ArgumentParser(
        description="Split PDF pages into a color and a black & white document",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  pdf-color-split thesis.pdf
  pdf-color-split part1.pdf part2.pdf --separators
  pdf-color-split scan.pdf --threshold 70 --output-dir ./print_jobs

Higher thresholds are stricter: fewer pages count as color.
Defaults can be set in .env (COLOR_SPLIT_THRESHOLD, COLOR_SPLIT_SEPARATORS,
COLOR_SPLIT_OUTPUT_DIR, COLOR_SPLIT_LOG_LEVEL).
        """,
    )

    parser.add_argument(
        "files",
        nargs="+",
        type=Path,
        help="PDF files to split, processed in the given order",
    )

    parser.add_argument(
        "--threshold", "-t",
        type=float,
        default=None,
        help=f"Color sensitivity {MIN_THRESHOLD}-{MAX_THRESHOLD} (default: 50)",
    )

    parser.add_argument(
        "--separators", "-s",
        action="store_true",
        default=None,
        help="Insert a blank page between source files in each output",
    )

    parser.add_argument(
        "--output-dir", "-o",
        type=Path,
        default=None,
        help="Parent directory for run folders (default: ./color_split_runs)",
    )

    parser.add_argument(
        "--scale",
        type=float,
        default=None,
        help="Render scale used for classification (default: 0.5)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    args = parser.parse_args()

    try:
        load_dotenv()

        validate_arguments(args.threshold, args.scale)

        config = SplitConfig(
            threshold=args.threshold,
            insert_separators=args.separators,
            output_dir=args.output_dir,
            log_level=args.log_level,
            render_scale=args.scale or DEFAULT_RENDER_SCALE,
        )

        run_dir = create_run_dir(config.output_dir)
        log_file = run_dir / "logs" / "run.log"
        setup_logging(config.log_level, log_file)

        logger.info(f"Run directory: {run_dir}")
        logger.info(f"Inputs: {', '.join(str(f) for f in args.files)}")

        pipeline = SplitPipeline(config=config, on_progress=log_progress)
        result = pipeline.run(args.files)
        written = write_outputs(run_dir, result)
        report = result.report

        print()
        print("=" * 60)
        if report.outcome is RunOutcome.COMPLETED:
            print("Split completed")
        else:
            print("No pages produced")
        print("=" * 60)
        print(f"Run directory:   {run_dir}")
        print(f"Color pages:     {report.color_pages}")
        print(f"B&W pages:       {report.bw_pages}")
        if report.render_fallbacks:
            print(f"Render fallback: {report.render_fallbacks} (counted as B&W)")
        for path in written:
            print(f"Output:          {path}")
        for diag in report.diagnostics:
            where = diag.filename or diag.output.value
            if diag.page_index is not None:
                where = f"{where} page {diag.page_index + 1}"
            print(f"Problem:         [{diag.kind.value}] {where}: {diag.message}")
        print(f"Report:          {run_dir / REPORT_FILENAME}")
        print("=" * 60)

        return 0 if report.outcome is RunOutcome.COMPLETED else 1

    except KeyboardInterrupt:
        print("\nProcessing interrupted by user", file=sys.stderr)
        return 1

    except Exception as e:
        logger.exception(f"Error during processing: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
