"""Configuration schemas for the split pipeline."""

import logging
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

MIN_THRESHOLD = 10
MAX_THRESHOLD = 100
DEFAULT_THRESHOLD = 50
DEFAULT_RENDER_SCALE = 0.5

_TRUE_VALUES = {"1", "true", "yes", "on"}


def clamp_threshold(value) -> float:
    """Convert a threshold to float and clamp it into range, without logging.

    Raises:
        ValueError: If value is not a number
    """
    if isinstance(value, bool):
        raise ValueError(f"Threshold must be a number, got {value!r}")
    try:
        threshold = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Threshold must be a number, got {value!r}") from None

    if math.isnan(threshold):
        raise ValueError("Threshold must be a number, got NaN")

    return min(max(threshold, MIN_THRESHOLD), MAX_THRESHOLD)


def validate_threshold(value) -> float:
    """Validate a sensitivity threshold and clamp it into range.

    Logs a warning when the value had to be clamped.

    Args:
        value: Threshold candidate (int, float or numeric string)

    Returns:
        Threshold clamped to [MIN_THRESHOLD, MAX_THRESHOLD]

    Raises:
        ValueError: If value is not a number
    """
    clamped = clamp_threshold(value)
    if clamped != float(value):
        logger.warning(
            f"Threshold {value} out of range "
            f"[{MIN_THRESHOLD}, {MAX_THRESHOLD}], using {clamped:g}"
        )
    return clamped


@dataclass
class SplitConfig:
    """Configuration for SplitPipeline.

    Fields left as None are read from the environment
    (COLOR_SPLIT_THRESHOLD, COLOR_SPLIT_SEPARATORS, COLOR_SPLIT_OUTPUT_DIR,
    COLOR_SPLIT_LOG_LEVEL) and fall back to the defaults below.

    Attributes:
        threshold: Color sensitivity, 10-100, higher is stricter (default: 50)
        insert_separators: Insert blank pages between source files
        render_scale: Scale used to rasterize pages for classification
        output_dir: Parent directory for CLI run folders
        log_level: Logging level (default: INFO)
    """
    threshold: Optional[float] = None
    insert_separators: Optional[bool] = None
    render_scale: float = DEFAULT_RENDER_SCALE
    output_dir: Optional[Path] = None
    log_level: Optional[str] = None

    def __post_init__(self):
        """Fill unset fields from environment and validate."""
        if self.threshold is None:
            self.threshold = os.getenv("COLOR_SPLIT_THRESHOLD", DEFAULT_THRESHOLD)
        self.threshold = validate_threshold(self.threshold)

        if self.insert_separators is None:
            env_value = os.getenv("COLOR_SPLIT_SEPARATORS", "")
            self.insert_separators = env_value.strip().lower() in _TRUE_VALUES

        if self.output_dir is None:
            self.output_dir = Path(os.getenv("COLOR_SPLIT_OUTPUT_DIR", "color_split_runs"))
        else:
            self.output_dir = Path(self.output_dir)

        if self.log_level is None:
            self.log_level = os.getenv("COLOR_SPLIT_LOG_LEVEL", "INFO")

        if self.render_scale <= 0:
            raise ValueError(f"render_scale must be positive, got {self.render_scale}")
