"""Luminance-adaptive color detection for rendered pages.

A page is sampled on a fixed pixel stride. Each opaque sample is put into a
luminance regime (dark, mid, bright) and tested for color with a rule tuned to
that regime: saturation compresses near black and washes out near white, so
the extreme regimes scale the threshold down and also accept raw chroma.
The fraction of colored samples is then compared against a cutoff that drops
when most of the page sits in the extreme regimes.
"""

import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from ..schemas.common import PageClassification, PixelBuffer
from ..schemas.config import DEFAULT_THRESHOLD, clamp_threshold, validate_threshold

logger = logging.getLogger(__name__)

PIXEL_STRIDE = 4
MIN_ALPHA = 10

# ITU-R BT.601 luma weights
LUMA_R = 0.299
LUMA_G = 0.587
LUMA_B = 0.114

DARK = "dark"
MID = "mid"
BRIGHT = "bright"

DARK_LUMINANCE = 50
BRIGHT_LUMINANCE = 220

DARK_THRESHOLD_FACTOR = 0.7
BRIGHT_THRESHOLD_FACTOR = 0.8

DARK_CHROMA_FLOOR = 20
BRIGHT_CHROMA_FLOOR = 25
MID_CHROMA_FLOOR = 30
MID_MIN_SATURATION = 0.15

BASE_COLOR_FRACTION = 0.01
# (extreme fraction above, colored-fraction cutoff), strictest first
EXTREME_CUTOFFS = (
    (0.9, 0.0025),
    (0.7, 0.005),
)


@dataclass(frozen=True)
class ColorStats:
    """Sampling statistics behind a classification.

    Attributes:
        sampled: Opaque pixels that were counted
        colored: Counted pixels flagged as colored
        dark: Counted pixels in the dark regime
        bright: Counted pixels in the bright regime
        cutoff: Colored-fraction cutoff that was applied
    """
    sampled: int
    colored: int
    dark: int
    bright: int
    cutoff: float

    @property
    def colored_fraction(self) -> float:
        return self.colored / self.sampled if self.sampled else 0.0

    @property
    def extreme_fraction(self) -> float:
        return (self.dark + self.bright) / self.sampled if self.sampled else 0.0

    @property
    def classification(self) -> PageClassification:
        if self.sampled and self.colored_fraction > self.cutoff:
            return PageClassification.COLOR
        return PageClassification.BLACK_AND_WHITE


def _decision_cutoff(extreme_fraction: float) -> float:
    for min_extreme, cutoff in EXTREME_CUTOFFS:
        if extreme_fraction > min_extreme:
            return cutoff
    return BASE_COLOR_FRACTION


def _regime_masks(rgb: np.ndarray, threshold: float):
    """Vectorized regime test over an (N, 3) uint8 array.

    Returns:
        (dark, bright, colored) boolean masks of length N
    """
    channels = rgb.astype(np.float64)
    hi = channels.max(axis=1)
    chroma = hi - channels.min(axis=1)
    saturation = np.divide(chroma, hi, out=np.zeros_like(hi), where=hi > 0)
    scaled = saturation * 255
    luminance = channels @ np.array([LUMA_R, LUMA_G, LUMA_B])

    dark = luminance < DARK_LUMINANCE
    bright = luminance > BRIGHT_LUMINANCE
    mid = ~(dark | bright)

    dark_colored = (
        (scaled > threshold * DARK_THRESHOLD_FACTOR) | (chroma > DARK_CHROMA_FLOOR)
    )
    bright_colored = (
        (scaled > threshold * BRIGHT_THRESHOLD_FACTOR) | (chroma > BRIGHT_CHROMA_FLOOR)
    )
    mid_colored = (scaled > threshold) | (
        (chroma > MID_CHROMA_FLOOR) & (saturation > MID_MIN_SATURATION)
    )

    colored = (dark & dark_colored) | (bright & bright_colored) | (mid & mid_colored)
    return dark, bright, colored


def classify_pixel(r: int, g: int, b: int, threshold: float) -> Tuple[str, bool]:
    """Regime-aware color test for one pixel.

    Returns:
        (regime, colored) where regime is one of DARK, MID, BRIGHT
    """
    dark, bright, colored = _regime_masks(np.array([[r, g, b]], dtype=np.uint8), threshold)
    regime = DARK if dark[0] else BRIGHT if bright[0] else MID
    return regime, bool(colored[0])


def analyze(buffer: PixelBuffer, threshold: float) -> ColorStats:
    """Collect sampling statistics for a buffer.

    The threshold is expected to be validated already.
    """
    pixels = np.frombuffer(buffer.samples, dtype=np.uint8).reshape(-1, 4)
    sampled_pixels = pixels[::PIXEL_STRIDE]
    opaque = sampled_pixels[sampled_pixels[:, 3] >= MIN_ALPHA]

    sampled = len(opaque)
    if not sampled:
        return ColorStats(sampled=0, colored=0, dark=0, bright=0, cutoff=BASE_COLOR_FRACTION)

    dark, bright, colored = _regime_masks(opaque[:, :3], threshold)
    n_dark = int(dark.sum())
    n_bright = int(bright.sum())

    return ColorStats(
        sampled=sampled,
        colored=int(colored.sum()),
        dark=n_dark,
        bright=n_bright,
        cutoff=_decision_cutoff((n_dark + n_bright) / sampled),
    )


def classify(buffer: PixelBuffer, threshold: float) -> PageClassification:
    """Classify a rendered page as color or black & white.

    Out-of-range thresholds are clamped silently; use ColorClassifier or
    SplitConfig to get a warning about clamping.

    Args:
        buffer: RGBA page raster
        threshold: Sensitivity in [10, 100]; higher is stricter

    Returns:
        PageClassification. A buffer without opaque samples is black & white.

    Raises:
        ValueError: If threshold is not a number
    """
    return analyze(buffer, clamp_threshold(threshold)).classification


class ColorClassifier:
    """Classifier bound to one validated threshold."""

    def __init__(self, threshold: float = DEFAULT_THRESHOLD):
        self.threshold = validate_threshold(threshold)

    def classify(self, buffer: PixelBuffer) -> PageClassification:
        stats = analyze(buffer, self.threshold)
        logger.debug(
            f"Classified {buffer.width}x{buffer.height} raster: "
            f"sampled={stats.sampled}, colored={stats.colored_fraction:.4f}, "
            f"extreme={stats.extreme_fraction:.2f}, cutoff={stats.cutoff} "
            f"-> {stats.classification.value}"
        )
        return stats.classification
