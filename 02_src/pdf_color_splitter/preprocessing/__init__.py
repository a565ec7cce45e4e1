"""Preprocessing module for page rasterization."""

from .renderer import RasterSource

__all__ = ["RasterSource"]
