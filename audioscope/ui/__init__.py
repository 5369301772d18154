"""Terminal user interface for audioscope."""

from .visualizer import Visualizer

__all__ = ["Visualizer"]
