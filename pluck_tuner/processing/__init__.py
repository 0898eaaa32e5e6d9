"""Processing layer - Frame-to-frame stabilization of pitch estimates."""

from .stabilizer import PitchStabilizer, median, cents_between

__all__ = [
    "PitchStabilizer",
    "median",
    "cents_between",
]
