"""Analysis layer - Per-frame pitch estimation.

This layer turns one window of samples into a raw pitch estimate:
- YIN period estimation (difference function, CMND, interpolation)
- Octave error correction and instrument range filtering
"""

from .yin import (
    YinDetector,
    detect_pitch,
    cumulative_mean_normalized_difference,
)
from .octave import OctaveCorrector, correct_octave_errors

__all__ = [
    "YinDetector",
    "detect_pitch",
    "cumulative_mean_normalized_difference",
    "OctaveCorrector",
    "correct_octave_errors",
]
