"""Octave error correction and range filtering.

YIN sometimes locks onto the second harmonic (period T/2) instead of the
fundamental (period T). A periodic signal scores low CMND at both T and
2T, but when the detected lag is really half the period, CMND at 2T is
dramatically lower than at the detected lag. In that case the frequency
is halved.
"""

from typing import Optional

import numpy as np

from ..core import PitchResult, TunerConfig
from .yin import cumulative_mean_normalized_difference, validate_frame


def correct_octave_errors(
    result: PitchResult,
    frame: np.ndarray,
    sample_rate: int,
    cmnd: Optional[np.ndarray] = None,
    octave_ratio: float = 0.5,
    min_frequency: float = 75.0,
    max_frequency: float = 1400.0,
) -> Optional[PitchResult]:
    """
    Halve octave-doubled estimates and drop out-of-range frequencies.

    Args:
        result: Raw estimate from the YIN stage
        frame: The frame the estimate came from
        sample_rate: Sample rate in Hz
        cmnd: CMND array of the same frame, recomputed if not given
        octave_ratio: Halve when cmnd[2T] < cmnd[T] * octave_ratio
        min_frequency: Lowest frequency kept
        max_frequency: Highest frequency kept

    Returns:
        Corrected PitchResult with unchanged clarity, or None if the
        frequency falls outside [min_frequency, max_frequency]
    """
    if result.frequency <= 0:
        raise ValueError(f"Raw frequency must be positive, got {result.frequency}")

    frame = validate_frame(frame, sample_rate)
    half_len = len(frame) // 2
    if cmnd is None:
        cmnd = cumulative_mean_normalized_difference(frame, half_len)

    frequency = result.frequency
    lag_t = int(round(sample_rate / frequency))
    lag_2t = int(round(sample_rate / (frequency / 2)))

    if (
        lag_t < half_len
        and lag_2t < half_len
        and cmnd[lag_2t] < cmnd[lag_t] * octave_ratio
    ):
        frequency = frequency / 2

    if frequency < min_frequency or frequency > max_frequency:
        return None

    return PitchResult(frequency=frequency, clarity=result.clarity)


class OctaveCorrector:
    """Octave corrector bound to a configuration."""

    def __init__(self, config: Optional[TunerConfig] = None):
        self.config = config or TunerConfig()

    def correct(
        self,
        raw: PitchResult,
        frame: np.ndarray,
        sample_rate: int,
        cmnd: Optional[np.ndarray] = None,
    ) -> Optional[PitchResult]:
        """Correct one raw estimate; see correct_octave_errors."""
        return correct_octave_errors(
            raw,
            frame,
            sample_rate,
            cmnd=cmnd,
            octave_ratio=self.config.octave_ratio,
            min_frequency=self.config.min_frequency,
            max_frequency=self.config.max_frequency,
        )
