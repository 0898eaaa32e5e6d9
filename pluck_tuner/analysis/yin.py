"""YIN fundamental frequency estimation.

Implements the time-domain estimator of de Cheveigné & Kawahara (2002):

1. Difference function d(tau) over lags [0, halfLen)
2. Cumulative mean normalized difference (CMND)
3. Absolute threshold, then walk down to the local minimum
4. Parabolic interpolation around the chosen lag

The CMND array is also what the octave corrector inspects, so it can be
computed once and shared between both stages.
"""

from typing import Optional

import numpy as np

from ..core import PitchResult, TunerConfig
from ..core.constants import MIN_FRAME_LENGTH


def validate_frame(frame: np.ndarray, sample_rate: int) -> np.ndarray:
    """Check frame preconditions and return it as a 1-D float64 array.

    Raises:
        ValueError: If the frame is not 1-D, too short, or the sample rate
            is not positive
    """
    if sample_rate <= 0:
        raise ValueError(f"Sample rate must be positive, got {sample_rate}")

    frame = np.asarray(frame, dtype=np.float64)
    if frame.ndim != 1:
        raise ValueError(f"Frame must be 1-D, got shape {frame.shape}")
    if len(frame) < MIN_FRAME_LENGTH:
        raise ValueError(
            f"Frame too short: {len(frame)} samples (need >= {MIN_FRAME_LENGTH})"
        )
    return frame


def difference_function(frame: np.ndarray, half_len: int) -> np.ndarray:
    """
    Compute d(tau) = sum_{i<halfLen} (x[i] - x[i+tau])^2 for tau in [0, halfLen).

    Expands the square into two windowed energies and a cross term so the
    O(halfLen^2) work runs inside numpy's correlate.
    """
    x = frame[: 2 * half_len]
    head = x[:half_len]

    # Energy of x[tau : tau + halfLen] for every tau
    cumulative = np.concatenate(([0.0], np.cumsum(x * x)))
    shifted_energy = cumulative[half_len : 2 * half_len] - cumulative[:half_len]

    cross = np.correlate(x[: 2 * half_len - 1], head, mode="valid")

    diff = cumulative[half_len] + shifted_energy - 2.0 * cross
    # Cancellation can leave tiny negatives where d should be 0
    return np.maximum(diff, 0.0)


def cumulative_mean_normalized_difference(
    frame: np.ndarray, half_len: Optional[int] = None
) -> np.ndarray:
    """
    Compute the CMND array for a frame.

    Args:
        frame: 1-D sample window
        half_len: Number of lags (default: len(frame) // 2)

    Returns:
        Array of length half_len with cmnd[0] == 1. Lags where the running
        mean is zero (silent frames) are NaN.
    """
    frame = np.asarray(frame, dtype=np.float64)
    if half_len is None:
        half_len = len(frame) // 2

    diff = difference_function(frame, half_len)

    cmnd = np.empty(half_len, dtype=np.float64)
    cmnd[0] = 1.0
    if half_len > 1:
        taus = np.arange(1, half_len)
        running_mean = np.cumsum(diff[1:]) / taus
        with np.errstate(divide="ignore", invalid="ignore"):
            cmnd[1:] = diff[1:] / running_mean
    return cmnd


def _parabolic_interpolation(cmnd: np.ndarray, tau: int) -> float:
    """Refine a lag using the parabola through cmnd[tau-1..tau+1]."""
    if tau < 1 or tau >= len(cmnd) - 1:
        return float(tau)

    s0, s1, s2 = cmnd[tau - 1], cmnd[tau], cmnd[tau + 1]
    denominator = 2 * (s0 - 2 * s1 + s2)
    if denominator == 0 or not np.isfinite(denominator):
        return float(tau)

    adjustment = (s0 - s2) / denominator
    # Fits near the array edges can throw the vertex far away
    if abs(adjustment) > 1:
        return float(tau)
    return float(tau + adjustment)


def _absolute_threshold(cmnd: np.ndarray, threshold: float) -> int:
    """Return the first local minimum below threshold, or -1."""
    half_len = len(cmnd)
    below = np.flatnonzero(cmnd[2:] < threshold)
    if len(below) == 0:
        return -1

    tau = int(below[0]) + 2
    while tau + 1 < half_len and cmnd[tau + 1] < cmnd[tau]:
        tau += 1
    return tau


def detect_pitch_from_cmnd(
    cmnd: np.ndarray,
    sample_rate: int,
    threshold: float = 0.15,
) -> Optional[PitchResult]:
    """Pick a pitch from a precomputed CMND array (steps 3-5 of YIN)."""
    tau = _absolute_threshold(cmnd, threshold)
    if tau == -1:
        return None

    better_tau = _parabolic_interpolation(cmnd, tau)
    frequency = sample_rate / better_tau
    clarity = float(np.clip(1.0 - cmnd[tau], 0.0, 1.0))

    return PitchResult(frequency=float(frequency), clarity=clarity)


def detect_pitch(
    frame: np.ndarray,
    sample_rate: int,
    threshold: float = 0.15,
) -> Optional[PitchResult]:
    """
    Estimate the fundamental frequency of one frame with YIN.

    Args:
        frame: 1-D sample window, values in [-1, 1]
        sample_rate: Sample rate in Hz
        threshold: CMND threshold for the absolute-threshold step

    Returns:
        PitchResult, or None if no lag dips below the threshold
    """
    frame = validate_frame(frame, sample_rate)
    cmnd = cumulative_mean_normalized_difference(frame)
    return detect_pitch_from_cmnd(cmnd, sample_rate, threshold)


class YinDetector:
    """YIN estimator bound to a configuration.

    Keeps the CMND array of the last call so the octave corrector can
    reuse it for the same frame.
    """

    def __init__(self, config: Optional[TunerConfig] = None):
        self.config = config or TunerConfig()
        self.last_cmnd: Optional[np.ndarray] = None

    def estimate(
        self,
        frame: np.ndarray,
        sample_rate: int,
        threshold: Optional[float] = None,
    ) -> Optional[PitchResult]:
        """Estimate pitch for one frame; see detect_pitch."""
        if threshold is None:
            threshold = self.config.yin_threshold

        frame = validate_frame(frame, sample_rate)
        self.last_cmnd = cumulative_mean_normalized_difference(frame)
        return detect_pitch_from_cmnd(self.last_cmnd, sample_rate, threshold)
