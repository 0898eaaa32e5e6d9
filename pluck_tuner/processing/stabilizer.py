"""Temporal stabilization of per-frame pitch estimates.

Turns a noisy stream of corrected estimates into a steady note display:
- Confidence gating (drop low-clarity frames)
- Large-jump detection (a new note resets smoothing state)
- Convergence check over a sliding stability window
- Median filter followed by exponential smoothing
- Hysteresis on the displayed note name
"""

import logging
import math
from collections import deque
from typing import Optional, Sequence, Tuple

from ..core import PitchResult, SmoothedResult, TunerConfig, frequency_to_note
from ..core.constants import CENTS_PER_OCTAVE

logger = logging.getLogger(__name__)


def median(values: Sequence[float]) -> float:
    """Sorted-middle value, or the mean of the two middle values."""
    if not values:
        raise ValueError("median() of an empty sequence")
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2:
        return ordered[mid]
    return (ordered[mid - 1] + ordered[mid]) / 2


def cents_between(a_hz: float, b_hz: float) -> float:
    """Signed distance from b to a in cents."""
    return CENTS_PER_OCTAVE * math.log2(a_hz / b_hz)


class PitchStabilizer:
    """Debounces a stream of pitch estimates into stable note readings.

    State belongs to one capture session and must not be shared between
    callers. Every call to process() mutates it, including calls that
    return None.
    """

    def __init__(self, config: Optional[TunerConfig] = None):
        self.config = config or TunerConfig()
        self.reset()

    def reset(self) -> None:
        """Return all state to its construction-time values."""
        self.stability_buffer = deque(maxlen=self.config.stability_window)
        self.median_buffer = deque(maxlen=self.config.median_window)
        self.ema_frequency: Optional[float] = None
        self.current_note: Optional[Tuple[str, int]] = None
        self.pending_note: Optional[Tuple[str, int]] = None
        self.pending_since: Optional[float] = None

    def process(self, result: PitchResult, now: float) -> Optional[SmoothedResult]:
        """
        Feed one corrected estimate.

        Args:
            result: Corrected pitch estimate for this frame
            now: Timestamp in milliseconds

        Returns:
            SmoothedResult once the signal is confident and settled,
            otherwise None
        """
        cfg = self.config

        if result.clarity < cfg.min_clarity:
            self.stability_buffer.clear()
            return None

        if self.ema_frequency is not None:
            jump = abs(cents_between(result.frequency, self.ema_frequency))
            if jump > cfg.jump_cents:
                logger.debug(
                    "Jump of %.0f cents from %.2f Hz, resetting", jump, self.ema_frequency
                )
                self.reset()

        self.stability_buffer.append(result.frequency)
        if len(self.stability_buffer) < cfg.stability_window:
            return None

        spread = cents_between(max(self.stability_buffer), min(self.stability_buffer))
        if spread > cfg.convergence_cents:
            return None

        self.median_buffer.append(result.frequency)
        median_freq = median(self.median_buffer)

        if self.ema_frequency is None:
            self.ema_frequency = median_freq
        else:
            self.ema_frequency = (
                cfg.ema_alpha * median_freq + (1 - cfg.ema_alpha) * self.ema_frequency
            )

        note_info = frequency_to_note(self.ema_frequency)
        note, octave = self._apply_hysteresis((note_info.note, note_info.octave), now)

        return SmoothedResult(
            frequency=self.ema_frequency,
            clarity=result.clarity,
            note=note,
            octave=octave,
            cents=note_info.cents,
        )

    def _apply_hysteresis(self, candidate: Tuple[str, int], now: float) -> Tuple[str, int]:
        """Resolve the displayed (note, octave) for a newly mapped note."""
        if self.current_note is None or candidate == self.current_note:
            self.current_note = candidate
            self._clear_pending()
            return candidate

        if candidate != self.pending_note:
            self.pending_note = candidate
            self.pending_since = now
            return self.current_note

        if now - self.pending_since >= self.config.hysteresis_ms:
            logger.debug(
                "Note change %s%d -> %s%d", *self.current_note, *candidate
            )
            self.current_note = candidate
            self._clear_pending()
            return candidate

        return self.current_note

    def _clear_pending(self) -> None:
        self.pending_note = None
        self.pending_since = None
