"""Per-frame tuner pipeline: YIN -> octave correction -> stabilizer."""

import time
from typing import Optional

import numpy as np

from .analysis import OctaveCorrector, YinDetector
from .core import SmoothedResult, TunerConfig, TunerState
from .processing import PitchStabilizer


class TunerPipeline:
    """Runs the three detection stages for one frame at a time.

    The estimator and corrector are stateless per call and share one CMND
    array. The stabilizer carries state across frames, so a pipeline
    belongs to a single capture session.
    """

    def __init__(self, config: Optional[TunerConfig] = None):
        self.config = config or TunerConfig()
        self.detector = YinDetector(self.config)
        self.corrector = OctaveCorrector(self.config)
        self.stabilizer = PitchStabilizer(self.config)

    def process_frame(
        self,
        frame: np.ndarray,
        sample_rate: int,
        now: Optional[float] = None,
    ) -> Optional[SmoothedResult]:
        """
        Run one frame through the pipeline.

        Args:
            frame: 1-D sample window
            sample_rate: Sample rate in Hz
            now: Timestamp in ms (default: monotonic clock)

        Returns:
            SmoothedResult when a stable note is available, else None
        """
        if now is None:
            now = time.monotonic() * 1000.0

        raw = self.detector.estimate(frame, sample_rate)
        if raw is None:
            return None

        corrected = self.corrector.correct(
            raw, frame, sample_rate, cmnd=self.detector.last_cmnd
        )
        if corrected is None:
            return None

        return self.stabilizer.process(corrected, now)

    def state_for_frame(
        self,
        frame: np.ndarray,
        sample_rate: int,
        now: Optional[float] = None,
    ) -> TunerState:
        """Run one frame and wrap the outcome as a display state."""
        result = self.process_frame(frame, sample_rate, now)
        if result is None:
            return TunerState.listening(now)
        return TunerState.detected(result, now)

    def reset(self) -> None:
        """Clear stabilizer state (session restart)."""
        self.stabilizer.reset()
