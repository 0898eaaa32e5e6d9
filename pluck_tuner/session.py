"""Capture session: one frame source plus the pipeline state it drives.

A session exclusively owns its source and its stabilizer. Entering the
session opens the source; leaving it, by any path, closes the source and
resets the stabilizer.
"""

import logging
from typing import Iterator, Optional

from .core import TunerConfig, TunerState
from .input import FrameSource
from .pipeline import TunerPipeline

logger = logging.getLogger(__name__)


class TunerSession:
    """Drives a TunerPipeline from a FrameSource."""

    def __init__(
        self,
        source: FrameSource,
        config: Optional[TunerConfig] = None,
        pipeline: Optional[TunerPipeline] = None,
    ):
        self.source = source
        self.config = config or TunerConfig()
        self.pipeline = pipeline or TunerPipeline(self.config)
        self.state = TunerState.idle()

    @property
    def is_active(self) -> bool:
        return self.source.is_open

    def open(self) -> None:
        """Acquire the source. On failure nothing is left held."""
        try:
            self.source.open()
        except Exception:
            self.close()
            raise
        self.state = TunerState.listening()
        logger.debug("Session opened on %s", type(self.source).__name__)

    def close(self) -> None:
        """Release the source and clear pipeline state."""
        try:
            self.source.close()
        finally:
            self.pipeline.reset()
            self.state = TunerState.idle()
            logger.debug("Session closed")

    def restart(self) -> None:
        """Tear down and reacquire the source with fresh pipeline state."""
        logger.debug("Restarting session")
        self.close()
        self.open()

    def __enter__(self) -> "TunerSession":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def step(self) -> Optional[TunerState]:
        """Process the next frame, or return None when the source is exhausted."""
        item = self.source.read()
        if item is None:
            return None

        frame, timestamp = item
        self.state = self.pipeline.state_for_frame(
            frame, self.source.sample_rate, timestamp
        )
        return self.state

    def states(self) -> Iterator[TunerState]:
        """Yield one TunerState per frame until the source runs out."""
        while True:
            state = self.step()
            if state is None:
                return
            yield state
