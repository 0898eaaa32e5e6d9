"""Tuning constants for the detection pipeline.

Every threshold used by the estimator, octave corrector and stabilizer
is a named field here so it can be tuned and tested on its own.
"""

import json
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Dict, Union

from .constants import (
    DEFAULT_FRAME_SIZE,
    DEFAULT_HOP_LENGTH,
    DEFAULT_SR,
    GUITAR_MAX_HZ,
    GUITAR_MIN_HZ,
    MIN_FRAME_LENGTH,
)


@dataclass
class TunerConfig:
    """Configuration for the tuner pipeline.

    Attributes:
        yin_threshold: CMND value a lag must dip below to count as periodic (default: 0.15)
        octave_ratio: Prefer f/2 when CMND at 2T is below this fraction of CMND at T (default: 0.5)
        min_frequency: Lowest accepted frequency in Hz (default: 75)
        max_frequency: Highest accepted frequency in Hz (default: 1400)
        min_clarity: Readings below this clarity are discarded (default: 0.85)
        stability_window: Confident readings needed before output (default: 5)
        convergence_cents: Max spread of the stability window in cents (default: 30)
        jump_cents: Distance from the EMA that counts as a new note (default: 150)
        median_window: Size of the median filter (default: 5)
        ema_alpha: Weight of the newest median in the EMA (default: 0.1)
        hysteresis_ms: Time a new note must persist before it is shown (default: 100)
        sample_rate: Capture sample rate in Hz (default: 44100)
        frame_size: Samples per analysis frame (default: 8192)
        hop_length: Samples between frames when reading files (default: 1470)
    """

    yin_threshold: float = 0.15
    octave_ratio: float = 0.5
    min_frequency: float = GUITAR_MIN_HZ
    max_frequency: float = GUITAR_MAX_HZ
    min_clarity: float = 0.85
    stability_window: int = 5
    convergence_cents: float = 30.0
    jump_cents: float = 150.0
    median_window: int = 5
    ema_alpha: float = 0.1
    hysteresis_ms: float = 100.0
    sample_rate: int = DEFAULT_SR
    frame_size: int = DEFAULT_FRAME_SIZE
    hop_length: int = DEFAULT_HOP_LENGTH

    def __post_init__(self):
        if not 0 < self.yin_threshold <= 1:
            raise ValueError(f"yin_threshold must be in (0, 1], got {self.yin_threshold}")
        if not 0 < self.octave_ratio <= 1:
            raise ValueError(f"octave_ratio must be in (0, 1], got {self.octave_ratio}")
        if not 0 < self.min_frequency < self.max_frequency:
            raise ValueError(
                f"Need 0 < min_frequency < max_frequency, "
                f"got {self.min_frequency} and {self.max_frequency}"
            )
        if not 0 <= self.min_clarity <= 1:
            raise ValueError(f"min_clarity must be in [0, 1], got {self.min_clarity}")
        if self.stability_window < 1:
            raise ValueError(f"stability_window must be >= 1, got {self.stability_window}")
        if self.median_window < 1:
            raise ValueError(f"median_window must be >= 1, got {self.median_window}")
        if self.convergence_cents < 0:
            raise ValueError(f"convergence_cents must be >= 0, got {self.convergence_cents}")
        if self.jump_cents <= 0:
            raise ValueError(f"jump_cents must be positive, got {self.jump_cents}")
        if not 0 < self.ema_alpha <= 1:
            raise ValueError(f"ema_alpha must be in (0, 1], got {self.ema_alpha}")
        if self.hysteresis_ms < 0:
            raise ValueError(f"hysteresis_ms must be >= 0, got {self.hysteresis_ms}")
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        if self.frame_size < MIN_FRAME_LENGTH:
            raise ValueError(
                f"frame_size must be >= {MIN_FRAME_LENGTH}, got {self.frame_size}"
            )
        if self.hop_length < 1:
            raise ValueError(f"hop_length must be >= 1, got {self.hop_length}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TunerConfig":
        """Build a config from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
        return cls(**data)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "TunerConfig":
        """Load a config from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        data = json.loads(path.read_text())
        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a JSON object: {path}")
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    def replace(self, **overrides: Any) -> "TunerConfig":
        """Return a copy with the given fields overridden (None values skipped)."""
        data = self.to_dict()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return self.from_dict(data)
