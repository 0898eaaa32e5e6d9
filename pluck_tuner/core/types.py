"""Value types passed between pipeline stages."""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class PitchResult:
    """Raw pitch estimate for one frame."""

    frequency: float  # Hz, > 0
    clarity: float  # 1 - CMND at the chosen lag, in [0, 1]


@dataclass(frozen=True)
class NoteInfo:
    """Nearest equal-temperament note for a frequency."""

    note: str  # Pitch class name, e.g. "A♯"
    octave: int
    cents: float  # Deviation from the nearest semitone
    frequency: float

    @property
    def name(self) -> str:
        """Note name with octave (e.g., 'E2')."""
        return f"{self.note}{self.octave}"


@dataclass(frozen=True)
class SmoothedResult:
    """Stabilized reading, the only detection value a display sees."""

    frequency: float
    clarity: float
    note: str
    octave: int
    cents: float

    @property
    def name(self) -> str:
        """Note name with octave (e.g., 'E2')."""
        return f"{self.note}{self.octave}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return asdict(self)


class TunerStatus(Enum):
    """What a display should show for the current tick."""
    IDLE = "idle"
    LISTENING = "listening"
    DETECTED = "detected"


@dataclass(frozen=True)
class TunerState:
    """Per-tick tuner state handed to a display driver."""

    status: TunerStatus
    result: Optional[SmoothedResult] = None
    timestamp: Optional[float] = None  # ms

    @classmethod
    def idle(cls) -> "TunerState":
        return cls(status=TunerStatus.IDLE)

    @classmethod
    def listening(cls, timestamp: Optional[float] = None) -> "TunerState":
        return cls(status=TunerStatus.LISTENING, timestamp=timestamp)

    @classmethod
    def detected(
        cls, result: SmoothedResult, timestamp: Optional[float] = None
    ) -> "TunerState":
        return cls(status=TunerStatus.DETECTED, result=result, timestamp=timestamp)

    @property
    def is_detected(self) -> bool:
        return self.status is TunerStatus.DETECTED

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        data: Dict[str, Any] = {"status": self.status.value}
        if self.timestamp is not None:
            data["timestamp_ms"] = self.timestamp
        if self.result is not None:
            data.update(self.result.to_dict())
        return data
