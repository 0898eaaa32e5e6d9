"""Core types, constants and configuration for Pluck Tuner."""

from .config import TunerConfig
from .constants import (
    NOTE_NAMES,
    A4_FREQUENCY,
    A4_MIDI,
    DEFAULT_SR,
    DEFAULT_FRAME_SIZE,
    DEFAULT_HOP_LENGTH,
)
from .note import frequency_to_note, midi_to_frequency
from .types import (
    PitchResult,
    NoteInfo,
    SmoothedResult,
    TunerState,
    TunerStatus,
)

__all__ = [
    "TunerConfig",
    "NOTE_NAMES",
    "A4_FREQUENCY",
    "A4_MIDI",
    "DEFAULT_SR",
    "DEFAULT_FRAME_SIZE",
    "DEFAULT_HOP_LENGTH",
    "frequency_to_note",
    "midi_to_frequency",
    "PitchResult",
    "NoteInfo",
    "SmoothedResult",
    "TunerState",
    "TunerStatus",
]
