"""Equal-temperament note mapping."""

import math

from .constants import A4_FREQUENCY, A4_MIDI, NOTE_NAMES
from .types import NoteInfo


def frequency_to_note(hz: float) -> NoteInfo:
    """Map a frequency to the nearest 12-TET note (A4 = 440 Hz).

    Args:
        hz: Frequency in Hz, must be positive

    Returns:
        NoteInfo with pitch-class name, octave and signed cents deviation
    """
    if hz <= 0:
        raise ValueError(f"Frequency must be positive, got {hz}")

    midi_float = 12 * math.log2(hz / A4_FREQUENCY) + A4_MIDI
    # Halves round up, so cents falls in [-50, 50)
    midi_rounded = math.floor(midi_float + 0.5)
    cents = (midi_float - midi_rounded) * 100
    note = NOTE_NAMES[midi_rounded % 12]
    octave = midi_rounded // 12 - 1

    return NoteInfo(note=note, octave=octave, cents=cents, frequency=hz)


def midi_to_frequency(midi: float) -> float:
    """Convert a (possibly fractional) MIDI number to Hz."""
    return A4_FREQUENCY * (2 ** ((midi - A4_MIDI) / 12.0))
