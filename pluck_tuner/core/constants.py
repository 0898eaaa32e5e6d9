"""Global constants for Pluck Tuner."""

# Pitch class names, sharp spelling
NOTE_NAMES = ["C", "C♯", "D", "D♯", "E", "F", "F♯", "G", "G♯", "A", "A♯", "B"]

# Equal temperament reference
A4_FREQUENCY = 440.0
A4_MIDI = 69
CENTS_PER_OCTAVE = 1200.0

# Playable guitar range (Hz)
GUITAR_MIN_HZ = 75.0
GUITAR_MAX_HZ = 1400.0

# Capture defaults
DEFAULT_SR = 44100
DEFAULT_FRAME_SIZE = 8192
DEFAULT_HOP_LENGTH = 1470  # ~30 frames per second at 44.1 kHz

# Smallest frame the YIN scan can work on (halfLen >= 3)
MIN_FRAME_LENGTH = 6
