"""Pluck Tuner - Real-time pitch detection for plucked strings.

Architecture Layers:
    1. core/       - Value types, note mapping, configuration
    2. input/      - Audio loading and frame sources (array, file, microphone)
    3. analysis/   - Per-frame pitch estimation (YIN, octave correction)
    4. processing/ - Temporal stabilization (gating, smoothing, hysteresis)
    5. pipeline    - Per-frame composition of the stages
    6. session     - Capture session owning a source and pipeline state
"""

__version__ = "0.1.0"

# Core types
from .core import (
    TunerConfig,
    PitchResult,
    NoteInfo,
    SmoothedResult,
    TunerState,
    TunerStatus,
    frequency_to_note,
)

# Input layer
from .input import (
    AudioLoader,
    FrameSource,
    ArrayFrameSource,
    FileFrameSource,
    MicrophoneFrameSource,
)

# Analysis layer
from .analysis import (
    YinDetector,
    OctaveCorrector,
    detect_pitch,
    correct_octave_errors,
    cumulative_mean_normalized_difference,
)

# Processing layer
from .processing import PitchStabilizer, median

# Composition
from .pipeline import TunerPipeline
from .session import TunerSession

__all__ = [
    # Core
    "TunerConfig",
    "PitchResult",
    "NoteInfo",
    "SmoothedResult",
    "TunerState",
    "TunerStatus",
    "frequency_to_note",
    # Input
    "AudioLoader",
    "FrameSource",
    "ArrayFrameSource",
    "FileFrameSource",
    "MicrophoneFrameSource",
    # Analysis
    "YinDetector",
    "OctaveCorrector",
    "detect_pitch",
    "correct_octave_errors",
    "cumulative_mean_normalized_difference",
    # Processing
    "PitchStabilizer",
    "median",
    # Composition
    "TunerPipeline",
    "TunerSession",
]
