"""Input layer - Audio loading and frame capture."""

from .loader import AudioLoader
from .sources import (
    FrameSource,
    ArrayFrameSource,
    FileFrameSource,
    MicrophoneFrameSource,
    list_input_devices,
)

__all__ = [
    "AudioLoader",
    "FrameSource",
    "ArrayFrameSource",
    "FileFrameSource",
    "MicrophoneFrameSource",
    "list_input_devices",
]
