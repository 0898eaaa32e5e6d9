"""Audio file loading for offline tuning."""

import numpy as np
import librosa
from pathlib import Path
from typing import Optional, Tuple


class AudioLoader:
    """Loads audio files as mono float frames in [-1, 1]."""

    SUPPORTED_FORMATS = {".wav", ".mp3", ".flac", ".ogg", ".m4a", ".aiff", ".aif"}

    def __init__(
        self,
        target_sr: Optional[int] = None,
        normalize: bool = False,
    ):
        """
        Initialize AudioLoader.

        Args:
            target_sr: Resample to this rate, or keep the file's native rate if None
            normalize: Peak-normalize audio if True
        """
        self.target_sr = target_sr
        self.normalize = normalize

    def load(self, path: str) -> Tuple[np.ndarray, int]:
        """
        Load audio file as mono.

        Args:
            path: Path to audio file

        Returns:
            Tuple of (audio array, sample rate)

        Raises:
            ValueError: If file format not supported
            FileNotFoundError: If file doesn't exist
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Audio file not found: {path}")

        if path.suffix.lower() not in self.SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported format: {path.suffix}. "
                f"Supported: {sorted(self.SUPPORTED_FORMATS)}"
            )

        audio, sr = librosa.load(str(path), sr=self.target_sr, mono=True)

        if self.normalize:
            audio = self._normalize(audio)

        return audio, int(sr)

    def _normalize(self, audio: np.ndarray) -> np.ndarray:
        """Normalize audio to [-1, 1] range using peak normalization."""
        peak = np.abs(audio).max()
        if peak > 0:
            audio = audio / peak
        return audio

    def get_duration(self, audio: np.ndarray, sr: int) -> float:
        """Get duration in seconds."""
        return len(audio) / sr
