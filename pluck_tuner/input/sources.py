"""Frame sources feeding the tuner pipeline.

A frame source owns a capture resource (an in-memory signal, a decoded
file, or a live input stream) and hands out fixed-length windows, each
stamped with a millisecond timestamp. Sources are context managers so
the resource is released on every exit path.
"""

import logging
import queue
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import librosa

from ..core.constants import DEFAULT_FRAME_SIZE, DEFAULT_HOP_LENGTH, DEFAULT_SR
from .loader import AudioLoader

logger = logging.getLogger(__name__)

Frame = Tuple[np.ndarray, float]


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class FrameSource(ABC):
    """Base class for anything that yields analysis frames."""

    def __init__(self, frame_size: int, hop_length: int, sample_rate: Optional[int]):
        if frame_size < 1:
            raise ValueError(f"frame_size must be positive, got {frame_size}")
        if hop_length < 1:
            raise ValueError(f"hop_length must be positive, got {hop_length}")
        self.frame_size = frame_size
        self.hop_length = hop_length
        self.sample_rate = sample_rate

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """Whether the underlying resource is currently held."""

    @abstractmethod
    def open(self) -> None:
        """Acquire the underlying resource."""

    @abstractmethod
    def close(self) -> None:
        """Release the underlying resource. Safe to call twice."""

    @abstractmethod
    def read(self) -> Optional[Frame]:
        """
        Return the next (frame, timestamp_ms), or None once exhausted.

        Raises:
            RuntimeError: If the source is not open
        """

    def __enter__(self) -> "FrameSource":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _require_open(self) -> None:
        if not self.is_open:
            raise RuntimeError(f"{type(self).__name__} is not open")


class ArrayFrameSource(FrameSource):
    """Slides a window across an in-memory signal.

    Timestamps mark the end of each window relative to the start of the
    signal, so replaying the same signal yields the same timestamps.
    """

    def __init__(
        self,
        audio: np.ndarray,
        sample_rate: int,
        frame_size: int = DEFAULT_FRAME_SIZE,
        hop_length: int = DEFAULT_HOP_LENGTH,
    ):
        super().__init__(frame_size, hop_length, sample_rate)
        if sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive, got {sample_rate}")
        audio = np.asarray(audio, dtype=np.float32)
        if audio.ndim != 1:
            raise ValueError(f"Audio must be mono (1-D), got shape {audio.shape}")
        self.audio = audio
        self._frames: Optional[np.ndarray] = None
        self._index = 0

    @property
    def is_open(self) -> bool:
        return self._frames is not None

    @property
    def n_frames(self) -> int:
        """Number of windows the signal yields (at least one)."""
        if len(self.audio) <= self.frame_size:
            return 1
        return 1 + (len(self.audio) - self.frame_size) // self.hop_length

    def open(self) -> None:
        audio = self.audio
        if len(audio) < self.frame_size:
            audio = np.pad(audio, (0, self.frame_size - len(audio)))
        self._frames = librosa.util.frame(
            np.ascontiguousarray(audio),
            frame_length=self.frame_size,
            hop_length=self.hop_length,
        )
        self._index = 0

    def close(self) -> None:
        self._frames = None
        self._index = 0

    def read(self) -> Optional[Frame]:
        self._require_open()
        if self._index >= self._frames.shape[-1]:
            return None

        frame = self._frames[:, self._index]
        end_sample = self._index * self.hop_length + self.frame_size
        timestamp = 1000.0 * end_sample / self.sample_rate
        self._index += 1
        return frame, timestamp


class FileFrameSource(FrameSource):
    """Windows over a decoded audio file."""

    def __init__(
        self,
        path: str,
        frame_size: int = DEFAULT_FRAME_SIZE,
        hop_length: int = DEFAULT_HOP_LENGTH,
        sample_rate: Optional[int] = None,
        loader: Optional[AudioLoader] = None,
    ):
        super().__init__(frame_size, hop_length, sample_rate)
        self.path = Path(path)
        self.loader = loader or AudioLoader(target_sr=sample_rate)
        self.duration = 0.0
        self._inner: Optional[ArrayFrameSource] = None

    @property
    def is_open(self) -> bool:
        return self._inner is not None

    def open(self) -> None:
        audio, sr = self.loader.load(str(self.path))
        self.sample_rate = sr
        self.duration = self.loader.get_duration(audio, sr)
        self._inner = ArrayFrameSource(audio, sr, self.frame_size, self.hop_length)
        self._inner.open()
        logger.debug(
            "Loaded %s: %.2fs at %d Hz, %d frames",
            self.path.name, self.duration, sr, self._inner.n_frames,
        )

    def close(self) -> None:
        if self._inner is not None:
            self._inner.close()
            self._inner = None

    def read(self) -> Optional[Frame]:
        self._require_open()
        return self._inner.read()


def _import_sounddevice():
    try:
        import sounddevice
    except ImportError as e:
        raise ImportError(
            "sounddevice is required for live capture. "
            "Run: pip install 'pluck-tuner[live]'"
        ) from e
    return sounddevice


def list_input_devices() -> List[Dict[str, Any]]:
    """List audio devices that can record."""
    sd = _import_sounddevice()
    devices = []
    for index, info in enumerate(sd.query_devices()):
        if info["max_input_channels"] > 0:
            devices.append(
                {
                    "index": index,
                    "name": info["name"],
                    "channels": info["max_input_channels"],
                    "default_samplerate": info["default_samplerate"],
                }
            )
    return devices


class MicrophoneFrameSource(FrameSource):
    """Live input through a sounddevice stream.

    The stream callback queues blocks of hop_length samples; read() folds
    them into a rolling window of the latest frame_size samples, the way
    an analyser node exposes its time-domain buffer.
    """

    def __init__(
        self,
        sample_rate: int = DEFAULT_SR,
        frame_size: int = DEFAULT_FRAME_SIZE,
        hop_length: int = DEFAULT_HOP_LENGTH,
        device: Optional[int] = None,
        read_timeout: float = 1.0,
    ):
        super().__init__(frame_size, hop_length, sample_rate)
        self.device = device
        self.read_timeout = read_timeout
        self._stream = None
        self._queue: "queue.Queue[np.ndarray]" = queue.Queue()
        self._window = np.zeros(frame_size, dtype=np.float32)

    @property
    def is_open(self) -> bool:
        return self._stream is not None

    def _callback(self, indata, frames, time_info, status) -> None:
        if status:
            logger.warning("Input stream status: %s", status)
        self._queue.put(indata[:, 0].copy())

    def open(self) -> None:
        sd = _import_sounddevice()
        self._queue = queue.Queue()
        self._window = np.zeros(self.frame_size, dtype=np.float32)

        stream = sd.InputStream(
            samplerate=self.sample_rate,
            blocksize=self.hop_length,
            device=self.device,
            channels=1,
            dtype="float32",
            callback=self._callback,
        )
        try:
            stream.start()
        except Exception:
            stream.close()
            raise
        self._stream = stream
        logger.debug("Opened input stream at %d Hz (device=%s)", self.sample_rate, self.device)

    def close(self) -> None:
        if self._stream is None:
            return
        try:
            self._stream.stop()
        finally:
            self._stream.close()
            self._stream = None
            logger.debug("Closed input stream")

    def _push(self, block: np.ndarray) -> None:
        n = len(block)
        if n == 0:
            return
        if n >= self.frame_size:
            self._window[:] = block[-self.frame_size:]
        else:
            self._window[:-n] = self._window[n:]
            self._window[-n:] = block

    def read(self) -> Optional[Frame]:
        self._require_open()

        while True:
            try:
                block = self._queue.get(timeout=self.read_timeout)
                break
            except queue.Empty:
                if not self._stream.active:
                    logger.warning("Input stream is no longer active")
                    return None

        self._push(block)
        # Fold in anything else already queued so the window stays current
        while True:
            try:
                self._push(self._queue.get_nowait())
            except queue.Empty:
                break

        return self._window.copy(), _monotonic_ms()
