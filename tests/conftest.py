"""Shared fixtures: synthetic test signals."""

import numpy as np
import pytest


def generate_sine_wave(
    freq: float,
    duration: float,
    sr: int = 44100,
    amplitude: float = 0.8,
    noise: float = 0.0,
    seed: int = 0,
) -> np.ndarray:
    """Generate a sine wave, optionally with white noise."""
    t = np.arange(int(sr * duration)) / sr
    audio = amplitude * np.sin(2 * np.pi * freq * t)
    if noise > 0:
        rng = np.random.default_rng(seed)
        audio = audio + rng.normal(0.0, noise, len(audio))
    return audio.astype(np.float32)


def generate_pluck(
    freq: float,
    duration: float,
    sr: int = 44100,
    amplitude: float = 0.8,
    decay: float = 1.5,
) -> np.ndarray:
    """Generate a plucked-string-like tone: decaying harmonic series."""
    t = np.arange(int(sr * duration)) / sr
    audio = np.zeros_like(t)
    for harmonic, weight in enumerate((1.0, 0.5, 0.3, 0.2), start=1):
        audio += weight * np.sin(2 * np.pi * freq * harmonic * t)
    audio *= np.exp(-t / decay)
    audio *= amplitude / np.max(np.abs(audio))
    return audio.astype(np.float32)


@pytest.fixture
def sample_rate():
    return 44100


@pytest.fixture
def frame_size():
    return 4096


@pytest.fixture
def sine():
    return generate_sine_wave


@pytest.fixture
def pluck():
    return generate_pluck
