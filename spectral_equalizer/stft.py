"""
Short-time spectrum for spectrogram display.

Splits the signal into overlapping Hann-windowed frames, transforms each
one and quantizes the magnitudes to bytes. Normalization is global: a first
pass finds the peak magnitude over every frame and bin, a second pass maps

    dB = 20 * log10(mag / peak + eps)

from [DB_FLOOR, 0] onto [0, 255]. Both passes must see the whole signal.
"""

from __future__ import annotations

import logging

import numpy as np

from .bitrev import is_power_of_two
from .config import DB_FLOOR, MAGNITUDE_EPS, STFT_FRAME_SIZE, STFT_HOP_SIZE
from .errors import InvalidLengthError
from .fft import FFTEngine, default_engine

logger = logging.getLogger(__name__)


def hann_window(length: int) -> np.ndarray:
    """Symmetric Hann window: 0.5 * (1 - cos(2*pi*i / (length - 1)))."""
    if length == 1:
        return np.ones(1, dtype=np.float64)
    i = np.arange(length, dtype=np.float64)
    return 0.5 * (1.0 - np.cos(2.0 * np.pi * i / (length - 1)))


def frame_count(length: int, frame_size: int, hop_size: int) -> int:
    if length < frame_size:
        return 0
    return (length - frame_size) // hop_size + 1


def frame_times(n_frames: int, sample_rate: float, hop_size: int = STFT_HOP_SIZE) -> np.ndarray:
    """Start time in seconds of each frame."""
    return np.arange(n_frames, dtype=np.float64) * hop_size / float(sample_rate)


def frame_frequencies(sample_rate: float, frame_size: int = STFT_FRAME_SIZE) -> np.ndarray:
    """Centre frequency in Hz of each displayed bin (0 .. Nyquist, exclusive)."""
    return np.arange(frame_size // 2, dtype=np.float64) * sample_rate / frame_size


def _frame_magnitudes(
    x: np.ndarray,
    start: int,
    window: np.ndarray,
    engine: FFTEngine,
) -> np.ndarray:
    frame_size = len(window)
    spectrum = engine.fft_real(x[start : start + frame_size] * window)
    half = frame_size // 2
    return np.hypot(spectrum.real[:half], spectrum.imag[:half])


def compute_stft_slices(
    samples,
    frame_size: int = STFT_FRAME_SIZE,
    hop_size: int = STFT_HOP_SIZE,
    engine: FFTEngine | None = None,
) -> np.ndarray:
    """
    Compute quantized spectrogram slices.

    Args:
        samples: Mono signal
        frame_size: Frame length F (power of two)
        hop_size: Distance between frame starts

    Returns:
        uint8 array of shape (n_frames, frame_size // 2). n_frames is
        zero when the signal is shorter than one frame.
    """
    if not is_power_of_two(frame_size):
        raise InvalidLengthError(frame_size)
    if frame_size < 2:
        raise ValueError(f"frame_size must be at least 2, got {frame_size}")
    if hop_size <= 0:
        raise ValueError(f"hop_size must be positive, got {hop_size}")

    engine = engine or default_engine()
    x = np.asarray(samples, dtype=np.float64).ravel()
    n_frames = frame_count(len(x), frame_size, hop_size)
    half = frame_size // 2

    if n_frames == 0:
        logger.debug("Signal of %d samples is shorter than one %d-sample frame", len(x), frame_size)
        return np.zeros((0, half), dtype=np.uint8)

    window = hann_window(frame_size)
    starts = [i * hop_size for i in range(n_frames)]

    # First pass: global peak for normalization.
    max_mag = MAGNITUDE_EPS
    for start in starts:
        mags = _frame_magnitudes(x, start, window, engine)
        max_mag = max(max_mag, float(mags.max()))

    # Second pass: dB relative to the peak, mapped onto 0-255.
    slices = np.empty((n_frames, half), dtype=np.uint8)
    for row, start in enumerate(starts):
        mags = _frame_magnitudes(x, start, window, engine)
        db = 20.0 * np.log10(mags / max_mag + MAGNITUDE_EPS)
        scaled = np.floor((db - DB_FLOOR) / -DB_FLOOR * 255.0)
        slices[row] = np.clip(scaled, 0.0, 255.0).astype(np.uint8)

    return slices
