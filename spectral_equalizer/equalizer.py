"""
Frequency-band equalizer.

Turns a list of (min_hz, max_hz, gain) bands into a per-bin gain vector,
scales a spectrum by it (phase preserved, magnitude scaled) and returns to
the time domain through the inverse FFT.

Every bin b > 0 a band touches also sets bin N - b, keeping the gain
vector symmetric so a real input stays real after the inverse transform.
Bins above N/2 mirror too, not only 0 < b < N/2, so a band past Nyquist
rewrites the matching low bins and can override an earlier band there;
the vector stays symmetric for any band list.

Overlapping bands resolve last-write-wins: the band that comes later in the
list sets the gain of shared bins. Negative frequencies clamp to bin 0.
"""

from __future__ import annotations

import logging
import math
from typing import NamedTuple

import numpy as np

from .complex_ops import ComplexArray
from .errors import LengthMismatchError
from .fft import FFTEngine, default_engine, pad_to_power_of_two
from .models import coerce_bands

logger = logging.getLogger(__name__)


class EqualizerResult(NamedTuple):
    time_domain: np.ndarray
    frequency_domain: ComplexArray


def hz_to_bin_range(min_hz: float, max_hz: float, fft_size: int, sample_rate: float) -> tuple[int, int]:
    """
    Map a frequency range to an inclusive [bin_min, bin_max] range.

    A single frequency (min_hz == max_hz) rounds to its nearest bin; ranges
    widen outward (floor/ceil) and are clamped to [0, fft_size - 1]. Ranges
    or frequencies outside the spectrum give bin_min > bin_max.
    """
    if min_hz == max_hz:
        b = math.floor(min_hz * fft_size / sample_rate + 0.5)
        if b < 0 or b > fft_size - 1:
            return 0, -1
        return b, b
    bin_min = max(0, math.floor(min_hz * fft_size / sample_rate))
    bin_max = min(fft_size - 1, math.ceil(max_hz * fft_size / sample_rate))
    return bin_min, bin_max


def create_bin_gains(fft_size: int, bands, sample_rate: float) -> np.ndarray:
    """
    Build a length-fft_size gain vector from frequency bands.

    Args:
        fft_size: Transform length N
        bands: FrequencyBand models or (min_hz, max_hz, gain) triples
        sample_rate: Sampling rate in Hz

    Returns:
        float64 array, 1.0 wherever no band applies
    """
    gains = np.ones(fft_size, dtype=np.float64)
    for band in coerce_bands(bands):
        bin_min, bin_max = hz_to_bin_range(band.min_hz, band.max_hz, fft_size, sample_rate)
        if bin_min > bin_max:
            logger.warning(
                "Skipping band %.1f-%.1f Hz: maps to empty bin range [%d, %d] (N=%d, Fs=%g)",
                band.min_hz, band.max_hz, bin_min, bin_max, fft_size, sample_rate,
            )
            continue

        bins = np.arange(bin_min, bin_max + 1)
        gains[bins] = band.gain
        mirrored = bins[bins > 0]
        gains[fft_size - mirrored] = band.gain

    return gains


def apply_bin_gains(spectrum: ComplexArray, gains: np.ndarray) -> ComplexArray:
    """Scale each bin by a real gain. Returns new arrays; the input is untouched."""
    gains = np.asarray(gains, dtype=np.float64)
    if len(gains) != len(spectrum):
        raise LengthMismatchError(len(spectrum), len(gains))
    return ComplexArray(spectrum.real * gains, spectrum.imag * gains)


def equalize(
    spectrum: ComplexArray,
    bands,
    sample_rate: float,
    engine: FFTEngine | None = None,
) -> EqualizerResult:
    """
    Apply band gains to an already-transformed signal and reconstruct it.

    Returns the real part of the inverse transform (the imaginary residue is
    dropped) together with the shaped spectrum.
    """
    engine = engine or default_engine()
    gains = create_bin_gains(len(spectrum), bands, sample_rate)
    shaped = apply_bin_gains(spectrum, gains)
    reconstructed = engine.ifft(shaped)
    return EqualizerResult(reconstructed.real, shaped)


def equalize_signal(samples, bands, sample_rate: float, engine: FFTEngine | None = None) -> np.ndarray:
    """Equalize a real signal of any length; output has the input's length."""
    engine = engine or default_engine()
    x = np.asarray(samples, dtype=np.float64).ravel()
    spectrum = engine.fft_real(pad_to_power_of_two(x))
    result = equalize(spectrum, bands, sample_rate, engine=engine)
    return result.time_domain[: len(x)]
