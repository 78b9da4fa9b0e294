import numpy as np
import pytest

from spectral_equalizer.errors import InvalidLengthError
from spectral_equalizer.stft import (
    compute_stft_slices,
    frame_count,
    frame_frequencies,
    frame_times,
    hann_window,
)


def _tone(n: int, fs: float, f0: float) -> np.ndarray:
    return np.sin(2 * np.pi * f0 * np.arange(n) / fs)


def test_hann_window_shape() -> None:
    w = hann_window(64)
    i = np.arange(64)
    np.testing.assert_allclose(w, 0.5 * (1 - np.cos(2 * np.pi * i / 63)))
    assert w[0] == pytest.approx(0.0)
    assert w[-1] == pytest.approx(0.0)
    np.testing.assert_allclose(w, w[::-1], atol=1e-15)


@pytest.mark.parametrize(
    "length, frame, hop, expected",
    [(5000, 1024, 256, 16), (1024, 1024, 256, 1), (1023, 1024, 256, 0), (0, 256, 128, 0), (2048, 256, 128, 15)],
)
def test_frame_count(length: int, frame: int, hop: int, expected: int) -> None:
    assert frame_count(length, frame, hop) == expected
    slices = compute_stft_slices(np.random.default_rng(0).standard_normal(length), frame, hop)
    assert slices.shape == (expected, frame // 2)
    assert slices.dtype == np.uint8


def test_short_signal_yields_no_frames() -> None:
    slices = compute_stft_slices(np.ones(100), 256, 64)
    assert slices.shape == (0, 128)


def test_quantization_bounds_and_peak() -> None:
    fs = 8000.0
    n = 8192
    # Louder second half: the global peak lives there.
    x = _tone(n, fs, 1000.0) * np.where(np.arange(n) < n // 2, 0.1, 1.0)
    slices = compute_stft_slices(x, 512, 256)
    assert slices.min() >= 0
    assert slices.max() == 255
    peak_rows = np.flatnonzero((slices == 255).any(axis=1))
    # Rows from 15 on overlap the loud half (hop 256, boundary at 4096).
    assert peak_rows.min() >= 15
    assert slices[0].max() < 255


def test_tone_peaks_in_its_bin() -> None:
    fs, frame = 8000.0, 256
    k = 32
    x = _tone(4096, fs, k * fs / frame)
    slices = compute_stft_slices(x, frame, 128)
    assert np.all(np.argmax(slices, axis=1) == k)


def test_silence_maps_to_zero() -> None:
    slices = compute_stft_slices(np.zeros(2048), 256, 128)
    assert slices.shape == (15, 128)
    assert np.all(slices == 0)


def test_matches_numpy_reference() -> None:
    frame, hop = 256, 64
    x = np.random.default_rng(11).standard_normal(3000)
    w = hann_window(frame)
    mags = np.array([
        np.abs(np.fft.fft(x[s : s + frame] * w))[: frame // 2]
        for s in range(0, len(x) - frame + 1, hop)
    ])
    db = 20 * np.log10(mags / mags.max() + 1e-12)
    expected = np.clip(np.floor((db + 100) / 100 * 255), 0, 255)

    slices = compute_stft_slices(x, frame, hop)
    assert slices.shape == expected.shape
    # Off-by-one only where rounding differs at a quantization boundary.
    assert np.max(np.abs(slices.astype(int) - expected.astype(int))) <= 1


def test_rejects_bad_parameters() -> None:
    with pytest.raises(InvalidLengthError):
        compute_stft_slices(np.zeros(4096), 1000, 256)
    with pytest.raises(ValueError):
        compute_stft_slices(np.zeros(4096), 1024, 0)
    with pytest.raises(ValueError):
        compute_stft_slices(np.ones(8), 1, 1)


def test_display_axes() -> None:
    np.testing.assert_allclose(frame_times(3, 8000, 512), [0.0, 0.064, 0.128])
    freqs = frame_frequencies(8000, 16)
    assert len(freqs) == 8
    assert freqs[1] == pytest.approx(500.0)
