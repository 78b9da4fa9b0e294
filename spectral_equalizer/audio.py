"""
Audio decode/encode and spectrum summaries for the web layer.

Decoding goes through librosa (which handles the compressed formats),
encoding through soundfile as 16-bit PCM WAV.
"""

import io

import numpy as np
import librosa
import soundfile as sf

from .complex_ops import ComplexArray
from .models import SpectrumData


def to_mono(audio: np.ndarray) -> np.ndarray:
    """
    Down-mix to one channel as the arithmetic mean of all channels.

    Accepts a 1-D signal (returned as float64) or a 2-D array shaped
    (n_channels, n_samples), the layout librosa.load(mono=False) returns.
    """
    audio = np.asarray(audio, dtype=np.float64)
    if audio.ndim == 1:
        return audio
    if audio.ndim != 2:
        raise ValueError(f"Expected 1-D or 2-D audio, got shape {audio.shape}")
    return audio.mean(axis=0)


def load_mono(path: str) -> tuple[np.ndarray, int]:
    """Decode an audio file at its native sample rate and down-mix it."""
    audio, sr = librosa.load(path, sr=None, mono=False)
    return to_mono(audio), int(sr)


def _clip(samples) -> np.ndarray:
    return np.clip(np.asarray(samples, dtype=np.float64), -1.0, 1.0)


def write_wav(path: str, samples, sample_rate: int) -> None:
    sf.write(path, _clip(samples), sample_rate, subtype="PCM_16")


def wav_bytes(samples, sample_rate: int) -> bytes:
    """Encode samples as an in-memory 16-bit PCM WAV file."""
    buf = io.BytesIO()
    sf.write(buf, _clip(samples), sample_rate, format="WAV", subtype="PCM_16")
    return buf.getvalue()


def spectrum_summary(spectrum: ComplexArray, sample_rate: float) -> SpectrumData:
    """Frequencies i*Fs/N and magnitudes for the bins below Nyquist."""
    n = len(spectrum)
    half = n // 2
    freqs = np.arange(half, dtype=np.float64) * sample_rate / n
    mags = np.hypot(spectrum.real[:half], spectrum.imag[:half])
    return SpectrumData(frequencies=freqs.tolist(), magnitudes=mags.tolist())
