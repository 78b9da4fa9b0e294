"""
Per-upload processing state.

An AudioSession keeps the decoded mono input, its forward transform (of the
zero-padded power-of-two buffer) and the latest equalized output, so new
band settings only need the gain + inverse-transform half of the pipeline.
"""

from __future__ import annotations

import logging
import os
import re
import threading
import uuid
from typing import Optional

import numpy as np

from .audio import load_mono, spectrum_summary
from .complex_ops import ComplexArray
from .config import STFT_FRAME_SIZE, STFT_HOP_SIZE
from .equalizer import equalize
from .fft import FFTEngine, default_engine, pad_to_power_of_two
from .models import SpectrumData, coerce_bands
from .stft import compute_stft_slices

logger = logging.getLogger(__name__)

_SESSION_ID_RE = re.compile(r"^[a-f0-9]{12}$")


def new_session_id() -> str:
    return uuid.uuid4().hex[:12]


def validate_session_id(session_id: str) -> str:
    if not _SESSION_ID_RE.match(session_id):
        raise ValueError(f"Invalid session_id: {session_id}")
    return session_id


def get_session_dir(upload_dir: str, session_id: str) -> str:
    validate_session_id(session_id)
    d = os.path.join(upload_dir, session_id)
    os.makedirs(d, exist_ok=True)
    return d


class AudioSession:
    def __init__(
        self,
        samples,
        sample_rate: int,
        frame_size: int = STFT_FRAME_SIZE,
        hop_size: int = STFT_HOP_SIZE,
        engine: Optional[FFTEngine] = None,
    ):
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")
        self.engine = engine or default_engine()
        self.input = np.asarray(samples, dtype=np.float64).ravel()
        self.sample_rate = int(sample_rate)
        self.frame_size = frame_size
        self.hop_size = hop_size

        self.input_fft: ComplexArray = self.engine.fft_real(pad_to_power_of_two(self.input))
        self.output_fft: ComplexArray = self.input_fft
        self.output = self.input.copy()
        self._input_slices: Optional[np.ndarray] = None
        self._output_slices: Optional[np.ndarray] = None

    @classmethod
    def from_file(cls, path: str, **kwargs) -> "AudioSession":
        samples, sr = load_mono(path)
        return cls(samples, sr, **kwargs)

    @property
    def fft_size(self) -> int:
        return len(self.input_fft)

    @property
    def duration(self) -> float:
        return len(self.input) / float(self.sample_rate)

    def input_spectrum(self) -> SpectrumData:
        return spectrum_summary(self.input_fft, self.sample_rate)

    def output_spectrum(self) -> SpectrumData:
        return spectrum_summary(self.output_fft, self.sample_rate)

    def input_slices(self) -> np.ndarray:
        if self._input_slices is None:
            self._input_slices = self._slices(self.input)
        return self._input_slices

    def output_slices(self) -> np.ndarray:
        if self._output_slices is None:
            self._output_slices = self._slices(self.output)
        return self._output_slices

    def _slices(self, signal: np.ndarray) -> np.ndarray:
        return compute_stft_slices(signal, self.frame_size, self.hop_size, engine=self.engine)

    def process(self, bands) -> np.ndarray:
        """
        Equalize the stored input spectrum with the given bands.

        Bands are applied in ascending min_hz order, so where they overlap
        the band starting higher wins.
        """
        ordered = sorted(coerce_bands(bands), key=lambda b: b.min_hz)
        result = equalize(self.input_fft, ordered, self.sample_rate, engine=self.engine)
        self.output = result.time_domain[: len(self.input)].copy()
        self.output_fft = result.frequency_domain
        self._output_slices = None
        logger.info("Processed %d samples with %d band(s)", len(self.output), len(ordered))
        return self.output

    def reset(self) -> None:
        self.output = self.input.copy()
        self.output_fft = self.input_fft
        self._output_slices = self._input_slices


class SessionRegistry:
    """In-memory map of session id to AudioSession."""

    def __init__(self):
        self._sessions: dict[str, AudioSession] = {}
        self._lock = threading.Lock()

    def add(self, session: AudioSession, session_id: Optional[str] = None) -> str:
        session_id = validate_session_id(session_id or new_session_id())
        with self._lock:
            self._sessions[session_id] = session
        return session_id

    def get(self, session_id: str) -> Optional[AudioSession]:
        with self._lock:
            return self._sessions.get(session_id)

    def remove(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)
