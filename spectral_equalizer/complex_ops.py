"""
Complex arithmetic on (real, imag) pairs.

Samples are kept as explicit real/imaginary parts rather than Python
``complex`` so the transform can work on two parallel float64 arrays.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import NamedTuple

import numpy as np

from .errors import LengthMismatchError


class ComplexSample(NamedTuple):
    real: float
    imag: float


def add(a: ComplexSample, b: ComplexSample) -> ComplexSample:
    return ComplexSample(a.real + b.real, a.imag + b.imag)


def subtract(a: ComplexSample, b: ComplexSample) -> ComplexSample:
    return ComplexSample(a.real - b.real, a.imag - b.imag)


def multiply(a: ComplexSample, b: ComplexSample) -> ComplexSample:
    return ComplexSample(
        a.real * b.real - a.imag * b.imag,
        a.real * b.imag + a.imag * b.real,
    )


def conj(a: ComplexSample) -> ComplexSample:
    return ComplexSample(a.real, -a.imag)


def euler(k: int, n: int) -> ComplexSample:
    """Twiddle factor e^(-2*pi*i*k/n) as (cos, sin)."""
    x = -2.0 * math.pi * k / n
    return ComplexSample(math.cos(x), math.sin(x))


def twiddles(n: int) -> tuple[np.ndarray, np.ndarray]:
    """Twiddle factors euler(k, n) for k in [0, n/2), as (cos, sin) arrays."""
    x = -2.0 * np.pi * np.arange(n // 2) / n
    return np.cos(x), np.sin(x)


@dataclass(frozen=True)
class ComplexArray:
    """Two equal-length float64 arrays holding a complex sequence."""

    real: np.ndarray
    imag: np.ndarray

    def __post_init__(self):
        if len(self.real) != len(self.imag):
            raise LengthMismatchError(len(self.real), len(self.imag))

    @classmethod
    def from_real(cls, samples) -> "ComplexArray":
        """Real-valued sequence with a zero imaginary part."""
        real = np.array(samples, dtype=np.float64).ravel()
        return cls(real, np.zeros_like(real))

    @classmethod
    def from_complex(cls, real, imag) -> "ComplexArray":
        real = np.array(real, dtype=np.float64).ravel()
        imag = np.array(imag, dtype=np.float64).ravel()
        return cls(real, imag)

    def __len__(self) -> int:
        return len(self.real)

    def sample(self, i: int) -> ComplexSample:
        return ComplexSample(float(self.real[i]), float(self.imag[i]))

    def conjugate(self) -> "ComplexArray":
        return ComplexArray(self.real.copy(), -self.imag)

    def magnitude(self) -> np.ndarray:
        return np.hypot(self.real, self.imag)

    def to_numpy(self) -> np.ndarray:
        """Return the sequence as a numpy complex128 array."""
        return self.real + 1j * self.imag
