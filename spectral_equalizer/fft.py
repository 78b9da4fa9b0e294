"""
Iterative radix-2 decimation-in-time FFT and its inverse.

The forward transform reorders samples by bit reversal and then runs
log2(N) butterfly stages in place:

    odd'  = even - w * odd
    even' = even + w * odd

with w = e^(-2*pi*i*k/stage). The inverse is computed with the conjugate
trick: ifft(X) = fft(conj(X)) / N.

Only power-of-two lengths are supported; callers pad or truncate first
(see :func:`pad_to_power_of_two`).
"""

from __future__ import annotations

import numpy as np

from .bitrev import BitReversalCache, is_power_of_two
from .complex_ops import ComplexArray, twiddles
from .errors import InvalidLengthError, LengthMismatchError


def next_power_of_two(n: int) -> int:
    """Return the smallest power of two >= n (1 for n <= 1)."""
    p = 1
    while p < n:
        p <<= 1
    return p


def pad_to_power_of_two(samples) -> np.ndarray:
    """Zero-pad a real sequence to the next power-of-two length."""
    x = np.asarray(samples, dtype=np.float64).ravel()
    padded = np.zeros(next_power_of_two(len(x)), dtype=np.float64)
    padded[: len(x)] = x
    return padded


class FFTEngine:
    """
    Forward/inverse transform with its own bit-reversal table cache.

    Instances are safe to share between threads; the only mutable state is
    the cache, which is lock-guarded.
    """

    def __init__(self, cache: BitReversalCache | None = None):
        self.cache = cache if cache is not None else BitReversalCache()

    def fft(self, signal: ComplexArray) -> ComplexArray:
        """Forward transform of a complex sequence. The input is not modified."""
        real, imag = self._transform(signal.real, signal.imag)
        return ComplexArray(real, imag)

    def fft_real(self, samples) -> ComplexArray:
        """Forward transform of a real-valued sequence."""
        return self.fft(ComplexArray.from_real(samples))

    def ifft(self, spectrum: ComplexArray) -> ComplexArray:
        """Inverse transform via conjugate -> forward -> normalize."""
        n = len(spectrum.real)
        conjugated = spectrum.conjugate()
        real, imag = self._transform(conjugated.real, conjugated.imag)
        return ComplexArray(real / n, imag / n)

    def _transform(self, real: np.ndarray, imag: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        n = len(real)
        if len(imag) != n:
            raise LengthMismatchError(n, len(imag))
        if not is_power_of_two(n):
            raise InvalidLengthError(n)

        perm = self.cache.get(n)
        re = np.empty(n, dtype=np.float64)
        im = np.empty(n, dtype=np.float64)
        re[perm] = real
        im[perm] = imag

        stage = 2
        while stage <= n:
            half = stage // 2
            w_re, w_im = twiddles(stage)

            # One row per butterfly block; all offsets k of a stage at once.
            blocks_re = re.reshape(n // stage, stage)
            blocks_im = im.reshape(n // stage, stage)
            odd_re = blocks_re[:, half:]
            odd_im = blocks_im[:, half:]

            t_re = w_re * odd_re - w_im * odd_im
            t_im = w_re * odd_im + w_im * odd_re

            blocks_re[:, half:] = blocks_re[:, :half] - t_re
            blocks_im[:, half:] = blocks_im[:, :half] - t_im
            blocks_re[:, :half] += t_re
            blocks_im[:, :half] += t_im

            stage *= 2

        return re, im


_default_engine = FFTEngine()


def default_engine() -> FFTEngine:
    return _default_engine


def fft(signal: ComplexArray) -> ComplexArray:
    return _default_engine.fft(signal)


def fft_real(samples) -> ComplexArray:
    return _default_engine.fft_real(samples)


def ifft(spectrum: ComplexArray) -> ComplexArray:
    return _default_engine.ifft(spectrum)
