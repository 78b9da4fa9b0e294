"""Spectral equalizer: from-scratch FFT, band gains and spectrogram slices."""

__version__ = "1.0.0"
