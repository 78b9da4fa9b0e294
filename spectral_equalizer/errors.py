"""Exceptions raised by the transform engine and its callers."""


class SpectralError(ValueError):
    """Base class for input errors in the spectral pipeline."""


class InvalidLengthError(SpectralError):
    """Transform length is not a power of two."""

    def __init__(self, length: int):
        self.length = length
        super().__init__(f"Input size must be a power of 2, got {length}")


class LengthMismatchError(SpectralError):
    """Real and imaginary components (or a gain vector) differ in length."""

    def __init__(self, real_length: int, imag_length: int):
        self.real_length = real_length
        self.imag_length = imag_length
        super().__init__(
            "Real and imaginary components must have the same length "
            f"({real_length} != {imag_length})"
        )


class PresetFormatError(ValueError):
    """A preset document could not be parsed."""
