from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator

PRESET_VERSION = 2


class FrequencyBand(BaseModel):
    """One equalizer band: bins between min_hz and max_hz get multiplied by gain."""
    min_hz: float
    max_hz: float
    gain: float = Field(default=1.0, ge=0)

    @classmethod
    def from_tuple(cls, band) -> "FrequencyBand":
        min_hz, max_hz, gain = band
        return cls(min_hz=min_hz, max_hz=max_hz, gain=gain)

    def as_tuple(self) -> tuple[float, float, float]:
        return self.min_hz, self.max_hz, self.gain


def coerce_bands(bands) -> list[FrequencyBand]:
    """Accept FrequencyBand models or (min_hz, max_hz, gain) triples."""
    return [b if isinstance(b, FrequencyBand) else FrequencyBand.from_tuple(b) for b in bands]


class EqualizerPreset(BaseModel):
    name: str = Field(min_length=1)
    ranges: list[FrequencyBand]
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    version: int = PRESET_VERSION

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Preset name must not be empty")
        return v


class SpectrumData(BaseModel):
    """Magnitude spectrum up to (not including) the Nyquist bin."""
    frequencies: list[float]
    magnitudes: list[float]


class ProcessRequest(BaseModel):
    session_id: str
    bands: list[FrequencyBand]


class UploadResponse(BaseModel):
    session_id: str
    filename: str
    sample_rate: int
    n_samples: int
    fft_size: int
    duration: float
    n_frames: int
    input_spectrum: SpectrumData


class ProcessResponse(BaseModel):
    session_id: str
    n_samples: int
    n_frames: int
    output_spectrum: SpectrumData


class SpectrogramResponse(BaseModel):
    session_id: str
    which: str
    frame_size: int
    hop_size: int
    frame_times: list[float]
    frequencies: list[float]
    slices: list[list[int]]  # [n_frames][frame_size // 2], 0-255
