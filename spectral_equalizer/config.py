"""Configuration defaults and environment overrides.

Holds numeric analysis constants and the Settings dataclass used by the web
layer. This module must not import the DSP or server modules.
"""

import os
from dataclasses import dataclass, field

# Spectrogram analysis.
STFT_FRAME_SIZE = 2048
STFT_HOP_SIZE = 512

# Display normalization: DB_FLOOR maps to 0, 0 dB maps to 255.
DB_FLOOR = -100.0
MAGNITUDE_EPS = 1e-12

_ENV_PREFIX = "SPECTRAL_EQ_"
_DEFAULT_DATA_DIR = os.path.join(os.path.dirname(__file__), "..", "data")


def _env(name: str, default: str) -> str:
    return os.environ.get(_ENV_PREFIX + name, default)


@dataclass
class Settings:
    """
    Runtime settings for the HTTP service.

    Every field can be overridden by an environment variable named
    SPECTRAL_EQ_<FIELD_NAME_UPPERCASE>.
    """

    upload_dir: str = os.path.join(_DEFAULT_DATA_DIR, "uploads")
    preset_path: str = os.path.join(_DEFAULT_DATA_DIR, "presets.json")

    stft_frame_size: int = STFT_FRAME_SIZE
    stft_hop_size: int = STFT_HOP_SIZE

    # 200 MB uploads, like a long uncompressed WAV.
    max_upload_bytes: int = 200 * 1024 * 1024

    log_level: str = "INFO"

    supported_extensions: frozenset = field(
        default_factory=lambda: frozenset({".wav", ".flac", ".ogg", ".mp3", ".m4a", ".aac", ".opus"})
    )

    @classmethod
    def from_env(cls) -> "Settings":
        base = cls()
        return cls(
            upload_dir=_env("UPLOAD_DIR", base.upload_dir),
            preset_path=_env("PRESET_PATH", base.preset_path),
            stft_frame_size=int(_env("STFT_FRAME_SIZE", str(base.stft_frame_size))),
            stft_hop_size=int(_env("STFT_HOP_SIZE", str(base.stft_hop_size))),
            max_upload_bytes=int(_env("MAX_UPLOAD_BYTES", str(base.max_upload_bytes))),
            log_level=_env("LOG_LEVEL", base.log_level).upper(),
        )
