"""Equalizer preset storage.

Presets are kept as a JSON list in a single file. A missing or unreadable
file is treated as an empty store.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from typing import Optional

from pydantic import ValidationError

from .errors import PresetFormatError
from .models import EqualizerPreset

logger = logging.getLogger(__name__)


def export_preset(preset: EqualizerPreset) -> str:
    return preset.model_dump_json(indent=2)


def import_preset(text: str) -> EqualizerPreset:
    """Parse a preset document, raising PresetFormatError if it is invalid."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise PresetFormatError(f"Invalid preset JSON: {e}") from e
    if not isinstance(data, dict) or not isinstance(data.get("ranges"), list):
        raise PresetFormatError("Invalid preset format: missing 'ranges' list")
    try:
        return EqualizerPreset.model_validate(data)
    except ValidationError as e:
        raise PresetFormatError(f"Invalid preset: {e}") from e


class PresetStore:
    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()

    def load_all(self) -> list[EqualizerPreset]:
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as handle:
                data = json.load(handle)
            return [EqualizerPreset.model_validate(p) for p in data]
        except (OSError, json.JSONDecodeError, TypeError, ValidationError) as e:
            logger.warning("Ignoring unreadable preset file %s: %s", self.path, e)
            return []

    def get(self, name: str) -> Optional[EqualizerPreset]:
        for preset in self.load_all():
            if preset.name == name:
                return preset
        return None

    def save(self, preset: EqualizerPreset) -> None:
        """Store a preset, replacing any existing one with the same name."""
        with self._lock:
            presets = [p for p in self.load_all() if p.name != preset.name]
            presets.append(preset)
            self._write(presets)

    def delete(self, name: str) -> bool:
        with self._lock:
            presets = self.load_all()
            remaining = [p for p in presets if p.name != name]
            if len(remaining) == len(presets):
                return False
            self._write(remaining)
            return True

    def _write(self, presets: list[EqualizerPreset]) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as handle:
            json.dump([p.model_dump(mode="json") for p in presets], handle, indent=2)
