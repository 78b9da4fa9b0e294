import json

import pytest

from spectral_equalizer.errors import PresetFormatError
from spectral_equalizer.models import PRESET_VERSION, EqualizerPreset, FrequencyBand
from spectral_equalizer.presets import PresetStore, export_preset, import_preset


def _preset(name: str, gain: float = 0.5) -> EqualizerPreset:
    return EqualizerPreset(
        name=name,
        ranges=[FrequencyBand(min_hz=20, max_hz=250, gain=gain), FrequencyBand(min_hz=4000, max_hz=8000, gain=1.5)],
    )


def test_missing_file_is_empty(tmp_path) -> None:
    assert PresetStore(str(tmp_path / "none.json")).load_all() == []


def test_corrupt_file_is_empty(tmp_path) -> None:
    path = tmp_path / "presets.json"
    path.write_text("{not json", encoding="utf-8")
    assert PresetStore(str(path)).load_all() == []


def test_save_replaces_same_name(tmp_path) -> None:
    store = PresetStore(str(tmp_path / "nested" / "presets.json"))
    store.save(_preset("Bass cut", 0.5))
    store.save(_preset("Vocals", 2.0))
    store.save(_preset("Bass cut", 0.0))

    presets = store.load_all()
    assert [p.name for p in presets] == ["Vocals", "Bass cut"]
    assert store.get("Bass cut").ranges[0].gain == 0.0
    assert store.get("Missing") is None

    on_disk = json.loads((tmp_path / "nested" / "presets.json").read_text(encoding="utf-8"))
    assert on_disk[0]["version"] == PRESET_VERSION


def test_delete(tmp_path) -> None:
    store = PresetStore(str(tmp_path / "presets.json"))
    store.save(_preset("A"))
    assert store.delete("A") is True
    assert store.delete("A") is False
    assert store.load_all() == []


def test_export_then_import(tmp_path) -> None:
    preset = _preset("  Radio  ")
    assert preset.name == "Radio"
    restored = import_preset(export_preset(preset))
    assert restored.name == "Radio"
    assert [b.as_tuple() for b in restored.ranges] == [(20, 250, 0.5), (4000, 8000, 1.5)]


def test_import_without_version_defaults(tmp_path) -> None:
    text = json.dumps({"name": "Old", "ranges": [{"min_hz": 0, "max_hz": 100, "gain": 0}]})
    assert import_preset(text).version == PRESET_VERSION


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        json.dumps({"name": "No ranges"}),
        json.dumps({"name": "Bad", "ranges": "oops"}),
        json.dumps({"name": "Negative", "ranges": [{"min_hz": 0, "max_hz": 10, "gain": -1}]}),
        json.dumps({"name": "   ", "ranges": []}),
    ],
)
def test_import_rejects_invalid(text: str) -> None:
    with pytest.raises(PresetFormatError):
        import_preset(text)
