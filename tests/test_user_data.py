from __future__ import annotations

import json

import pytest

from fbxaxis.errors import UserDataError
from fbxaxis.user_data import (
    APPLY_AXIS_CONVERSION_KEY,
    FLIP_Z_AXIS_KEY,
    AssetUserData,
    ConversionSettings,
)


def test_missing_keys_use_fallbacks() -> None:
    """Test that every getter falls back when the key is absent."""
    data = AssetUserData()

    assert data.get_bool("missing", True) is True
    assert data.get_int("missing", 7) == 7
    assert data.get_float("missing", 0.5) == 0.5
    assert data.get_string("missing", "x") == "x"


def test_values_of_another_kind_use_fallbacks() -> None:
    """Test that a stored value of a different kind is not coerced."""
    data = AssetUserData({"flag": 1, "count": True, "name": 3.0, "scale": "2"})

    assert data.get_bool("flag", False) is False
    assert data.get_int("count", 4) == 4
    assert data.get_string("name", "none") == "none"
    assert data.get_float("scale", 1.0) == 1.0


def test_float_getter_accepts_integers() -> None:
    data = AssetUserData({"scale": 2})

    assert data.get_float("scale", 1.0) == 2.0
    assert isinstance(data.get_float("scale", 1.0), float)


def test_writes_mark_data_dirty() -> None:
    """Test the dirty flag and flushing through apply_modified."""
    data = AssetUserData({FLIP_Z_AXIS_KEY: True})
    written: list[str] = []

    assert not data.is_dirty
    assert data.apply_modified(written.append) is False

    data.set_value(FLIP_Z_AXIS_KEY, True)
    assert not data.is_dirty

    data.set_value(FLIP_Z_AXIS_KEY, False)
    assert data.is_dirty
    assert data.apply_modified(written.append) is True
    assert not data.is_dirty
    assert json.loads(written[0]) == {FLIP_Z_AXIS_KEY: False}
    assert data.apply_modified(written.append) is False
    assert len(written) == 1


def test_changing_the_value_kind_marks_data_dirty() -> None:
    """Test that 1 replacing True counts as a change even though they compare equal."""
    data = AssetUserData({"value": True})

    data.set_value("value", 1)

    assert data.is_dirty
    assert data.get_int("value", 0) == 1


def test_unsupported_values_are_rejected() -> None:
    data = AssetUserData()

    with pytest.raises(TypeError, match="list"):
        data.set_value("value", [1, 2])  # type: ignore[arg-type]
    assert "value" not in data


@pytest.mark.parametrize("blob", [None, "", "   \n"])
def test_blank_blob_gives_empty_data(blob: str | None) -> None:
    data = AssetUserData.deserialize(blob)

    assert data.data == {}
    assert not data.is_dirty


@pytest.mark.parametrize("blob", ["{not json", "[1, 2]", '"text"'])
def test_unreadable_blob_is_rejected(blob: str) -> None:
    """Test that only JSON objects are accepted."""
    with pytest.raises(UserDataError):
        AssetUserData.deserialize(blob)


def test_serialize_round_trip() -> None:
    data = AssetUserData()
    data.set_value("name", "hero")
    data.set_value("lod", 2)
    data.set_value("scale", 0.01)

    restored = AssetUserData.deserialize(data.serialize())

    assert restored.get_string("name", "") == "hero"
    assert restored.get_int("lod", 0) == 2
    assert restored.get_float("scale", 1.0) == 0.01


def test_settings_default_to_disabled() -> None:
    """Test that both conversion flags are off for an asset without user data."""
    settings = ConversionSettings.from_user_data(AssetUserData.deserialize(None))

    assert settings == ConversionSettings(apply_axis_conversion=False, flip_z_axis=False)


def test_settings_round_trip_through_user_data() -> None:
    settings = ConversionSettings(apply_axis_conversion=True, flip_z_axis=True)
    data = AssetUserData()

    settings.write_to(data)
    restored = ConversionSettings.from_user_data(AssetUserData.deserialize(data.serialize()))

    assert restored == settings
    assert data.get_bool(APPLY_AXIS_CONVERSION_KEY, False) is True
