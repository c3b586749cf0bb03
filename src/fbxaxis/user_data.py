"""Per-asset configuration stored as a serialized key/value blob on the asset."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .errors import UserDataError
from .logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

logger = get_logger(__name__)

APPLY_AXIS_CONVERSION_KEY = "apply_axis_conversion"
FLIP_Z_AXIS_KEY = "flip_z_axis"

_VALUE_TYPES = (bool, int, float, str)


class AssetUserData:
    """Key/value settings of one asset.

    Values are booleans, integers, floats or strings. Reads fall back to a default when a key is absent or holds a
    value of another kind. Writes only mark the data dirty; :meth:`apply_modified` flushes them.
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self.data: dict[str, Any] = dict(data or {})
        self._dirty = False

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    def __contains__(self, key: str) -> bool:
        return key in self.data

    def get_bool(self, key: str, fallback: bool) -> bool:
        value = self.data.get(key)
        return value if isinstance(value, bool) else fallback

    def get_int(self, key: str, fallback: int) -> int:
        value = self.data.get(key)
        return value if isinstance(value, int) and not isinstance(value, bool) else fallback

    def get_float(self, key: str, fallback: float) -> float:
        value = self.data.get(key)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        return fallback

    def get_string(self, key: str, fallback: str) -> str:
        value = self.data.get(key)
        return value if isinstance(value, str) else fallback

    def set_value(self, key: str, value: bool | int | float | str) -> None:
        """Store a value, marking the data dirty unless it is unchanged.

        Raises:
            TypeError: If the value is not a bool, int, float or str.

        """
        if not isinstance(value, _VALUE_TYPES):
            msg = f"Unsupported user data value for '{key}': {type(value).__name__}"
            raise TypeError(msg)
        current = self.data.get(key)
        if key in self.data and type(current) is type(value) and current == value:
            return
        self.data[key] = value
        self._dirty = True

    def serialize(self) -> str:
        """Return the JSON blob and clear the dirty flag."""
        self._dirty = False
        return json.dumps(self.data, sort_keys=True)

    def apply_modified(self, writer: Callable[[str], None]) -> bool:
        """Hand the serialized data to ``writer`` if anything changed since the last flush.

        Returns:
            bool: Whether ``writer`` was called.

        """
        if not self._dirty:
            return False
        writer(self.serialize())
        return True

    @classmethod
    def deserialize(cls, blob: str | None) -> AssetUserData:
        """Parse a serialized blob. Empty or blank input gives empty data.

        Raises:
            UserDataError: If the blob is not a JSON object.

        """
        if blob is None or not blob.strip():
            return cls()
        try:
            data = json.loads(blob)
        except json.JSONDecodeError as e:
            msg = f"Asset user data is not valid JSON: {e}"
            raise UserDataError(msg) from e
        if not isinstance(data, dict):
            msg = f"Asset user data must be a JSON object, got {type(data).__name__}"
            raise UserDataError(msg)
        return cls(data)


@dataclass(frozen=True)
class ConversionSettings:
    """The two flags the conversion reads from an asset's user data."""

    apply_axis_conversion: bool = False
    flip_z_axis: bool = False

    @classmethod
    def from_user_data(cls, user_data: AssetUserData) -> ConversionSettings:
        return cls(
            apply_axis_conversion=user_data.get_bool(APPLY_AXIS_CONVERSION_KEY, cls.apply_axis_conversion),
            flip_z_axis=user_data.get_bool(FLIP_Z_AXIS_KEY, cls.flip_z_axis),
        )

    def write_to(self, user_data: AssetUserData) -> None:
        user_data.set_value(APPLY_AXIS_CONVERSION_KEY, self.apply_axis_conversion)
        user_data.set_value(FLIP_Z_AXIS_KEY, self.flip_z_axis)
