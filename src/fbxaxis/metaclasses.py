"""Metaclass for read-only tables of numeric constants."""

from collections.abc import Iterator
from typing import Any

import numpy as np


class FrozenNamespaceMeta(type):
    """Metaclass for constant tables.

    Public class attributes are stored as read-only float arrays when the class is created. Tables support
    dict-style access and iteration over their names, and cannot be modified or instantiated.
    """

    def __new__(mcs, name: str, bases: tuple[type, ...], namespace: dict[str, Any]) -> type:
        """Freeze the public attributes of the table."""
        for key, value in namespace.items():
            if key.startswith("_") or callable(value):
                continue
            array = np.array(value, dtype=float)
            array.flags.writeable = False
            namespace[key] = array
        return super().__new__(mcs, name, bases, namespace)

    def __getitem__(cls, key: str) -> np.ndarray:
        """Get a constant by name."""
        if key.startswith("_") or key not in cls:
            msg = f"{cls.__name__} has no constant '{key}'"
            raise KeyError(msg)
        return getattr(cls, key)

    def __contains__(cls, key: object) -> bool:
        return isinstance(key, str) and key in list(cls)

    def __iter__(cls) -> Iterator[str]:
        """Iterate over the constant names, in definition order."""
        return (key for key, value in vars(cls).items() if isinstance(value, np.ndarray) and not key.startswith("_"))

    def __setattr__(cls, key: str, value: Any) -> None:
        """Prevent modification of constants."""
        msg = f"{cls.__name__} is immutable."
        raise TypeError(msg)

    def __delattr__(cls, _: str) -> None:
        """Prevent deletion of constants."""
        msg = f"{cls.__name__} is immutable."
        raise TypeError(msg)

    def __call__(cls, *_: Any, **__: Any) -> Any:
        """Prevent instantiation."""
        msg = f"{cls.__name__} cannot be instantiated."
        raise TypeError(msg)
