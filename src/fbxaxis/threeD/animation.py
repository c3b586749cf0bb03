"""Keyframed animation clips."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

TRANSFORM_TYPE = "Transform"


@dataclass(frozen=True)
class Keyframe:
    """One key of a scalar curve. Tangents are slopes of the value at ``time``."""

    time: float
    value: float
    in_tangent: float = 0.0
    out_tangent: float = 0.0


@dataclass
class AnimationCurve:
    """Time-sorted keyframes of one scalar channel."""

    keys: list[Keyframe] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.keys)

    def __getitem__(self, index: int) -> Keyframe:
        return self.keys[index]

    @classmethod
    def from_arrays(
        cls,
        times: np.ndarray,
        values: np.ndarray,
        in_tangents: np.ndarray | None = None,
        out_tangents: np.ndarray | None = None,
    ) -> AnimationCurve:
        """Build a curve from parallel arrays; missing tangents default to zero."""
        in_tangents = np.zeros(len(times)) if in_tangents is None else in_tangents
        out_tangents = np.zeros(len(times)) if out_tangents is None else out_tangents
        return cls(
            keys=[
                Keyframe(float(t), float(v), float(i), float(o))
                for t, v, i, o in zip(times, values, in_tangents, out_tangents, strict=True)
            ]
        )

    def times(self) -> np.ndarray:
        return np.array([k.time for k in self.keys], dtype=float)

    def values(self) -> np.ndarray:
        return np.array([k.value for k in self.keys], dtype=float)

    def in_tangents(self) -> np.ndarray:
        return np.array([k.in_tangent for k in self.keys], dtype=float)

    def out_tangents(self) -> np.ndarray:
        return np.array([k.out_tangent for k in self.keys], dtype=float)


@dataclass(frozen=True)
class CurveBinding:
    """Address of an animated property.

    Attributes:
        path: Node path relative to the animated root ('/'-separated).
        type_name: Component the property belongs to, ``"Transform"`` for transform channels.
        property_name: Property inside the component, e.g. ``"local_rotation.w"``.

    """

    path: str
    type_name: str
    property_name: str

    @classmethod
    def transform(cls, path: str, property_name: str) -> CurveBinding:
        return cls(path=path, type_name=TRANSFORM_TYPE, property_name=property_name)


@dataclass
class AnimationClip:
    """An imported animation clip: curves keyed by the property they drive."""

    name: str
    curves: dict[CurveBinding, AnimationCurve] = field(default_factory=dict)

    def bindings(self) -> list[CurveBinding]:
        return list(self.curves)

    def get_curve(self, binding: CurveBinding) -> AnimationCurve:
        return self.curves[binding]

    def set_curve(self, binding: CurveBinding, curve: AnimationCurve) -> None:
        self.curves[binding] = curve
