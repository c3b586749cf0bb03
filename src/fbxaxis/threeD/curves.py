"""Animation pass: remap transform curves of a clip into the engine convention.

Keys of a channel group are processed in lock-step by index: the x, y, z (and w) curves of one property must have
the same number of keys. Tangents go through the same linear map as values since they are rates of change of the
values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

from fbxaxis.errors import ChannelGroupError, ConversionReport, DiagnosticKind
from fbxaxis.logger import get_logger

from .animation import TRANSFORM_TYPE, AnimationClip, AnimationCurve, CurveBinding, Keyframe
from .quaternions import quaternion_multiply

if TYPE_CHECKING:
    from .axis_conventions import AxisConventionPolicy

logger = get_logger(__name__)

POSITION = "local_position"
ROTATION = "local_rotation"
SCALE = "local_scale"

TRANSFORM_PROPERTIES: dict[str, tuple[str, str]] = {
    f"{prop}.{axis}": (prop, axis)
    for prop, axes in ((POSITION, "xyz"), (ROTATION, "xyzw"), (SCALE, "xyz"))
    for axis in axes
}


@dataclass
class TransformChannels:
    """Transform bindings of one node path, by property and component."""

    path: str
    groups: dict[str, dict[str, CurveBinding]] = field(default_factory=dict)

    def group(self, prop: str) -> dict[str, CurveBinding] | None:
        return self.groups.get(prop)


def group_transform_bindings(clip: AnimationClip, report: ConversionReport) -> dict[str, TransformChannels]:
    """Group the transform bindings of ``clip`` by node path.

    Unknown transform properties are reported and left out. Bindings of other components are ignored.
    """
    channels: dict[str, TransformChannels] = {}
    for binding in clip.bindings():
        if binding.type_name != TRANSFORM_TYPE:
            continue
        known = TRANSFORM_PROPERTIES.get(binding.property_name)
        if known is None:
            msg = f"Unknown binding in transform animation: {binding.property_name}"
            logger.error(f"{clip.name}: {msg}")
            report.add(DiagnosticKind.UNRECOGNIZED, f"{binding.path}:{binding.property_name}", msg)
            continue
        prop, axis = known
        node_channels = channels.setdefault(binding.path, TransformChannels(path=binding.path))
        node_channels.groups.setdefault(prop, {})[axis] = binding
    return channels


def _read_group(
    clip: AnimationClip, path: str, prop: str, bindings: dict[str, CurveBinding], axes: str
) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Stack the component curves of one group into (K, n) value and tangent arrays.

    Raises:
        ChannelGroupError: If a component is missing or the key counts differ.

    """
    missing = [axis for axis in axes if axis not in bindings]
    if missing:
        msg = f"'{path}' {prop} is missing components {', '.join(missing)}"
        raise ChannelGroupError(msg)

    curves = [clip.get_curve(bindings[axis]) for axis in axes]
    counts = {len(curve) for curve in curves}
    if len(counts) != 1:
        lengths = ", ".join(f"{axis}={len(curve)}" for axis, curve in zip(axes, curves, strict=True))
        msg = f"'{path}' {prop} component curves have mismatched key counts ({lengths})"
        raise ChannelGroupError(msg)

    times = curves[0].times()
    values = np.stack([curve.values() for curve in curves], axis=-1)
    in_tangents = np.stack([curve.in_tangents() for curve in curves], axis=-1)
    out_tangents = np.stack([curve.out_tangents() for curve in curves], axis=-1)
    return times, values, in_tangents, out_tangents


def _write_group(
    clip: AnimationClip,
    bindings: dict[str, CurveBinding],
    axes: str,
    times: np.ndarray,
    values: np.ndarray,
    in_tangents: np.ndarray,
    out_tangents: np.ndarray,
) -> None:
    for column, axis in enumerate(axes):
        clip.set_curve(
            bindings[axis],
            AnimationCurve(
                keys=[
                    Keyframe(float(t), float(v), float(i), float(o))
                    for t, v, i, o in zip(
                        times, values[:, column], in_tangents[:, column], out_tangents[:, column], strict=True
                    )
                ]
            ),
        )


def remap_rotation(rotations: np.ndarray, policy: AxisConventionPolicy) -> np.ndarray:
    """Apply the animation correction to (K, 4) quaternions or quaternion tangents.

    Without the flip the correction is right-multiplied. The flip is a reflection, so it is applied as a similarity
    transform with the mirror quaternion on both sides.
    """
    corrected = quaternion_multiply(rotations, policy.animation_rotation)
    if policy.flip:
        corrected = quaternion_multiply(quaternion_multiply(policy.mirror_rotation, corrected), policy.mirror_rotation)
    return corrected


def remap_position_group(
    clip: AnimationClip, path: str, bindings: dict[str, CurveBinding], policy: AxisConventionPolicy
) -> None:
    times, values, in_tangents, out_tangents = _read_group(clip, path, POSITION, bindings, "xyz")
    if policy.flip:
        values = values * policy.position_scale
        in_tangents = in_tangents * policy.position_scale
        out_tangents = out_tangents * policy.position_scale
    _write_group(clip, bindings, "xyz", times, values, in_tangents, out_tangents)


def remap_rotation_group(
    clip: AnimationClip, path: str, bindings: dict[str, CurveBinding], policy: AxisConventionPolicy
) -> None:
    times, values, in_tangents, out_tangents = _read_group(clip, path, ROTATION, bindings, "xyzw")
    _write_group(
        clip,
        bindings,
        "xyzw",
        times,
        remap_rotation(values, policy),
        remap_rotation(in_tangents, policy),
        remap_rotation(out_tangents, policy),
    )


def remap_scale_group(
    clip: AnimationClip, path: str, bindings: dict[str, CurveBinding], _policy: AxisConventionPolicy | None = None
) -> None:
    """Swap the Y and Z scale curves; values are not touched.

    Raises:
        ChannelGroupError: If the y or z curve is missing or the present curves differ in key count.

    """
    if "y" not in bindings or "z" not in bindings:
        msg = f"'{path}' {SCALE} is missing its y or z component"
        raise ChannelGroupError(msg)
    present = [axis for axis in "xyz" if axis in bindings]
    counts = {axis: len(clip.get_curve(bindings[axis])) for axis in present}
    if len(set(counts.values())) != 1:
        lengths = ", ".join(f"{axis}={count}" for axis, count in counts.items())
        msg = f"'{path}' {SCALE} component curves have mismatched key counts ({lengths})"
        raise ChannelGroupError(msg)
    y_curve = clip.get_curve(bindings["y"])
    z_curve = clip.get_curve(bindings["z"])
    clip.set_curve(bindings["y"], z_curve)
    clip.set_curve(bindings["z"], y_curve)


GROUP_REMAPPERS = {
    POSITION: remap_position_group,
    ROTATION: remap_rotation_group,
    SCALE: remap_scale_group,
}


def remap_clip(
    clip: AnimationClip, policy: AxisConventionPolicy, report: ConversionReport | None = None
) -> ConversionReport:
    """Remap the position, rotation and scale curves of every animated node in ``clip``.

    Each channel group is converted on its own: a group that fails validation is reported and left as it was,
    without affecting the other groups of the clip.

    Args:
        clip: Clip to modify in place.
        policy: The axis preset in use.
        report: Report to append to. A new one is created when None.

    Returns:
        ConversionReport: The report diagnostics were added to.

    """
    report = report if report is not None else ConversionReport()
    channels = group_transform_bindings(clip, report)

    for path, node_channels in channels.items():
        for prop, remap in GROUP_REMAPPERS.items():
            bindings = node_channels.group(prop)
            if bindings is None:
                continue
            try:
                remap(clip, path, bindings, policy)
            except ChannelGroupError as e:
                logger.error(f"{clip.name}: {e}")
                report.add(DiagnosticKind.STRUCTURAL, f"{path}:{prop}", str(e))

    logger.info(f"Remapped animation clip '{clip.name}' ({len(channels)} animated nodes, flip={policy.flip})")
    return report
