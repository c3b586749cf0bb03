"""Axis convention presets.

Blender exports FBX content Z-up and right-handed; the engine expects Y-up and
left-handed, optionally with the front axis flipped as well. The mapping is a
discrete choice of axis swaps and sign flips, so both variants are stored as
constants rather than derived from parameters.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from fbxaxis.metaclasses import FrozenNamespaceMeta

from .quaternions import quaternion_from_x_angle, quaternion_inverse, quaternion_multiply, rotation_matrix

SQRT_2_HALF = float(np.sqrt(0.5))

# Blender writes "exactly 90 degrees" up-axis rotations as 89.98 in its FBX output.
SNAP_ANGLE_DEGREES = 89.98
NODE_CORRECTION_DEGREES = 90.0
SNAP_TOLERANCE_DEGREES = 1e-3


class AxisConstants(metaclass=FrozenNamespaceMeta):
    """Fixed quaternions and masks of the Blender to engine conversion, stored as read-only arrays."""

    mesh_rotation = [-SQRT_2_HALF, 0.0, 0.0, SQRT_2_HALF]  # -90 deg about X
    mesh_rotation_flipped = [0.0, SQRT_2_HALF, SQRT_2_HALF, 0.0]  # +90 deg about X after 180 about Y
    animation_rotation = [SQRT_2_HALF, 0.0, 0.0, SQRT_2_HALF]  # +90 deg about X
    mirror_rotation = [0.0, 1.0, 0.0, 0.0]  # 180 deg about Y
    flip_scale = [-1.0, 1.0, -1.0]
    no_scale = [1.0, 1.0, 1.0]


@dataclass(frozen=True, eq=False)
class AxisConventionPolicy:
    """Operators applied by the remappers for one value of the flip flag.

    Attributes:
        flip: Whether the extra front-axis flip is applied.
        mesh_rotation: Quaternion applied to vertex and normal buffers.
        mesh_matrix: The same rotation as a 4x4 matrix.
        animation_rotation: Quaternion right-multiplied onto rotation keyframes.
        mirror_rotation: Quaternion the flip conjugates rotations with.
        position_scale: Component mask applied to world positions and position keyframes.
        world_basis: 4x4 change of world basis the whole pass amounts to (identity unless flipped).
        node_correction: Quaternion right-multiplied onto each node's local rotation.
        snap_rotation: Local rotation that is reset to identity instead of corrected.
        snap_tolerance_degrees: Angular distance under which ``snap_rotation`` matches.

    """

    flip: bool
    mesh_rotation: np.ndarray
    mesh_matrix: np.ndarray
    animation_rotation: np.ndarray
    mirror_rotation: np.ndarray
    position_scale: np.ndarray
    world_basis: np.ndarray
    node_correction: np.ndarray
    snap_rotation: np.ndarray
    snap_tolerance_degrees: float = SNAP_TOLERANCE_DEGREES

    def mirror(self, rotation: np.ndarray) -> np.ndarray:
        """Conjugate a rotation by the mirror quaternion.

        Equivalent to negating the X and Z Euler angles of ``rotation`` in any YXZ decomposition, and to the
        ``position_scale`` flip applied to positions. Returns ``rotation`` unchanged when not flipping.
        """
        if not self.flip:
            return np.array(rotation, dtype=float)
        return quaternion_multiply(
            quaternion_multiply(self.mirror_rotation, rotation), quaternion_inverse(self.mirror_rotation)
        )


def _build_policy(flip: bool) -> AxisConventionPolicy:
    sign = 1.0 if flip else -1.0
    mesh_rotation = AxisConstants.mesh_rotation_flipped if flip else AxisConstants.mesh_rotation
    position_scale = AxisConstants.flip_scale if flip else AxisConstants.no_scale
    world_basis = np.diag([*position_scale, 1.0])
    mesh_matrix = rotation_matrix(mesh_rotation)
    node_correction = quaternion_from_x_angle(-NODE_CORRECTION_DEGREES * sign)
    snap_rotation = quaternion_from_x_angle(SNAP_ANGLE_DEGREES * sign)
    for array in (world_basis, mesh_matrix, node_correction, snap_rotation):
        array.flags.writeable = False
    return AxisConventionPolicy(
        flip=flip,
        mesh_rotation=mesh_rotation,
        mesh_matrix=mesh_matrix,
        animation_rotation=AxisConstants.animation_rotation,
        mirror_rotation=AxisConstants.mirror_rotation,
        position_scale=position_scale,
        world_basis=world_basis,
        node_correction=node_correction,
        snap_rotation=snap_rotation,
    )


STANDARD_POLICY = _build_policy(flip=False)
FLIPPED_POLICY = _build_policy(flip=True)


def policy_for(flip: bool) -> AxisConventionPolicy:
    """Return the preset for a value of the flip flag."""
    return FLIPPED_POLICY if flip else STANDARD_POLICY
