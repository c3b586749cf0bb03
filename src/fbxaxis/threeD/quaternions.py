"""Quaternion and matrix helpers.

Quaternions are scalar-last ``(x, y, z, w)`` numpy arrays, the layout used by
``scipy.spatial.transform.Rotation``. The products below work on raw 4-vectors
so they also apply to keyframe tangents, which are not unit quaternions.
"""

from __future__ import annotations

import numpy as np
from scipy.spatial.transform import Rotation

IDENTITY_QUATERNION = np.array([0.0, 0.0, 0.0, 1.0])


def quaternion_multiply(q1: np.ndarray, q2: np.ndarray) -> np.ndarray:
    """Hamilton product ``q1 * q2`` of (..., 4) arrays."""
    x1, y1, z1, w1 = np.moveaxis(np.asarray(q1, dtype=float), -1, 0)
    x2, y2, z2, w2 = np.moveaxis(np.asarray(q2, dtype=float), -1, 0)
    return np.stack(
        [
            w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
            w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
            w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
            w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
        ],
        axis=-1,
    )


def quaternion_conjugate(q: np.ndarray) -> np.ndarray:
    """Negate the vector part."""
    q = np.array(q, dtype=float)
    q[..., :3] *= -1.0
    return q


def quaternion_inverse(q: np.ndarray) -> np.ndarray:
    """Multiplicative inverse, valid for non-unit quaternions too."""
    q = np.asarray(q, dtype=float)
    return quaternion_conjugate(q) / np.sum(q * q, axis=-1, keepdims=True)


def quaternion_from_x_angle(degrees: float) -> np.ndarray:
    """Unit quaternion rotating ``degrees`` about the X axis."""
    return Rotation.from_euler("x", degrees, degrees=True).as_quat()


def rotation_distance_degrees(q1: np.ndarray, q2: np.ndarray) -> float:
    """Angle of the rotation taking ``q1`` to ``q2``, in degrees."""
    relative = Rotation.from_quat(q1).inv() * Rotation.from_quat(q2)
    return float(np.degrees(relative.magnitude()))


def rotation_matrix(q: np.ndarray) -> np.ndarray:
    """4x4 homogeneous matrix of a unit quaternion, without translation."""
    matrix = np.eye(4)
    matrix[:3, :3] = Rotation.from_quat(q).as_matrix()
    return matrix


def trs_matrix(position: np.ndarray, rotation: np.ndarray, scale: np.ndarray) -> np.ndarray:
    """Compose translation, rotation and scale into a 4x4 matrix (scale applied first)."""
    matrix = np.eye(4)
    matrix[:3, :3] = Rotation.from_quat(rotation).as_matrix() * np.asarray(scale, dtype=float)
    matrix[:3, 3] = position
    return matrix


def transform_points(matrix: np.ndarray, points: np.ndarray) -> np.ndarray:
    """Apply a 4x4 affine matrix to (N, 3) points."""
    points = np.asarray(points, dtype=float)
    return points @ matrix[:3, :3].T + matrix[:3, 3]
