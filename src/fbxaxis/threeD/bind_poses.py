"""Bind pose pass: re-express skin bind poses against the remapped skeleton."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from fbxaxis.errors import BindPoseCountError, ConversionReport, DiagnosticKind, StructuralInconsistencyError
from fbxaxis.logger import get_logger

from .scene import SceneNode, SkinnedBinding

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .axis_conventions import AxisConventionPolicy
    from .scene import DeltaMap, Mesh

logger = get_logger(__name__)


def collect_skinned_bindings(root: SceneNode) -> list[SkinnedBinding]:
    """Skinned renderers below ``root``, in pre-order."""
    return [node.renderer for node in root.iter_subtree() if isinstance(node.renderer, SkinnedBinding)]


def corrected_bind_poses(binding: SkinnedBinding, deltas: DeltaMap, policy: AxisConventionPolicy) -> np.ndarray:
    """Compute the bind poses of ``binding.mesh`` for the remapped skeleton, without modifying the mesh.

    A bind pose maps skin space to bone space at rest. The bone frame moved by its delta, so the pose is multiplied
    by the inverse delta, taken in the remapped bone frame. The skin vertices were rotated by the mesh matrix, so
    that rotation is undone on the skin side. The flip's world basis change is applied in between so skinned
    geometry lands where directly remapped geometry does.

    Args:
        binding: Skinned renderer whose mesh holds the bind poses.
        deltas: Sealed map produced by the hierarchy pass.
        policy: The axis preset in use.

    Returns:
        np.ndarray: (B, 4, 4) corrected bind poses.

    Raises:
        BindPoseCountError: If the bone count differs from the bind pose count.
        MissingBoneDeltaError: If a bone has no recorded delta.

    """
    bind_poses = binding.mesh.bind_poses
    if len(binding.bones) != len(bind_poses):
        msg = f"Mesh '{binding.mesh.name}' has {len(bind_poses)} bind poses but its skin has {len(binding.bones)} bones"
        raise BindPoseCountError(msg)

    inverse_mesh_matrix = np.linalg.inv(policy.mesh_matrix)
    corrected = np.empty_like(bind_poses)
    for i, bone in enumerate(binding.bones):
        delta = deltas.require(bone)
        bone_after = bone.world_matrix()
        # after^-1 @ basis @ before, with before = delta^-1 @ after
        correction = np.linalg.inv(bone_after) @ policy.world_basis @ np.linalg.inv(delta) @ bone_after
        corrected[i] = correction @ bind_poses[i] @ inverse_mesh_matrix
    return corrected


def remap_bind_poses(
    bindings: Iterable[SkinnedBinding],
    deltas: DeltaMap,
    policy: AxisConventionPolicy,
    processed: set[Mesh],
    report: ConversionReport | None = None,
) -> ConversionReport:
    """Correct the bind poses of every skinned mesh exactly once.

    Meshes already in ``processed`` are skipped and every visited mesh is added to it, so a mesh shared by several
    renderers is only corrected once. A mesh whose skin is inconsistent is left untouched and reported; the
    remaining meshes are still processed.

    Args:
        bindings: Skinned renderers of the scene.
        deltas: Sealed map produced by the hierarchy pass.
        policy: The axis preset in use.
        processed: Meshes already corrected during this pass. Updated in place.
        report: Report to append to. A new one is created when None.

    Returns:
        ConversionReport: The report diagnostics were added to.

    """
    report = report if report is not None else ConversionReport()
    if not deltas.sealed:
        msg = "Bind poses can only be corrected after the hierarchy pass has finished"
        raise StructuralInconsistencyError(msg)

    for binding in bindings:
        mesh = binding.mesh
        if mesh is None or mesh in processed:
            continue
        processed.add(mesh)
        if mesh.bind_poses is None:
            continue

        try:
            mesh.bind_poses = corrected_bind_poses(binding, deltas, policy)
        except StructuralInconsistencyError as e:
            logger.error(f"Bind poses of '{mesh.name}' left unchanged: {e}")
            report.add(DiagnosticKind.STRUCTURAL, mesh.name, str(e))
        else:
            logger.debug(f"Bind poses fixed for '{mesh.name}'")
    return report
