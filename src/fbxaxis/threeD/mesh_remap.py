"""Mesh pass: rotate vertex buffers into the engine convention."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tqdm import tqdm

from fbxaxis.logger import get_logger

from .quaternions import transform_points
from .scene import Mesh, MeshRenderer, SceneNode, SkinnedBinding

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .axis_conventions import AxisConventionPolicy

logger = get_logger(__name__)


def collect_meshes(root: SceneNode) -> list[Mesh]:
    """Unique meshes referenced by static and skinned renderers below ``root``, in pre-order."""
    meshes: list[Mesh] = []
    seen: set[Mesh] = set()
    for node in root.iter_subtree():
        renderer = node.renderer
        if isinstance(renderer, (MeshRenderer, SkinnedBinding)) and renderer.mesh is not None:
            if renderer.mesh not in seen:
                seen.add(renderer.mesh)
                meshes.append(renderer.mesh)
    return meshes


def remap_mesh(mesh: Mesh, policy: AxisConventionPolicy, calculate_tangents: bool) -> None:
    """Rotate vertices and normals by the policy's mesh matrix.

    Normals go through the same point transform as vertices. The matrix is a pure rotation, so this is exact for
    them; meshes with non-uniform scale baked into their normals are not handled.

    Args:
        mesh: Mesh to modify in place.
        policy: The axis preset in use.
        calculate_tangents: Whether the host imports tangents, in which case they are regenerated.

    """
    logger.debug(f"Fixing mesh '{mesh.name}'")
    mesh.vertices = transform_points(policy.mesh_matrix, mesh.vertices)
    if mesh.normals is not None:
        mesh.normals = transform_points(policy.mesh_matrix, mesh.normals)

    if calculate_tangents:
        mesh.recalculate_tangents()
    mesh.recalculate_bounds()


def remap_meshes(
    meshes: Iterable[Mesh],
    policy: AxisConventionPolicy,
    calculate_tangents: bool,
    show_progress: bool = False,
) -> int:
    """Apply :func:`remap_mesh` to each mesh and return how many were fixed."""
    count = 0
    for mesh in tqdm(meshes, desc="Remapping meshes", disable=not show_progress, leave=False):
        remap_mesh(mesh, policy, calculate_tangents)
        count += 1
    return count
