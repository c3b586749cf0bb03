from __future__ import annotations

import numpy as np
import pytest

from fbxaxis.threeD import (
    FLIPPED_POLICY,
    STANDARD_POLICY,
    AxisConventionPolicy,
    Mesh,
    MeshRenderer,
    SceneNode,
    SkinnedBinding,
    collect_meshes,
    remap_hierarchy,
    remap_mesh,
    remap_meshes,
)
from fbxaxis.threeD.quaternions import transform_points


@pytest.fixture
def quad() -> Mesh:
    """Unit quad in Blender's ground plane, facing +Z, with uvs matching x/y."""
    vertices = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [1.0, 1.0, 0.0], [0.0, 1.0, 0.0]])
    return Mesh(
        "Quad",
        vertices=vertices,
        normals=np.tile([0.0, 0.0, 1.0], (4, 1)),
        triangles=[[0, 1, 2], [0, 2, 3]],
        uvs=vertices[:, :2],
    )


@pytest.mark.parametrize(
    ("policy", "expected"),
    [
        (STANDARD_POLICY, [[1.0, 0.0, 0.0], [0.0, 0.0, -1.0], [0.0, 1.0, 0.0]]),
        (FLIPPED_POLICY, [[-1.0, 0.0, 0.0], [0.0, 0.0, 1.0], [0.0, 1.0, 0.0]]),
    ],
    ids=["standard", "flipped"],
)
def test_vertices_and_normals_are_rotated(policy: AxisConventionPolicy, expected: list[list[float]]) -> None:
    """Test where the Blender X, Y and Z axes end up."""
    axes = np.eye(3)
    mesh = Mesh("Axes", vertices=axes, normals=axes)

    remap_mesh(mesh, policy, calculate_tangents=False)

    assert np.allclose(mesh.vertices, expected)
    assert np.allclose(mesh.normals, expected)


def test_bounds_are_recomputed(quad: Mesh) -> None:
    """Test that bounds follow the rotated vertices."""
    assert np.allclose(quad.bounds.center, [0.5, 0.5, 0.0])

    remap_mesh(quad, STANDARD_POLICY, calculate_tangents=False)

    assert np.allclose(quad.bounds.center, [0.5, 0.0, -0.5])
    assert np.allclose(quad.bounds.extents, [0.5, 0.0, 0.5])
    assert np.allclose(quad.bounds.min, [0.0, 0.0, -1.0])
    assert np.allclose(quad.bounds.max, [1.0, 0.0, 0.0])


def test_tangents_are_regenerated_when_requested(quad: Mesh) -> None:
    """Test tangent generation on the rotated quad: +u stays along X, handedness is positive."""
    remap_mesh(quad, STANDARD_POLICY, calculate_tangents=True)

    assert quad.tangents.shape == (4, 4)
    assert np.allclose(quad.tangents, np.tile([1.0, 0.0, 0.0, 1.0], (4, 1)))


def test_tangents_are_kept_when_not_requested(quad: Mesh) -> None:
    """Test that existing tangents are not touched without the import option."""
    quad.tangents = np.tile([0.0, 1.0, 0.0, -1.0], (4, 1))

    remap_mesh(quad, STANDARD_POLICY, calculate_tangents=False)

    assert np.allclose(quad.tangents, np.tile([0.0, 1.0, 0.0, -1.0], (4, 1)))


def test_tangents_need_uvs() -> None:
    """Test that a mesh without uvs gets no tangents but is still rotated."""
    mesh = Mesh("NoUV", vertices=[[0, 0, 1]], triangles=None)

    remap_mesh(mesh, STANDARD_POLICY, calculate_tangents=True)

    assert mesh.tangents is None
    assert np.allclose(mesh.vertices, [[0.0, 1.0, 0.0]])


def test_mesh_rejects_mismatched_normals() -> None:
    """Test the vertex/normal length invariant."""
    with pytest.raises(ValueError, match="normals"):
        Mesh("Broken", vertices=np.zeros((3, 3)), normals=np.zeros((2, 3)))


def test_collect_meshes_deduplicates_shared_meshes(quad: Mesh) -> None:
    """Test that shared meshes are collected once, skinned ones included."""
    other = Mesh("Other", vertices=np.zeros((1, 3)))
    root = SceneNode("Scene")
    root.add_child(SceneNode("A", renderer=MeshRenderer(quad)))
    root.add_child(SceneNode("B", renderer=MeshRenderer(quad, enabled=False))).add_child(SceneNode("Child"))
    root.add_child(SceneNode("C", renderer=SkinnedBinding(other)))
    root.add_child(SceneNode("D", renderer=SkinnedBinding(quad)))
    root.add_child(SceneNode("Empty", renderer=MeshRenderer(None)))

    assert collect_meshes(root) == [quad, other]
    assert remap_meshes(collect_meshes(root), STANDARD_POLICY, calculate_tangents=False) == 2


def test_static_mesh_world_vertices_follow_the_hierarchy(
    scene: dict[str, SceneNode], policy: AxisConventionPolicy
) -> None:
    """Test that node and mesh remapping together keep static geometry in place, up to the flip."""
    mesh = Mesh("Lid", vertices=[[0.1, 0.2, 0.3], [-1.0, 0.5, 2.0], [0.0, -3.0, 1.0]])
    lid = scene["lid"]
    lid.renderer = MeshRenderer(mesh)
    before = transform_points(lid.world_matrix(), mesh.vertices)

    remap_hierarchy(scene["root"], policy)
    remap_meshes(collect_meshes(scene["root"]), policy, calculate_tangents=False)

    after = transform_points(lid.world_matrix(), mesh.vertices)
    assert np.allclose(after, transform_points(policy.world_basis, before), atol=1e-4)
