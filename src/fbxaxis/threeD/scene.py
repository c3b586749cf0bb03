"""Scene graph and mesh data handed over by the import host for one conversion pass."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

from fbxaxis.errors import MissingBoneDeltaError, StructuralInconsistencyError
from fbxaxis.logger import get_logger

from .quaternions import IDENTITY_QUATERNION, quaternion_inverse, quaternion_multiply, trs_matrix

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = get_logger(__name__)


@dataclass
class Bounds:
    """Axis-aligned bounding box."""

    center: np.ndarray
    extents: np.ndarray

    @property
    def min(self) -> np.ndarray:
        return self.center - self.extents

    @property
    def max(self) -> np.ndarray:
        return self.center + self.extents


@dataclass(eq=False)
class Mesh:
    """Vertex buffers of one mesh asset.

    Meshes can be shared between renderers, so they hash by identity.

    Attributes:
        name: Mesh name, used in diagnostics.
        vertices: (N, 3) vertex positions.
        normals: (N, 3) normals, or None.
        triangles: (M, 3) vertex indices, or None.
        uvs: (N, 2) texture coordinates, or None.
        tangents: (N, 4) tangents with handedness in w, or None.
        bind_poses: (B, 4, 4) per-bone bind pose matrices, or None for unskinned meshes.
        bounds: Bounding box of ``vertices``.

    """

    name: str
    vertices: np.ndarray
    normals: np.ndarray | None = None
    triangles: np.ndarray | None = None
    uvs: np.ndarray | None = None
    tangents: np.ndarray | None = None
    bind_poses: np.ndarray | None = None
    bounds: Bounds | None = None

    def __post_init__(self) -> None:
        """Validate buffer shapes."""
        self.vertices = np.asarray(self.vertices, dtype=float).reshape(-1, 3)
        if self.normals is not None:
            self.normals = np.asarray(self.normals, dtype=float).reshape(-1, 3)
            if len(self.normals) != len(self.vertices):
                msg = f"Mesh '{self.name}' has {len(self.vertices)} vertices but {len(self.normals)} normals"
                raise ValueError(msg)
        if self.uvs is not None:
            self.uvs = np.asarray(self.uvs, dtype=float).reshape(-1, 2)
            if len(self.uvs) != len(self.vertices):
                msg = f"Mesh '{self.name}' has {len(self.vertices)} vertices but {len(self.uvs)} uvs"
                raise ValueError(msg)
        if self.triangles is not None:
            self.triangles = np.asarray(self.triangles, dtype=int).reshape(-1, 3)
        if self.tangents is not None:
            self.tangents = np.asarray(self.tangents, dtype=float).reshape(-1, 4)
        if self.bind_poses is not None:
            self.bind_poses = np.asarray(self.bind_poses, dtype=float).reshape(-1, 4, 4)
        if self.bounds is None:
            self.recalculate_bounds()

    def recalculate_bounds(self) -> Bounds:
        """Recompute ``bounds`` from the current vertex positions."""
        if len(self.vertices) == 0:
            self.bounds = Bounds(center=np.zeros(3), extents=np.zeros(3))
        else:
            lo, hi = self.vertices.min(axis=0), self.vertices.max(axis=0)
            self.bounds = Bounds(center=(lo + hi) / 2, extents=(hi - lo) / 2)
        return self.bounds

    def recalculate_tangents(self) -> np.ndarray | None:
        """Regenerate per-vertex tangents from triangles, uvs and normals.

        Per-triangle tangents are derived from the UV gradients, accumulated per vertex, orthogonalized against the
        normal and normalized. The w component stores the bitangent handedness.

        Returns:
            np.ndarray | None: The new (N, 4) tangents, or None when the mesh lacks triangles or uvs.

        """
        if self.triangles is None or self.uvs is None:
            logger.warning(f"Mesh '{self.name}' has no triangles or uvs, tangents cannot be generated")
            return None

        tris = self.triangles
        p0, p1, p2 = (self.vertices[tris[:, k]] for k in range(3))
        w0, w1, w2 = (self.uvs[tris[:, k]] for k in range(3))
        e1, e2 = p1 - p0, p2 - p0
        d1, d2 = w1 - w0, w2 - w0

        det = d1[:, 0] * d2[:, 1] - d2[:, 0] * d1[:, 1]
        inv_det = np.divide(1.0, det, out=np.zeros_like(det), where=np.abs(det) > 1e-12)[:, None]
        sdir = (e1 * d2[:, 1:2] - e2 * d1[:, 1:2]) * inv_det
        tdir = (e2 * d1[:, 0:1] - e1 * d2[:, 0:1]) * inv_det

        tan1 = np.zeros_like(self.vertices)
        tan2 = np.zeros_like(self.vertices)
        for k in range(3):
            np.add.at(tan1, tris[:, k], sdir)
            np.add.at(tan2, tris[:, k], tdir)

        normals = self.normals if self.normals is not None else np.zeros_like(self.vertices)
        tangent = tan1 - normals * np.sum(normals * tan1, axis=1, keepdims=True)
        length = np.linalg.norm(tangent, axis=1, keepdims=True)
        tangent = np.where(length > 1e-12, tangent / np.where(length > 1e-12, length, 1.0), [1.0, 0.0, 0.0])
        handedness = np.where(np.sum(np.cross(normals, tangent) * tan2, axis=1) < 0.0, -1.0, 1.0)

        self.tangents = np.hstack([tangent, handedness[:, None]])
        return self.tangents


@dataclass(eq=False)
class MeshRenderer:
    """Static visual renderer attached to a node."""

    mesh: Mesh | None
    enabled: bool = True


@dataclass(eq=False)
class SkinnedBinding:
    """Skinned renderer: a mesh plus the bones its bind poses are index-aligned with."""

    mesh: Mesh | None
    bones: list[SceneNode] = field(default_factory=list)
    enabled: bool = True


@dataclass(eq=False)
class SceneNode:
    """A transform in the imported hierarchy.

    Attributes:
        name: Node name.
        local_position: Position relative to the parent.
        local_rotation: Unit quaternion (x, y, z, w) relative to the parent.
        local_scale: Scale relative to the parent.
        renderer: Visual component of the node, if any.
        parent: Owning node, None for the root.
        children: Owned child nodes, in order.

    """

    name: str
    local_position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    local_rotation: np.ndarray = field(default_factory=lambda: IDENTITY_QUATERNION.copy())
    local_scale: np.ndarray = field(default_factory=lambda: np.ones(3))
    renderer: MeshRenderer | SkinnedBinding | None = None
    parent: SceneNode | None = field(default=None, repr=False)
    children: list[SceneNode] = field(default_factory=list, repr=False)

    def __post_init__(self) -> None:
        """Coerce transform components to float arrays."""
        self.local_position = np.asarray(self.local_position, dtype=float)
        self.local_rotation = np.asarray(self.local_rotation, dtype=float)
        self.local_scale = np.asarray(self.local_scale, dtype=float)

    def add_child(self, child: SceneNode) -> SceneNode:
        """Attach ``child`` as the last child of this node and return it."""
        node: SceneNode | None = self
        while node is not None:
            if node is child:
                msg = f"Cannot parent '{child.name}' under its own descendant '{self.name}'"
                raise ValueError(msg)
            node = node.parent
        child.detach()
        child.parent = self
        self.children.append(child)
        return child

    def detach(self) -> None:
        """Remove this node (and its subtree) from its parent."""
        if self.parent is not None:
            self.parent.children.remove(self)
            self.parent = None

    def iter_subtree(self) -> Iterator[SceneNode]:
        """Yield this node and its descendants in pre-order."""
        yield self
        for child in self.children:
            yield from child.iter_subtree()

    @property
    def path(self) -> str:
        """Names from below the root down to this node, joined by '/'. Empty for the root."""
        names = []
        node = self
        while node.parent is not None:
            names.append(node.name)
            node = node.parent
        return "/".join(reversed(names))

    def find(self, path: str) -> SceneNode | None:
        """Find a descendant by a '/'-separated path relative to this node."""
        node: SceneNode | None = self
        for name in filter(None, path.split("/")):
            node = next((c for c in node.children if c.name == name), None)
            if node is None:
                return None
        return node

    def local_matrix(self) -> np.ndarray:
        return trs_matrix(self.local_position, self.local_rotation, self.local_scale)

    def world_matrix(self) -> np.ndarray:
        """Local-to-world matrix, including every ancestor and the root."""
        if self.parent is None:
            return self.local_matrix()
        return self.parent.world_matrix() @ self.local_matrix()

    @property
    def world_position(self) -> np.ndarray:
        return self.world_matrix()[:3, 3]

    @property
    def world_rotation(self) -> np.ndarray:
        """Product of the local rotations down the parent chain; scale is ignored."""
        if self.parent is None:
            return self.local_rotation.copy()
        return quaternion_multiply(self.parent.world_rotation, self.local_rotation)

    def set_world_position(self, position: np.ndarray) -> None:
        position = np.asarray(position, dtype=float)
        if self.parent is None:
            self.local_position = position.copy()
            return
        point = np.linalg.inv(self.parent.world_matrix()) @ np.append(position, 1.0)
        self.local_position = point[:3]

    def set_world_rotation(self, rotation: np.ndarray) -> None:
        rotation = np.asarray(rotation, dtype=float)
        if self.parent is None:
            self.local_rotation = rotation.copy()
            return
        self.local_rotation = quaternion_multiply(quaternion_inverse(self.parent.world_rotation), rotation)

    def rotate_local(self, rotation: np.ndarray) -> None:
        """Rotate about the node's own axes."""
        self.local_rotation = quaternion_multiply(self.local_rotation, rotation)


class DeltaMap:
    """Per-node world-frame change recorded by the hierarchy pass.

    Each entry is ``world_after @ inv(world_before)``. Entries are written once, and the map is sealed before any
    consumer reads it, so it cannot leak into another pass.
    """

    def __init__(self) -> None:
        self._deltas: dict[SceneNode, np.ndarray] = {}
        self._sealed = False

    def record(self, node: SceneNode, delta: np.ndarray) -> None:
        if self._sealed:
            msg = f"Delta map is sealed, cannot record '{node.name}'"
            raise StructuralInconsistencyError(msg)
        if node in self._deltas:
            msg = f"Delta for '{node.name}' was already recorded"
            raise StructuralInconsistencyError(msg)
        delta = np.array(delta, dtype=float)
        delta.flags.writeable = False
        self._deltas[node] = delta

    def seal(self) -> None:
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def require(self, node: SceneNode) -> np.ndarray:
        """Return the delta of ``node``.

        Raises:
            MissingBoneDeltaError: If the node was deleted, is the root, or is not part of the remapped hierarchy.

        """
        try:
            return self._deltas[node]
        except KeyError:
            msg = f"No hierarchy delta recorded for node '{node.name}'"
            raise MissingBoneDeltaError(msg) from None

    def __contains__(self, node: object) -> bool:
        return node in self._deltas

    def __len__(self) -> int:
        return len(self._deltas)

    def __iter__(self) -> Iterator[SceneNode]:
        return iter(self._deltas)
