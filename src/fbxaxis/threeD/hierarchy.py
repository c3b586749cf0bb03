"""Hierarchy pass: prune hidden leaves and rewrite node transforms into the engine convention."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from fbxaxis.logger import get_logger

from .quaternions import IDENTITY_QUATERNION, rotation_distance_degrees
from .scene import DeltaMap, MeshRenderer, SceneNode

if TYPE_CHECKING:
    from .axis_conventions import AxisConventionPolicy

logger = get_logger(__name__)


def should_delete(node: SceneNode) -> bool:
    """Whether a node is a disabled static renderer with nothing below it."""
    renderer = node.renderer
    return isinstance(renderer, MeshRenderer) and not renderer.enabled and not node.children


def is_snap_aligned(rotation: np.ndarray, policy: AxisConventionPolicy) -> bool:
    """Whether a local rotation already is the exported up-axis rotation, within tolerance."""
    return rotation_distance_degrees(rotation, policy.snap_rotation) < policy.snap_tolerance_degrees


def remap_node(
    node: SceneNode,
    world_position: np.ndarray,
    world_rotation: np.ndarray,
    world_before: np.ndarray,
    policy: AxisConventionPolicy,
) -> np.ndarray:
    """Rewrite one node's local transform and return its world delta.

    The node is first put back at its original world position and rotation, since its parent may have been
    rewritten already. Its up axis is then corrected in local space and its scale Y/Z swapped.

    Args:
        node: The node to rewrite.
        world_position: World position of the node before the pass started.
        world_rotation: World rotation of the node before the pass started.
        world_before: World matrix of the node before the pass started.
        policy: The axis preset in use.

    Returns:
        np.ndarray: ``world_after @ inv(world_before)``.

    """
    node.set_world_position(world_position * policy.position_scale)
    node.set_world_rotation(policy.mirror(world_rotation))

    if is_snap_aligned(node.local_rotation, policy):
        node.local_rotation = IDENTITY_QUATERNION.copy()
    else:
        node.rotate_local(policy.node_correction)

    node.local_scale = node.local_scale[[0, 2, 1]]

    return node.world_matrix() @ np.linalg.inv(world_before)


def remap_hierarchy(root: SceneNode, policy: AxisConventionPolicy) -> DeltaMap:
    """Convert every node below ``root`` to the engine convention.

    World transforms are captured for all nodes before anything changes. Nodes are then visited parent first:
    disabled static leaves are removed, the others are rewritten and their world delta recorded. Only nodes without
    children are removed, so no visited node ever has a removed ancestor. The root keeps its transform and gets no
    delta.

    Args:
        root: Root of the imported scene.
        policy: The axis preset in use.

    Returns:
        DeltaMap: Sealed map with one entry per surviving non-root node.

    """
    nodes = [node for node in root.iter_subtree() if node is not root]
    stored = {node: (node.world_position, node.world_rotation, node.world_matrix()) for node in nodes}

    deltas = DeltaMap()
    removed = 0
    for node in nodes:
        if should_delete(node):
            logger.debug(f"Removing disabled leaf '{node.path}'")
            node.detach()
            removed += 1
            continue
        deltas.record(node, remap_node(node, *stored[node], policy))

    deltas.seal()
    logger.info(f"Remapped {len(deltas)} nodes, removed {removed} (flip={policy.flip})")
    return deltas
