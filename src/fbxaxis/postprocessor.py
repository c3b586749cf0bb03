"""Entry points called by the asset import pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .logger import get_logger, log_report
from .threeD.axis_conventions import policy_for
from .threeD.bind_poses import collect_skinned_bindings, remap_bind_poses
from .threeD.curves import remap_clip
from .threeD.hierarchy import remap_hierarchy
from .threeD.mesh_remap import collect_meshes, remap_meshes
from .user_data import ConversionSettings

if TYPE_CHECKING:
    from .errors import ConversionReport
    from .threeD.animation import AnimationClip
    from .threeD.axis_conventions import AxisConventionPolicy
    from .threeD.scene import Mesh, SceneNode
    from .user_data import AssetUserData

logger = get_logger(__name__)


def convert_scene(
    root: SceneNode,
    policy: AxisConventionPolicy,
    calculate_tangents: bool = True,
    show_progress: bool = False,
) -> ConversionReport:
    """Convert an imported scene in place.

    The hierarchy pass runs first and produces the delta map. Meshes are then rotated, and bind poses corrected
    from the finished delta map. Both the map and the set of corrected meshes live only for this call.

    Args:
        root: Root of the imported scene. Its own transform is left alone.
        policy: The axis preset in use.
        calculate_tangents: Whether tangents are regenerated for rotated meshes.
        show_progress: Whether to show a progress bar over the meshes.

    Returns:
        ConversionReport: Diagnostics of meshes that could not be fully converted.

    """
    deltas = remap_hierarchy(root, policy)

    meshes = collect_meshes(root)
    fixed = remap_meshes(meshes, policy, calculate_tangents, show_progress=show_progress)

    processed: set[Mesh] = set()
    report = remap_bind_poses(collect_skinned_bindings(root), deltas, policy, processed)

    logger.info(f"Converted scene '{root.name}': {fixed} meshes, {len(processed)} skinned meshes")
    return report


class AxisConversionPostprocessor:
    """Runs the conversion for one asset at the import pipeline's extension points.

    Args:
        user_data: Per-asset configuration holding the conversion flags.
        import_tangents: Whether the importer is set to produce tangents.
        show_progress: Whether to show a progress bar over the meshes.

    """

    def __init__(self, user_data: AssetUserData, import_tangents: bool = True, show_progress: bool = False) -> None:
        self.settings = ConversionSettings.from_user_data(user_data)
        self.import_tangents = import_tangents
        self.show_progress = show_progress

    @property
    def policy(self) -> AxisConventionPolicy:
        return policy_for(self.settings.flip_z_axis)

    def on_postprocess_model(self, root: SceneNode) -> ConversionReport | None:
        """Convert a freshly imported scene. Returns None when conversion is disabled for the asset."""
        if not self.settings.apply_axis_conversion:
            logger.debug(f"Axis conversion disabled, leaving model '{root.name}' as imported")
            return None
        report = convert_scene(root, self.policy, self.import_tangents, show_progress=self.show_progress)
        log_report(logger, f"Model '{root.name}'", report)
        return report

    def on_postprocess_animation(self, clip: AnimationClip) -> ConversionReport | None:
        """Convert a freshly imported clip. Returns None when conversion is disabled for the asset."""
        if not self.settings.apply_axis_conversion:
            return None
        report = remap_clip(clip, self.policy)
        log_report(logger, f"Clip '{clip.name}'", report)
        return report
