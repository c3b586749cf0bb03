from .animation import AnimationClip, AnimationCurve, CurveBinding, Keyframe
from .axis_conventions import FLIPPED_POLICY, STANDARD_POLICY, AxisConstants, AxisConventionPolicy, policy_for
from .bind_poses import collect_skinned_bindings, corrected_bind_poses, remap_bind_poses
from .curves import remap_clip, remap_rotation
from .hierarchy import remap_hierarchy, should_delete
from .mesh_remap import collect_meshes, remap_mesh, remap_meshes
from .scene import Bounds, DeltaMap, Mesh, MeshRenderer, SceneNode, SkinnedBinding
