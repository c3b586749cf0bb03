from .errors import (
    AxisConversionError,
    BindPoseCountError,
    ChannelGroupError,
    ConversionReport,
    Diagnostic,
    DiagnosticKind,
    MissingBoneDeltaError,
    StructuralInconsistencyError,
    UserDataError,
)
from .logger import get_logger, log_report, setup_logging
from .postprocessor import AxisConversionPostprocessor, convert_scene
from .threeD import (
    FLIPPED_POLICY,
    STANDARD_POLICY,
    AnimationClip,
    AnimationCurve,
    AxisConventionPolicy,
    CurveBinding,
    DeltaMap,
    Keyframe,
    Mesh,
    MeshRenderer,
    SceneNode,
    SkinnedBinding,
    policy_for,
    remap_bind_poses,
    remap_clip,
    remap_hierarchy,
    remap_meshes,
)
from .user_data import AssetUserData, ConversionSettings

__all__ = [
    "FLIPPED_POLICY",
    "STANDARD_POLICY",
    "AnimationClip",
    "AnimationCurve",
    "AssetUserData",
    "AxisConventionPolicy",
    "AxisConversionError",
    "AxisConversionPostprocessor",
    "BindPoseCountError",
    "ChannelGroupError",
    "ConversionReport",
    "ConversionSettings",
    "CurveBinding",
    "DeltaMap",
    "Diagnostic",
    "DiagnosticKind",
    "Keyframe",
    "Mesh",
    "MeshRenderer",
    "MissingBoneDeltaError",
    "SceneNode",
    "SkinnedBinding",
    "StructuralInconsistencyError",
    "UserDataError",
    "convert_scene",
    "get_logger",
    "log_report",
    "policy_for",
    "remap_bind_poses",
    "remap_clip",
    "remap_hierarchy",
    "remap_meshes",
    "setup_logging",
]
