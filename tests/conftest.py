from __future__ import annotations

import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from fbxaxis.threeD import FLIPPED_POLICY, STANDARD_POLICY, AxisConventionPolicy, SceneNode


def _quat(euler_degrees: tuple[float, float, float], order: str = "xyz") -> np.ndarray:
    return Rotation.from_euler(order, euler_degrees, degrees=True).as_quat()


@pytest.fixture(params=[STANDARD_POLICY, FLIPPED_POLICY], ids=["standard", "flipped"])
def policy(request: pytest.FixtureRequest) -> AxisConventionPolicy:
    return request.param


@pytest.fixture
def scene() -> dict[str, SceneNode]:
    """A small scene: an exported armature with two bones and a static prop with a child."""
    root = SceneNode("Scene")
    armature = root.add_child(SceneNode("Armature", local_rotation=_quat((-90, 0, 0)), local_scale=[2.0, 2.0, 2.0]))
    hip = armature.add_child(SceneNode("Hip", local_position=[0.0, 0.1, 1.0], local_rotation=_quat((10, 20, 30))))
    spine = hip.add_child(SceneNode("Spine", local_position=[0.0, 0.5, 0.2], local_rotation=_quat((-35, 5, 60))))
    prop = root.add_child(
        SceneNode("Prop", local_position=[3.0, -1.0, 0.5], local_rotation=_quat((15, -40, 75)), local_scale=[1.5] * 3)
    )
    lid = prop.add_child(
        SceneNode("Lid", local_position=[0.0, 0.0, 0.4], local_rotation=_quat((0, 0, 45)), local_scale=[1.0, 2.0, 3.0])
    )
    return {"root": root, "armature": armature, "hip": hip, "spine": spine, "prop": prop, "lid": lid}
