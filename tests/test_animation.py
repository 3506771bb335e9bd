import math

import numpy as np
import pytest

from roguevox.animation import (
    AnimatedNode,
    AnimatedTransforms,
    Animation,
    NodeKey,
    SkinnedModel,
)


def _translation(x, y, z):
    m = np.identity(4)
    m[0:3, 3] = (x, y, z)
    return m


def _node():
    return AnimatedNode(
        "root",
        [
            NodeKey(position=(0.0, 0.0, 0.0), scale=1.0, time_stamp=0.0),
            NodeKey(position=(2.0, 4.0, 6.0), scale=3.0, time_stamp=10.0),
        ],
    )


def test_ticks_per_second_default_and_explicit():
    assert Animation("a.fbx").ticks_per_second() == 25.0
    assert Animation("b.fbx", tick_rate=30.0).ticks_per_second() == 30.0


def test_add_node_tracks_mapping_and_final_time():
    anim = Animation("a.fbx")
    anim.add_node(_node())
    assert anim.node_mapping == {"root": 0}
    assert anim.final_time_stamp == 10.0


def test_resize_pads_and_truncates():
    t = AnimatedTransforms()
    t.resize(3)
    assert len(t.local) == 3 and len(t.worldspace) == 3
    assert np.allclose(t.local[0], np.identity(4))
    t.resize(1)
    assert len(t.local) == 1 and len(t.worldspace) == 1
    with pytest.raises(ValueError):
        t.resize(-1)


def test_find_animated_node_index():
    model = SkinnedModel()
    node = _node()
    assert model.find_animated_node_index(-1.0, node) == -1
    assert model.find_animated_node_index(0.0, node) == 0
    assert model.find_animated_node_index(5.0, node) == 0
    assert model.find_animated_node_index(10.0, node) == 1
    assert model.find_animated_node_index(50.0, node) == 1


def test_find_index_requires_keys():
    with pytest.raises(ValueError):
        SkinnedModel().find_animated_node_index(0.0, AnimatedNode("empty"))


def test_interpolated_position_at_keys_and_between():
    model = SkinnedModel()
    node = _node()
    assert model.interpolated_position(0.0, node) == (0.0, 0.0, 0.0)
    assert model.interpolated_position(10.0, node) == (2.0, 4.0, 6.0)
    assert model.interpolated_position(99.0, node) == (2.0, 4.0, 6.0)
    assert model.interpolated_position(-5.0, node) == (0.0, 0.0, 0.0)
    mid = model.interpolated_position(5.0, node)
    assert mid == pytest.approx((1.0, 2.0, 3.0))


def test_interpolated_scaling_is_uniform():
    model = SkinnedModel()
    node = _node()
    s = model.interpolated_scaling(5.0, node)
    assert s[0] == s[1] == s[2]
    assert 1.0 < s[0] < 3.0
    assert model.interpolated_scaling(10.0, node) == (3.0, 3.0, 3.0)


def test_interpolated_rotation_unit_and_matches_keys():
    half = math.sqrt(0.5)
    node = AnimatedNode(
        "n",
        [
            NodeKey(rotation=(1.0, 0.0, 0.0, 0.0), time_stamp=0.0),
            NodeKey(rotation=(half, 0.0, 0.0, half), time_stamp=1.0),
        ],
    )
    model = SkinnedModel()
    assert model.interpolated_rotation(0.0, node) == pytest.approx((1.0, 0.0, 0.0, 0.0))
    assert model.interpolated_rotation(1.0, node) == pytest.approx((half, 0.0, 0.0, half))
    q = model.interpolated_rotation(0.5, node)
    assert sum(c * c for c in q) == pytest.approx(1.0)
    assert q[1] == pytest.approx(0.0) and q[2] == pytest.approx(0.0)
    assert q[3] == pytest.approx(math.sin(math.pi / 8))


def test_find_animated_node():
    anim = Animation("a.fbx")
    node = _node()
    anim.add_node(node)
    model = SkinnedModel()
    assert model.find_animated_node(anim, "root") is node
    assert model.find_animated_node(anim, "missing") is None


def test_add_bone_reuses_index_and_add_joint_checks_parent():
    model = SkinnedModel()
    assert model.add_bone("hip") == 0
    assert model.add_bone("spine") == 1
    assert model.add_bone("hip") == 0
    assert model.num_bones == 2
    with pytest.raises(IndexError):
        model.add_joint("orphan", 4)


def test_bind_pose_composes_parent_transforms():
    model = SkinnedModel()
    root_t = _translation(1, 0, 0)
    child_t = _translation(0, 2, 0)
    model.add_joint("root", -1, root_t)
    model.add_joint("child", 0, child_t)
    model.add_bone("root")
    model.add_bone("child")
    transforms, debug = model.update_bone_transforms_from_bind_pose()
    assert len(transforms) == 2
    assert np.allclose(transforms[0], root_t)
    assert np.allclose(transforms[1], root_t @ child_t)
    assert np.allclose(debug[1], root_t @ child_t)


def test_bone_offset_applied_after_global_transform():
    model = SkinnedModel()
    root_t = _translation(1, 0, 0)
    offset = _translation(-1, 0, 0)
    model.add_joint("root", -1, root_t)
    model.add_bone("root", offset)
    transforms, debug = model.update_bone_transforms_from_bind_pose()
    assert np.allclose(transforms[0], np.identity(4))
    assert np.allclose(debug[0], root_t)


def _animated_model():
    model = SkinnedModel()
    model.add_joint("root", -1, _translation(7, 7, 7))
    model.add_bone("root")
    anim = Animation("walk.fbx", duration=10.0, tick_rate=1.0)
    anim.add_node(
        AnimatedNode(
            "root",
            [
                NodeKey(position=(0.0, 0.0, 0.0), time_stamp=0.0),
                NodeKey(position=(10.0, 0.0, 0.0), time_stamp=10.0),
            ],
        )
    )
    model.animations.append(anim)
    return model, anim


def test_animation_drives_bone_translation():
    model, anim = _animated_model()
    result = model.update_bone_transforms_from_animation(5.0, anim)
    assert len(result.local) == 1
    assert np.allclose(result.local[0][0:3, 3], (5.0, 0.0, 0.0))
    assert np.allclose(result.local[0][0:3, 0:3], np.identity(3))


def test_animation_time_clamps_to_duration():
    model, anim = _animated_model()
    result = model.update_bone_transforms_from_animation(100.0, anim)
    assert np.allclose(result.worldspace[0][0:3, 3], (10.0, 0.0, 0.0))


def test_no_registered_animations_uses_bind_pose():
    model, anim = _animated_model()
    model.animations.clear()
    result = model.update_bone_transforms_from_animation(5.0, anim)
    assert np.allclose(result.local[0], _translation(7, 7, 7))