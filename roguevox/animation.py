"""Keyframed skeletal animation: node keys, joints, bones and pose evaluation."""
from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

Vec3 = tuple[float, float, float]
Quat = tuple[float, float, float, float]  # (w, x, y, z)

DEFAULT_TICKS_PER_SECOND = 25.0
_IDENTITY_QUAT: Quat = (1.0, 0.0, 0.0, 0.0)


def _identity() -> np.ndarray:
    return np.identity(4, dtype=np.float64)


def _zeros() -> np.ndarray:
    return np.zeros((4, 4), dtype=np.float64)


def _normalize_quat(q) -> Quat:
    w, x, y, z = (float(c) for c in q)
    length = math.sqrt(w * w + x * x + y * y + z * z)
    if length == 0:
        return _IDENTITY_QUAT
    return (w / length, x / length, y / length, z / length)


def _slerp(start: Quat, end: Quat, factor: float) -> Quat:
    """Spherical interpolation along the shorter arc."""
    s = np.asarray(start, dtype=np.float64)
    e = np.asarray(end, dtype=np.float64)
    cos_theta = float(np.dot(s, e))
    if cos_theta < 0.0:
        e = -e
        cos_theta = -cos_theta
    if cos_theta > 0.9999:
        result = s + factor * (e - s)
    else:
        theta = math.acos(min(cos_theta, 1.0))
        sin_theta = math.sin(theta)
        result = (
            math.sin((1.0 - factor) * theta) / sin_theta * s
            + math.sin(factor * theta) / sin_theta * e
        )
    return tuple(float(c) for c in result)


def _rotation_matrix(q: Quat) -> np.ndarray:
    w, x, y, z = q
    m = _identity()
    m[0, 0] = 1 - 2 * (y * y + z * z)
    m[0, 1] = 2 * (x * y - w * z)
    m[0, 2] = 2 * (x * z + w * y)
    m[1, 0] = 2 * (x * y + w * z)
    m[1, 1] = 1 - 2 * (x * x + z * z)
    m[1, 2] = 2 * (y * z - w * x)
    m[2, 0] = 2 * (x * z - w * y)
    m[2, 1] = 2 * (y * z + w * x)
    m[2, 2] = 1 - 2 * (x * x + y * y)
    return m


def _translation_matrix(t: Vec3) -> np.ndarray:
    m = _identity()
    m[0:3, 3] = t
    return m


def _scale_matrix(s: Vec3) -> np.ndarray:
    m = _identity()
    m[0, 0], m[1, 1], m[2, 2] = s
    return m


@dataclass
class NodeKey:
    """One keyframe of a node: rotation, position and uniform scale at a time."""

    rotation: Quat = _IDENTITY_QUAT
    position: Vec3 = (0.0, 0.0, 0.0)
    scale: float = 1.0
    time_stamp: float = -1.0


@dataclass
class AnimatedNode:
    """The keyframes of one named node."""

    name: str
    keys: list[NodeKey] = field(default_factory=list)


@dataclass
class Animation:
    """A clip of animated nodes with its duration in ticks."""

    filename: str
    duration: float = 0.0
    tick_rate: float = 0.0
    final_time_stamp: float = 0.0
    animated_nodes: list[AnimatedNode] = field(default_factory=list)
    node_mapping: dict[str, int] = field(default_factory=dict)

    def ticks_per_second(self) -> float:
        """The clip's tick rate, or 25 when none is set."""
        return self.tick_rate if self.tick_rate != 0 else DEFAULT_TICKS_PER_SECOND

    def add_node(self, node: AnimatedNode) -> None:
        """Append a node, track its index and extend the final time stamp."""
        self.node_mapping[node.name] = len(self.animated_nodes)
        self.animated_nodes.append(node)
        for key in node.keys:
            self.final_time_stamp = max(self.final_time_stamp, key.time_stamp)


@dataclass
class Joint:
    """A skeleton node with its parent and bind transform."""

    name: str
    parent_index: int
    inverse_bind_transform: np.ndarray = field(default_factory=_identity)
    current_final_transform: np.ndarray = field(default_factory=_identity)


@dataclass
class BoneInfo:
    """A skinning bone: its offset matrix and last computed transforms."""

    name: str = ""
    offset: np.ndarray = field(default_factory=_zeros)
    final_transformation: np.ndarray = field(default_factory=_zeros)
    model_space_animated_transform: np.ndarray = field(default_factory=_identity)
    debug_bind_pose: np.ndarray = field(default_factory=_identity)


@dataclass
class AnimatedTransforms:
    """Per-bone skinning matrices and their model-space counterparts."""

    local: list[np.ndarray] = field(default_factory=list)
    worldspace: list[np.ndarray] = field(default_factory=list)

    def resize(self, size: int) -> None:
        """Truncate or pad both lists with identity matrices to size entries."""
        if size < 0:
            raise ValueError("size must not be negative")
        for matrices in (self.local, self.worldspace):
            del matrices[size:]
            matrices.extend(_identity() for _ in range(size - len(matrices)))


class SkinnedModel:
    """A skeleton of joints, skinning bones and the animations that drive them."""

    def __init__(self, filename: str = "") -> None:
        self.filename = filename
        self.joints: list[Joint] = []
        self.animations: list[Animation] = []
        self.bone_mapping: dict[str, int] = {}
        self.bone_info: list[BoneInfo] = []
        self.global_inverse_transform = _identity()

    @property
    def num_bones(self) -> int:
        return len(self.bone_info)

    def add_joint(self, name: str, parent_index: int, transform=None) -> int:
        """Append a joint whose parent comes earlier; return its index."""
        if parent_index != -1 and not 0 <= parent_index < len(self.joints):
            raise IndexError(f"parent index {parent_index} does not name an earlier joint")
        matrix = _identity() if transform is None else np.array(transform, dtype=np.float64)
        if matrix.shape != (4, 4):
            raise ValueError("joint transform must be a 4x4 matrix")
        self.joints.append(Joint(name, parent_index, matrix))
        return len(self.joints) - 1

    def add_bone(self, name: str, offset=None) -> int:
        """Register a bone by name, reusing the existing index if already known."""
        if name in self.bone_mapping:
            return self.bone_mapping[name]
        matrix = _identity() if offset is None else np.array(offset, dtype=np.float64)
        if matrix.shape != (4, 4):
            raise ValueError("bone offset must be a 4x4 matrix")
        index = len(self.bone_info)
        self.bone_info.append(BoneInfo(name=name, offset=matrix))
        self.bone_mapping[name] = index
        return index

    def find_animated_node_index(self, animation_time: float, node: AnimatedNode) -> int:
        """Index of the key at or before the time; -1 before the first key."""
        if not node.keys:
            raise ValueError(f"node {node.name!r} has no keys")
        if animation_time < node.keys[0].time_stamp:
            return -1
        for i, key in enumerate(node.keys[1:], start=1):
            if animation_time < key.time_stamp:
                return i - 1
        return len(node.keys) - 1

    def _segment(self, animation_time: float, node: AnimatedNode):
        index = self.find_animated_node_index(animation_time, node)
        next_index = index + 1
        if next_index == len(node.keys):
            return node.keys[index], None, 0.0
        if index == -1 or len(node.keys) == 1:
            return node.keys[0], None, 0.0
        start, end = node.keys[index], node.keys[next_index]
        factor = (animation_time - start.time_stamp) / (end.time_stamp - start.time_stamp)
        return start, end, factor

    def interpolated_position(self, animation_time: float, node: AnimatedNode) -> Vec3:
        start, end, factor = self._segment(animation_time, node)
        if end is None:
            return tuple(float(c) for c in start.position)
        return tuple(
            float(a + factor * (b - a)) for a, b in zip(start.position, end.position)
        )

    def interpolated_rotation(self, animation_time: float, node: AnimatedNode) -> Quat:
        start, end, factor = self._segment(animation_time, node)
        if end is None:
            return tuple(float(c) for c in start.rotation)
        return _normalize_quat(_slerp(start.rotation, end.rotation, factor))

    def interpolated_scaling(self, animation_time: float, node: AnimatedNode) -> Vec3:
        start, end, factor = self._segment(animation_time, node)
        if end is None:
            s = float(start.scale)
        else:
            s = float(start.scale + factor * (end.scale - start.scale))
        return (s, s, s)

    def find_animated_node(self, animation: Animation, node_name: str) -> AnimatedNode | None:
        for node in animation.animated_nodes:
            if node.name == node_name:
                return node
        return None

    def _walk(self, node_transform) -> None:
        for i, joint in enumerate(self.joints):
            local = node_transform(joint)
            parent = (
                _identity()
                if joint.parent_index == -1
                else self.joints[joint.parent_index].current_final_transform
            )
            global_transform = parent @ local
            joint.current_final_transform = global_transform
            bone_index = self.bone_mapping.get(joint.name)
            if bone_index is not None:
                bone = self.bone_info[bone_index]
                bone.final_transformation = global_transform @ bone.offset
                bone.model_space_animated_transform = global_transform

    def update_bone_transforms_from_bind_pose(self) -> tuple[list[np.ndarray], list[np.ndarray]]:
        """Pose the skeleton in its bind pose; return skinning and model-space matrices.

        Both lists have one entry per joint; the first entries hold the bones.
        """
        self._walk(lambda joint: joint.inverse_bind_transform)
        transforms = [_identity() for _ in self.joints]
        debug = [_identity() for _ in self.joints]
        for i, bone in enumerate(self.bone_info[: len(self.joints)]):
            transforms[i] = bone.final_transformation.copy()
            debug[i] = bone.model_space_animated_transform.copy()
        return transforms, debug

    def update_bone_transforms_from_animation(
        self, anim_time: float, animation: Animation
    ) -> AnimatedTransforms:
        """Pose the skeleton at anim_time seconds into the animation."""
        animated = bool(self.animations)
        animation_time = 0.0
        if animated:
            time_in_ticks = anim_time * animation.ticks_per_second()
            animation_time = min(time_in_ticks, animation.duration)

        def node_transform(joint: Joint) -> np.ndarray:
            if animated:
                node = self.find_animated_node(animation, joint.name)
                if node is not None:
                    scaling = self.interpolated_scaling(animation_time, node)
                    rotation = self.interpolated_rotation(animation_time, node)
                    translation = self.interpolated_position(animation_time, node)
                    return (
                        _translation_matrix(translation)
                        @ _rotation_matrix(rotation)
                        @ _scale_matrix(scaling)
                    )
            return joint.inverse_bind_transform

        self._walk(node_transform)
        result = AnimatedTransforms()
        result.resize(self.num_bones)
        for i, bone in enumerate(self.bone_info):
            result.local[i] = bone.final_transformation.copy()
            result.worldspace[i] = bone.model_space_animated_transform.copy()
        return result