"""
Data Types Module for SKELETON COACH.

Data classes and type definitions shared by the sensor, the pose rules,
the exercise state machine and the overlay renderer.

Coordinates are in skeleton space: meters, camera-centered,
x to the right, y up, z away from the camera.

Author: SKELETON COACH Team
Version: 1.0.0
"""

from dataclasses import dataclass, field
from enum import Enum, Flag, auto
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Tuple

import numpy as np


class JointType(Enum):
    """The 20 body parts of a tracked skeleton."""
    HIP_CENTER = "hip_center"
    SPINE = "spine"
    SHOULDER_CENTER = "shoulder_center"
    HEAD = "head"
    SHOULDER_LEFT = "shoulder_left"
    ELBOW_LEFT = "elbow_left"
    WRIST_LEFT = "wrist_left"
    HAND_LEFT = "hand_left"
    SHOULDER_RIGHT = "shoulder_right"
    ELBOW_RIGHT = "elbow_right"
    WRIST_RIGHT = "wrist_right"
    HAND_RIGHT = "hand_right"
    HIP_LEFT = "hip_left"
    KNEE_LEFT = "knee_left"
    ANKLE_LEFT = "ankle_left"
    FOOT_LEFT = "foot_left"
    HIP_RIGHT = "hip_right"
    KNEE_RIGHT = "knee_right"
    ANKLE_RIGHT = "ankle_right"
    FOOT_RIGHT = "foot_right"


class TrackingState(Enum):
    """Confidence tag of a single joint."""
    TRACKED = "tracked"
    INFERRED = "inferred"
    NOT_TRACKED = "not_tracked"


class SkeletonTrackingState(Enum):
    """Confidence tag of a whole body."""
    TRACKED = "tracked"
    POSITION_ONLY = "position_only"
    NOT_TRACKED = "not_tracked"


class FrameEdges(Flag):
    """Image edges a body is clipped by."""
    NONE = 0
    BOTTOM = auto()
    TOP = auto()
    LEFT = auto()
    RIGHT = auto()


@dataclass(frozen=True)
class Point3D:
    """
    A point in skeleton space.

    Attributes:
        x: Meters to the right of the camera axis.
        y: Meters above the camera axis.
        z: Meters in front of the camera.
    """
    x: float
    y: float
    z: float

    def to_array(self) -> np.ndarray:
        """Convert to numpy array [x, y, z]."""
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def offset(self, dx: float = 0.0, dy: float = 0.0, dz: float = 0.0) -> "Point3D":
        return Point3D(self.x + dx, self.y + dy, self.z + dz)


ORIGIN = Point3D(0.0, 0.0, 0.0)


@dataclass(frozen=True)
class Joint:
    """A body part with its position and tracking confidence."""
    joint_type: JointType
    position: Point3D
    tracking_state: TrackingState = TrackingState.TRACKED

    @property
    def is_tracked(self) -> bool:
        return self.tracking_state == TrackingState.TRACKED

    @property
    def is_visible(self) -> bool:
        """True when the joint is tracked or inferred."""
        return self.tracking_state != TrackingState.NOT_TRACKED


class JointSample:
    """
    Immutable set of joints for one body in one frame.

    Every JointType is always present. Joints that were not supplied are
    filled in at the origin with TrackingState.NOT_TRACKED, so callers
    read the tracking tag instead of checking for None.

    Example:
        >>> sample = JointSample.from_positions({JointType.HEAD: (0.0, 0.6, 2.0)})
        >>> sample[JointType.HEAD].position.y
        0.6
        >>> sample[JointType.HAND_LEFT].tracking_state
        <TrackingState.NOT_TRACKED: 'not_tracked'>
    """

    __slots__ = ("_joints",)

    def __init__(self, joints: Mapping[JointType, Joint]):
        filled: Dict[JointType, Joint] = {}
        for joint_type in JointType:
            joint = joints.get(joint_type)
            if joint is None:
                joint = Joint(joint_type, ORIGIN, TrackingState.NOT_TRACKED)
            filled[joint_type] = joint
        self._joints = MappingProxyType(filled)

    @classmethod
    def from_positions(
        cls,
        positions: Mapping[JointType, Tuple[float, float, float]],
        tracking_state: TrackingState = TrackingState.TRACKED,
    ) -> "JointSample":
        """Build a sample from raw (x, y, z) tuples sharing one tracking tag."""
        return cls({
            joint_type: Joint(joint_type, Point3D(*map(float, xyz)), tracking_state)
            for joint_type, xyz in positions.items()
        })

    def __getitem__(self, joint_type: JointType) -> Joint:
        return self._joints[joint_type]

    def __iter__(self) -> Iterator[Joint]:
        return iter(self._joints.values())

    def __len__(self) -> int:
        return len(self._joints)

    def position(self, joint_type: JointType) -> Point3D:
        return self._joints[joint_type].position

    def replace(self, *joints: Joint) -> "JointSample":
        """Return a copy with the given joints swapped in."""
        updated = dict(self._joints)
        for joint in joints:
            updated[joint.joint_type] = joint
        return JointSample(updated)

    def count_visible(self) -> int:
        return sum(1 for joint in self if joint.is_visible)


@dataclass(frozen=True)
class Skeleton:
    """
    One body record delivered by the sensor.

    Attributes:
        tracking_state: Whether the full skeleton or only a position is known.
        position: Body center (hip center) in skeleton space.
        joints: Joint positions for this body.
        clipped_edges: Image edges the body extends past.
    """
    tracking_state: SkeletonTrackingState
    position: Point3D
    joints: JointSample
    clipped_edges: FrameEdges = FrameEdges.NONE


@dataclass(frozen=True)
class SkeletonFrame:
    """All bodies detected in one camera frame."""
    timestamp_ms: int = 0
    skeletons: Tuple[Skeleton, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.skeletons)

    def first_tracked(self) -> Optional[Skeleton]:
        """Return the first fully tracked body, None if there is none."""
        for skeleton in self.skeletons:
            if skeleton.tracking_state == SkeletonTrackingState.TRACKED:
                return skeleton
        return None


# Bone definitions for rendering (joint pairs)
BONES: Tuple[Tuple[JointType, JointType], ...] = (
    # Torso
    (JointType.HEAD, JointType.SHOULDER_CENTER),
    (JointType.SHOULDER_CENTER, JointType.SHOULDER_LEFT),
    (JointType.SHOULDER_CENTER, JointType.SHOULDER_RIGHT),
    (JointType.SHOULDER_CENTER, JointType.SPINE),
    (JointType.SPINE, JointType.HIP_CENTER),
    (JointType.HIP_CENTER, JointType.HIP_LEFT),
    (JointType.HIP_CENTER, JointType.HIP_RIGHT),
    # Left arm
    (JointType.SHOULDER_LEFT, JointType.ELBOW_LEFT),
    (JointType.ELBOW_LEFT, JointType.WRIST_LEFT),
    (JointType.WRIST_LEFT, JointType.HAND_LEFT),
    # Right arm
    (JointType.SHOULDER_RIGHT, JointType.ELBOW_RIGHT),
    (JointType.ELBOW_RIGHT, JointType.WRIST_RIGHT),
    (JointType.WRIST_RIGHT, JointType.HAND_RIGHT),
    # Left leg
    (JointType.HIP_LEFT, JointType.KNEE_LEFT),
    (JointType.KNEE_LEFT, JointType.ANKLE_LEFT),
    (JointType.ANKLE_LEFT, JointType.FOOT_LEFT),
    # Right leg
    (JointType.HIP_RIGHT, JointType.KNEE_RIGHT),
    (JointType.KNEE_RIGHT, JointType.ANKLE_RIGHT),
    (JointType.ANKLE_RIGHT, JointType.FOOT_RIGHT),
)
