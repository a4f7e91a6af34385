"""
Skeleton Mapping Module for SKELETON COACH.

Maps the 33 MediaPipe Pose landmarks onto the 20-joint skeleton used by
the rest of the application. Pixel positions are lifted into skeleton
space with CoordinateMapper, at a subject distance estimated from the
shoulder width in world and image space.

Derived joints:
    hip_center      = midpoint of the hips
    shoulder_center = midpoint of the shoulders
    spine           = mean of shoulders and hips
    head            = midpoint of the ears
    hand            = mean of index and pinky knuckles

Author: SKELETON COACH Team
Version: 1.0.0
"""

from typing import Dict, Optional, Sequence, Tuple

import numpy as np

from .data_types import (
    FrameEdges, Joint, JointSample, JointType, Skeleton,
    SkeletonTrackingState, TrackingState,
)
from .projection import CoordinateMapper

# Visibility thresholds for the joint tracking tag
TRACKED_VISIBILITY = 0.65
INFERRED_VISIBILITY = 0.3

# Bodies with fewer visible joints only report a position
MIN_VISIBLE_JOINTS = 6

MIN_SUBJECT_DEPTH = 0.5
MAX_SUBJECT_DEPTH = 8.0


class PoseLandmarkIndex:
    """
    Indices of the MediaPipe Pose landmarks used by the skeleton mapping.
    33 landmarks in total.
    """
    LEFT_EAR = 7
    RIGHT_EAR = 8

    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16
    LEFT_PINKY = 17
    RIGHT_PINKY = 18
    LEFT_INDEX = 19
    RIGHT_INDEX = 20

    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28
    LEFT_FOOT_INDEX = 31
    RIGHT_FOOT_INDEX = 32


_L = PoseLandmarkIndex

# Each joint is the mean of one or more MediaPipe landmarks
JOINT_LANDMARKS: Dict[JointType, Tuple[int, ...]] = {
    JointType.HIP_CENTER: (_L.LEFT_HIP, _L.RIGHT_HIP),
    JointType.SPINE: (_L.LEFT_SHOULDER, _L.RIGHT_SHOULDER, _L.LEFT_HIP, _L.RIGHT_HIP),
    JointType.SHOULDER_CENTER: (_L.LEFT_SHOULDER, _L.RIGHT_SHOULDER),
    JointType.HEAD: (_L.LEFT_EAR, _L.RIGHT_EAR),
    JointType.SHOULDER_LEFT: (_L.LEFT_SHOULDER,),
    JointType.ELBOW_LEFT: (_L.LEFT_ELBOW,),
    JointType.WRIST_LEFT: (_L.LEFT_WRIST,),
    JointType.HAND_LEFT: (_L.LEFT_PINKY, _L.LEFT_INDEX),
    JointType.SHOULDER_RIGHT: (_L.RIGHT_SHOULDER,),
    JointType.ELBOW_RIGHT: (_L.RIGHT_ELBOW,),
    JointType.WRIST_RIGHT: (_L.RIGHT_WRIST,),
    JointType.HAND_RIGHT: (_L.RIGHT_PINKY, _L.RIGHT_INDEX),
    JointType.HIP_LEFT: (_L.LEFT_HIP,),
    JointType.KNEE_LEFT: (_L.LEFT_KNEE,),
    JointType.ANKLE_LEFT: (_L.LEFT_ANKLE,),
    JointType.FOOT_LEFT: (_L.LEFT_FOOT_INDEX,),
    JointType.HIP_RIGHT: (_L.RIGHT_HIP,),
    JointType.KNEE_RIGHT: (_L.RIGHT_KNEE,),
    JointType.ANKLE_RIGHT: (_L.RIGHT_ANKLE,),
    JointType.FOOT_RIGHT: (_L.RIGHT_FOOT_INDEX,),
}


def tracking_state_from_visibility(visibility: Optional[float]) -> TrackingState:
    """Map a MediaPipe visibility score to the joint tracking tag."""
    if visibility is None:
        return TrackingState.TRACKED
    if visibility >= TRACKED_VISIBILITY:
        return TrackingState.TRACKED
    if visibility >= INFERRED_VISIBILITY:
        return TrackingState.INFERRED
    return TrackingState.NOT_TRACKED


_STATE_RANK = {
    TrackingState.NOT_TRACKED: 0,
    TrackingState.INFERRED: 1,
    TrackingState.TRACKED: 2,
}


def _weakest(states: Sequence[TrackingState]) -> TrackingState:
    return min(states, key=_STATE_RANK.__getitem__)


def estimate_subject_depth(
    image_landmarks: Sequence,
    world_landmarks: Optional[Sequence],
    mapper: CoordinateMapper,
    default_depth: float,
) -> float:
    """
    Estimate the camera-to-body distance from the shoulder width.

    depth = focal_length * shoulder_width_m / shoulder_width_px

    Falls back to default_depth when world landmarks are missing or the
    shoulders collapse to a point.
    """
    if not world_landmarks:
        return default_depth

    lw, rw = world_landmarks[_L.LEFT_SHOULDER], world_landmarks[_L.RIGHT_SHOULDER]
    width_m = float(np.linalg.norm(
        np.array([lw.x, lw.y, lw.z]) - np.array([rw.x, rw.y, rw.z])
    ))

    li, ri = image_landmarks[_L.LEFT_SHOULDER], image_landmarks[_L.RIGHT_SHOULDER]
    scale = np.array([mapper.width, mapper.height])
    width_px = float(np.linalg.norm((np.array([li.x, li.y]) - np.array([ri.x, ri.y])) * scale))

    if width_m < 1e-3 or width_px < 1.0:
        return default_depth

    depth = mapper.focal_length * width_m / width_px
    return float(np.clip(depth, MIN_SUBJECT_DEPTH, MAX_SUBJECT_DEPTH))


def clipped_edges_from_landmarks(image_landmarks: Sequence) -> FrameEdges:
    """Flag image edges that any mapped landmark lies beyond."""
    edges = FrameEdges.NONE
    indices = {idx for group in JOINT_LANDMARKS.values() for idx in group}
    for idx in indices:
        lm = image_landmarks[idx]
        if lm.x < 0.0:
            edges |= FrameEdges.LEFT
        elif lm.x > 1.0:
            edges |= FrameEdges.RIGHT
        if lm.y < 0.0:
            edges |= FrameEdges.TOP
        elif lm.y > 1.0:
            edges |= FrameEdges.BOTTOM
    return edges


def skeleton_from_landmarks(
    image_landmarks: Sequence,
    world_landmarks: Optional[Sequence],
    mapper: CoordinateMapper,
    default_depth: float = 2.0,
) -> Skeleton:
    """
    Map one MediaPipe pose onto the 20-joint skeleton.

    Args:
        image_landmarks: 33 normalized landmarks (x, y in [0, 1], visibility).
        world_landmarks: 33 world landmarks in meters around the hips, or None.
        mapper: Projection matching the frame the landmarks came from.
        default_depth: Subject distance used when it cannot be estimated.

    Returns:
        Skeleton in skeleton space.
    """
    depth = estimate_subject_depth(image_landmarks, world_landmarks, mapper, default_depth)

    joints: Dict[JointType, Joint] = {}
    for joint_type, indices in JOINT_LANDMARKS.items():
        image_points = [image_landmarks[i] for i in indices]
        px = float(np.mean([lm.x for lm in image_points])) * mapper.width
        py = float(np.mean([lm.y for lm in image_points])) * mapper.height

        joint_depth = depth
        if world_landmarks:
            joint_depth += float(np.mean([world_landmarks[i].z for i in indices]))

        state = _weakest([
            tracking_state_from_visibility(getattr(lm, "visibility", None))
            for lm in image_points
        ])
        joints[joint_type] = Joint(
            joint_type,
            mapper.screen_to_skeleton_point(px, py, joint_depth),
            state,
        )

    sample = JointSample(joints)
    tracking_state = SkeletonTrackingState.TRACKED
    if sample.count_visible() < MIN_VISIBLE_JOINTS:
        tracking_state = SkeletonTrackingState.POSITION_ONLY

    return Skeleton(
        tracking_state=tracking_state,
        position=sample.position(JointType.HIP_CENTER),
        joints=sample,
        clipped_edges=clipped_edges_from_landmarks(image_landmarks),
    )

