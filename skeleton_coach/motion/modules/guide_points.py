"""
Guide Points Module for SKELETON COACH.

Computes the target positions drawn on the overlay to show where the hands
and elbows should go for the current phase.

Each arm's targets are placed at the arm's own length from its shoulder:

    arms cross    : sideways from the shoulder, at shoulder height
    hands on head : hands beside the head, elbows sideways
    hands down    : straight below the shoulder

Naming follows the mirrored camera image: the "right_*" targets are built
from the left shoulder's joints and the "left_*" targets from the right
shoulder's joints.

Author: SKELETON COACH Team
Version: 1.0.0
"""

from dataclasses import dataclass
from typing import List

from ..core.data_types import JointSample, JointType, Point3D
from ..core.exercise import ExercisePhase
from ..core.kinematics import euclidean_distance

# Sideways offset of the hand targets from the head (meters)
HEAD_HAND_OFFSET = 0.3


@dataclass(frozen=True)
class GuidePoint:
    """A target position for one hand or elbow."""
    label: str
    position: Point3D


def _arm_length(sample: JointSample, joint: JointType, shoulder: JointType) -> float:
    return euclidean_distance(sample.position(joint), sample.position(shoulder))


def _sideways_targets(sample: JointSample) -> List[GuidePoint]:
    shoulder_left = sample.position(JointType.SHOULDER_LEFT)
    shoulder_right = sample.position(JointType.SHOULDER_RIGHT)
    return [
        GuidePoint("right_hand", shoulder_left.offset(
            dx=-_arm_length(sample, JointType.WRIST_LEFT, JointType.SHOULDER_LEFT))),
        GuidePoint("right_elbow", shoulder_left.offset(
            dx=-_arm_length(sample, JointType.ELBOW_LEFT, JointType.SHOULDER_LEFT))),
        GuidePoint("left_hand", shoulder_right.offset(
            dx=_arm_length(sample, JointType.WRIST_RIGHT, JointType.SHOULDER_RIGHT))),
        GuidePoint("left_elbow", shoulder_right.offset(
            dx=_arm_length(sample, JointType.ELBOW_RIGHT, JointType.SHOULDER_RIGHT))),
    ]


def arms_cross_targets(sample: JointSample) -> List[GuidePoint]:
    """Hands and elbows stretched out sideways at shoulder height."""
    return _sideways_targets(sample)


def hands_on_head_targets(sample: JointSample) -> List[GuidePoint]:
    """Hands on both sides of the head; elbows stay sideways."""
    head = sample.position(JointType.HEAD)
    right_hand, right_elbow, left_hand, left_elbow = _sideways_targets(sample)
    return [
        GuidePoint("right_hand", head.offset(dx=-HEAD_HAND_OFFSET)),
        right_elbow,
        GuidePoint("left_hand", head.offset(dx=HEAD_HAND_OFFSET)),
        left_elbow,
    ]


def hands_down_targets(sample: JointSample) -> List[GuidePoint]:
    """Hands and elbows hanging straight below the shoulders."""
    shoulder_left = sample.position(JointType.SHOULDER_LEFT)
    shoulder_right = sample.position(JointType.SHOULDER_RIGHT)
    return [
        GuidePoint("right_hand", shoulder_left.offset(
            dy=-_arm_length(sample, JointType.WRIST_LEFT, JointType.SHOULDER_LEFT))),
        GuidePoint("right_elbow", shoulder_left.offset(
            dy=-_arm_length(sample, JointType.ELBOW_LEFT, JointType.SHOULDER_LEFT))),
        GuidePoint("left_hand", shoulder_right.offset(
            dy=-_arm_length(sample, JointType.WRIST_RIGHT, JointType.SHOULDER_RIGHT))),
        GuidePoint("left_elbow", shoulder_right.offset(
            dy=-_arm_length(sample, JointType.ELBOW_RIGHT, JointType.SHOULDER_RIGHT))),
    ]


_TARGETS_BY_PHASE = {
    ExercisePhase.ARMS_CROSS: arms_cross_targets,
    ExercisePhase.HANDS_ON_HEAD: hands_on_head_targets,
    ExercisePhase.HANDS_DOWN: hands_down_targets,
}


def compute_guide_points(sample: JointSample, phase: ExercisePhase) -> List[GuidePoint]:
    """
    Compute the guide points for a phase.

    Args:
        sample: Joints of the body in this frame.
        phase: Current exercise phase.

    Returns:
        Up to four guide points; empty for COMPLETE.
    """
    targets = _TARGETS_BY_PHASE.get(phase)
    if targets is None:
        return []
    return targets(sample)
