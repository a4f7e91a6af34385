"""
Pose Rules Module for SKELETON COACH.

Pure checks deciding whether a body currently holds one of the three
poses of the guided exercise. Each rule compares coordinates of specific
joint pairs against the session tolerance:

    arms in cross  : wrists level with shoulders (y axis)
    hands on head  : hands next to the head (signed sum of x, y, z offsets)
    hands down     : right wrist and elbow below the shoulder (x axis)

Rules only read positions; the tracking tag of each joint is left to
the caller.

Author: SKELETON COACH Team
Version: 1.0.0
"""

from typing import Callable, Dict

from .data_types import JointSample, JointType
from .kinematics import axis_difference, signed_axis_sum, within_open_interval

# Fixed bound for the left wrist in the arms-in-cross check. The right side
# uses the configurable tolerance.
LEFT_ARM_CROSS_TOLERANCE = 0.05

# Fixed bound for the left hand in the hands-on-head check.
LEFT_HAND_ON_HEAD_TOLERANCE = 0.2

PoseRule = Callable[[JointSample, float], bool]


def is_arms_in_cross(sample: JointSample, tolerance: float) -> bool:
    """
    Check that both arms are stretched out sideways.

    Args:
        sample: Joints of the body.
        tolerance: Allowed height gap between right wrist and right shoulder.

    Returns:
        True iff 0 < |wrist_right.y - shoulder_right.y| < tolerance and
        0 < |wrist_left.y - shoulder_left.y| < 0.05.
    """
    right_gap = axis_difference(
        sample.position(JointType.WRIST_RIGHT),
        sample.position(JointType.SHOULDER_RIGHT),
        "y",
    )
    left_gap = axis_difference(
        sample.position(JointType.WRIST_LEFT),
        sample.position(JointType.SHOULDER_LEFT),
        "y",
    )
    return (
        within_open_interval(right_gap, tolerance)
        and within_open_interval(left_gap, LEFT_ARM_CROSS_TOLERANCE)
    )


def hand_to_head_distances(sample: JointSample) -> Dict[str, float]:
    """Signed per-axis sums from each hand to the head."""
    head = sample.position(JointType.HEAD)
    return {
        "left": signed_axis_sum(sample.position(JointType.HAND_LEFT), head),
        "right": signed_axis_sum(sample.position(JointType.HAND_RIGHT), head),
    }


def is_hands_on_head(sample: JointSample, tolerance: float) -> bool:
    """
    Check that both hands rest on the head.

    Args:
        sample: Joints of the body.
        tolerance: Bound for the right hand.

    Returns:
        True iff |distance_left| < 0.2 and |distance_right| < tolerance.
    """
    distances = hand_to_head_distances(sample)
    return (
        abs(distances["left"]) < LEFT_HAND_ON_HEAD_TOLERANCE
        and abs(distances["right"]) < tolerance
    )


def is_hands_down(sample: JointSample, tolerance: float) -> bool:
    """
    Check that the right arm hangs straight down.

    Only the right arm is compared; left arm joints are never read.

    Args:
        sample: Joints of the body.
        tolerance: Allowed horizontal gap to the right shoulder.

    Returns:
        True iff 0 < |shoulder_right.x - wrist_right.x| < tolerance and
        0 < |shoulder_right.x - elbow_right.x| < tolerance.
    """
    shoulder = sample.position(JointType.SHOULDER_RIGHT)
    wrist_gap = axis_difference(shoulder, sample.position(JointType.WRIST_RIGHT), "x")
    elbow_gap = axis_difference(shoulder, sample.position(JointType.ELBOW_RIGHT), "x")
    return (
        within_open_interval(wrist_gap, tolerance)
        and within_open_interval(elbow_gap, tolerance)
    )
