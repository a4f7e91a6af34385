import pytest

from skeleton_coach.motion.core.data_types import Joint, JointType, TrackingState
from skeleton_coach.motion.core.pose_rules import (
    LEFT_ARM_CROSS_TOLERANCE,
    hand_to_head_distances,
    is_arms_in_cross,
    is_hands_down,
    is_hands_on_head,
)

TOLERANCES = [0.01, 0.05, 0.1, 0.25, 0.5]


# =============================================
# ARMS IN CROSS
# =============================================

def test_arms_in_cross_accepts_reference_pose(arms_cross_sample):
    assert is_arms_in_cross(arms_cross_sample, 0.1)


def test_arms_in_cross_rejects_standing(standing_sample):
    assert not is_arms_in_cross(standing_sample, 0.1)


@pytest.mark.parametrize("tolerance", TOLERANCES)
def test_arms_in_cross_right_gap_half_tolerance(make_sample, tolerance):
    sample = make_sample(
        shoulder_right=(0.2, 0.0, 2.0),
        wrist_right=(0.8, tolerance / 2, 2.0),
        wrist_left=(-0.8, 0.52, 2.0),
    )
    assert is_arms_in_cross(sample, tolerance)


@pytest.mark.parametrize("tolerance", TOLERANCES)
@pytest.mark.parametrize("factor", [1.0, 1.5, 3.0])
def test_arms_in_cross_right_gap_at_or_above_tolerance(make_sample, tolerance, factor):
    sample = make_sample(
        shoulder_right=(0.2, 0.0, 2.0),
        wrist_right=(0.8, tolerance * factor, 2.0),
        wrist_left=(-0.8, 0.52, 2.0),
    )
    assert not is_arms_in_cross(sample, tolerance)


@pytest.mark.parametrize("tolerance", TOLERANCES)
def test_arms_in_cross_rejects_zero_right_gap(make_sample, tolerance):
    sample = make_sample(wrist_right=(0.8, 0.5, 2.0), wrist_left=(-0.8, 0.52, 2.0))
    assert not is_arms_in_cross(sample, tolerance)


def test_arms_in_cross_rejects_zero_left_gap(make_sample):
    sample = make_sample(wrist_right=(0.8, 0.53, 2.0), wrist_left=(-0.8, 0.5, 2.0))
    assert not is_arms_in_cross(sample, 0.1)


def test_arms_in_cross_left_side_ignores_tolerance(make_sample):
    # Left wrist 8 cm above the shoulder: outside the fixed left bound
    sample = make_sample(wrist_right=(0.8, 0.53, 2.0), wrist_left=(-0.8, 0.58, 2.0))
    assert not is_arms_in_cross(sample, 0.5)
    assert LEFT_ARM_CROSS_TOLERANCE == 0.05


def test_arms_in_cross_gap_below_shoulder_counts(make_sample):
    sample = make_sample(wrist_right=(0.8, 0.47, 2.0), wrist_left=(-0.8, 0.48, 2.0))
    assert is_arms_in_cross(sample, 0.1)


# =============================================
# HANDS ON HEAD
# =============================================

def test_hands_on_head_accepts_reference_pose(hands_on_head_sample):
    assert is_hands_on_head(hands_on_head_sample, 0.1)


def test_hands_on_head_rejects_standing(standing_sample):
    assert not is_hands_on_head(standing_sample, 0.1)


def test_hand_to_head_distances_zero_when_hand_on_head(make_sample):
    sample = make_sample(hand_left=(0.0, 0.7, 2.0))
    assert hand_to_head_distances(sample)["left"] == 0.0


def test_hand_to_head_distance_is_signed_sum(make_sample):
    sample = make_sample(hand_right=(0.1, 0.6, 2.5))
    # 0.1 + (0.6 - 0.7) + 0.5
    assert hand_to_head_distances(sample)["right"] == pytest.approx(0.5)


def test_hands_on_head_requires_right_hand(make_sample):
    sample = make_sample(hand_left=(0.0, 0.7, 2.0), hand_right=(0.5, 0.9, 2.0))
    assert not is_hands_on_head(sample, 0.1)


def test_hands_on_head_requires_left_hand(make_sample):
    sample = make_sample(hand_left=(0.25, 0.7, 2.0), hand_right=(0.0, 0.7, 2.0))
    assert not is_hands_on_head(sample, 0.5)


def test_hands_on_head_both_hands_on_head(make_sample):
    sample = make_sample(hand_left=(0.0, 0.7, 2.0), hand_right=(0.0, 0.7, 2.0))
    assert is_hands_on_head(sample, 0.1)


def test_hands_on_head_offsets_can_cancel(make_sample):
    # Axis offsets of opposite sign sum to zero
    sample = make_sample(hand_left=(0.3, 0.4, 2.0), hand_right=(-0.2, 0.9, 2.0))
    assert is_hands_on_head(sample, 0.1)


# =============================================
# HANDS DOWN
# =============================================

def test_hands_down_accepts_reference_pose(hands_down_sample):
    assert is_hands_down(hands_down_sample, 0.1)


def test_hands_down_rejects_arm_straight_below_shoulder(standing_sample):
    # Zero horizontal gap is excluded
    assert not is_hands_down(standing_sample, 0.1)


def test_hands_down_rejects_wide_elbow(make_sample):
    sample = make_sample(elbow_right=(0.4, 0.25, 2.0), wrist_right=(0.23, 0.0, 2.0))
    assert not is_hands_down(sample, 0.1)


@pytest.mark.parametrize("left_arm", [
    {},
    {"shoulder_left": (-0.5, 0.1, 1.0)},
    {"elbow_left": (-0.9, 0.9, 3.0), "wrist_left": (-1.2, 1.2, 3.0)},
    {"wrist_left": (0.2, 0.0, 2.0), "hand_left": (0.0, 0.0, 0.0)},
])
def test_hands_down_ignores_left_arm(make_sample, left_arm):
    satisfied = dict(elbow_right=(0.22, 0.25, 2.0), wrist_right=(0.23, 0.0, 2.0))
    unsatisfied = dict(elbow_right=(0.5, 0.25, 2.0), wrist_right=(0.23, 0.0, 2.0))

    assert is_hands_down(make_sample(**satisfied, **left_arm), 0.1)
    assert not is_hands_down(make_sample(**unsatisfied, **left_arm), 0.1)


def test_rules_read_positions_only(arms_cross_sample):
    wrist = arms_cross_sample[JointType.WRIST_RIGHT]
    inferred = arms_cross_sample.replace(
        Joint(wrist.joint_type, wrist.position, TrackingState.INFERRED)
    )
    assert is_arms_in_cross(inferred, 0.1)
