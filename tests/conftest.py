from typing import Callable, Dict, Tuple

import pytest

from skeleton_coach.motion.core.data_types import JointSample, JointType

Position = Tuple[float, float, float]

# Standing body, arms hanging straight down, two meters from the camera.
# Satisfies none of the three poses.
STANDING: Dict[JointType, Position] = {
    JointType.HIP_CENTER: (0.0, 0.0, 2.0),
    JointType.SPINE: (0.0, 0.3, 2.0),
    JointType.SHOULDER_CENTER: (0.0, 0.5, 2.0),
    JointType.HEAD: (0.0, 0.7, 2.0),
    JointType.SHOULDER_LEFT: (-0.2, 0.5, 2.0),
    JointType.ELBOW_LEFT: (-0.2, 0.25, 2.0),
    JointType.WRIST_LEFT: (-0.2, 0.0, 2.0),
    JointType.HAND_LEFT: (-0.2, -0.05, 2.0),
    JointType.SHOULDER_RIGHT: (0.2, 0.5, 2.0),
    JointType.ELBOW_RIGHT: (0.2, 0.25, 2.0),
    JointType.WRIST_RIGHT: (0.2, 0.0, 2.0),
    JointType.HAND_RIGHT: (0.2, -0.05, 2.0),
    JointType.HIP_LEFT: (-0.1, 0.0, 2.0),
    JointType.KNEE_LEFT: (-0.1, -0.45, 2.0),
    JointType.ANKLE_LEFT: (-0.1, -0.9, 2.0),
    JointType.FOOT_LEFT: (-0.1, -0.95, 1.9),
    JointType.HIP_RIGHT: (0.1, 0.0, 2.0),
    JointType.KNEE_RIGHT: (0.1, -0.45, 2.0),
    JointType.ANKLE_RIGHT: (0.1, -0.9, 2.0),
    JointType.FOOT_RIGHT: (0.1, -0.95, 1.9),
}

# Wrists stretched out sideways, 3 cm (right) and 2 cm (left) above the shoulders
ARMS_CROSS = {
    JointType.ELBOW_LEFT: (-0.5, 0.51, 2.0),
    JointType.WRIST_LEFT: (-0.8, 0.52, 2.0),
    JointType.HAND_LEFT: (-0.85, 0.52, 2.0),
    JointType.ELBOW_RIGHT: (0.5, 0.52, 2.0),
    JointType.WRIST_RIGHT: (0.8, 0.53, 2.0),
    JointType.HAND_RIGHT: (0.85, 0.53, 2.0),
}

# Hands resting on top of the head
HANDS_ON_HEAD = {
    JointType.ELBOW_LEFT: (-0.4, 0.7, 2.0),
    JointType.WRIST_LEFT: (-0.1, 0.75, 2.0),
    JointType.HAND_LEFT: (-0.05, 0.75, 2.0),
    JointType.ELBOW_RIGHT: (0.4, 0.7, 2.0),
    JointType.WRIST_RIGHT: (0.1, 0.72, 2.0),
    JointType.HAND_RIGHT: (0.05, 0.72, 2.0),
}

# Right arm hanging down, slightly away from the shoulder line
HANDS_DOWN = {
    JointType.ELBOW_RIGHT: (0.22, 0.25, 2.0),
    JointType.WRIST_RIGHT: (0.23, 0.0, 2.0),
    JointType.HAND_RIGHT: (0.23, -0.05, 2.0),
}


def build_sample(**overrides: Position) -> JointSample:
    positions = dict(STANDING)
    for name, xyz in overrides.items():
        positions[JointType(name)] = xyz
    return JointSample.from_positions(positions)


def pose_sample(*poses: Dict[JointType, Position]) -> JointSample:
    positions = dict(STANDING)
    for pose in poses:
        positions.update(pose)
    return JointSample.from_positions(positions)


@pytest.fixture
def make_sample() -> Callable[..., JointSample]:
    """Standing body with selected joints moved, e.g. make_sample(wrist_right=(0.8, 0.5, 2.0))."""
    return build_sample


@pytest.fixture
def standing_sample() -> JointSample:
    return pose_sample()


@pytest.fixture
def arms_cross_sample() -> JointSample:
    return pose_sample(ARMS_CROSS)


@pytest.fixture
def hands_on_head_sample() -> JointSample:
    return pose_sample(HANDS_ON_HEAD)


@pytest.fixture
def hands_down_sample() -> JointSample:
    return pose_sample(HANDS_DOWN)


@pytest.fixture
def cycle_samples(arms_cross_sample, hands_on_head_sample, hands_down_sample):
    """One full exercise cycle, in phase order."""
    return [arms_cross_sample, hands_on_head_sample, hands_down_sample]


@pytest.fixture
def joints_payload() -> Callable[[JointSample], Dict]:
    """Serialize a sample into the JSON body accepted by the frames endpoint."""
    def _payload(sample: JointSample) -> Dict:
        return {
            "joints": {
                joint.joint_type.value: {
                    "x": joint.position.x,
                    "y": joint.position.y,
                    "z": joint.position.z,
                    "tracking_state": joint.tracking_state.value,
                }
                for joint in sample
            }
        }
    return _payload
