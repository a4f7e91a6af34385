"""
Core Module for SKELETON COACH.

Contains the skeleton data model, pose rules and the exercise state machine.
The camera sensor lives in `core.sensor` and is imported on demand, since it
needs OpenCV and MediaPipe.
"""

from .data_types import (
    JointType, TrackingState, SkeletonTrackingState, FrameEdges,
    Point3D, Joint, JointSample, Skeleton, SkeletonFrame, BONES,
)
from .exceptions import SkeletonCoachError, SensorStartError, InvalidToleranceError
from .kinematics import euclidean_distance, axis_difference, signed_axis_sum
from .pose_rules import (
    is_arms_in_cross, is_hands_on_head, is_hands_down, hand_to_head_distances,
)
from .exercise import (
    ExercisePhase, Outcome, ExerciseSession, ExerciseStateMachine, StepResult,
    feedback_for,
)
from .projection import CoordinateMapper
from .skeleton_mapping import skeleton_from_landmarks

__all__ = [
    # Data types
    'JointType', 'TrackingState', 'SkeletonTrackingState', 'FrameEdges',
    'Point3D', 'Joint', 'JointSample', 'Skeleton', 'SkeletonFrame', 'BONES',

    # Exceptions
    'SkeletonCoachError', 'SensorStartError', 'InvalidToleranceError',

    # Kinematics
    'euclidean_distance', 'axis_difference', 'signed_axis_sum',

    # Pose rules
    'is_arms_in_cross', 'is_hands_on_head', 'is_hands_down', 'hand_to_head_distances',

    # Exercise
    'ExercisePhase', 'Outcome', 'ExerciseSession', 'ExerciseStateMachine', 'StepResult',
    'feedback_for',

    # Sensor mapping
    'CoordinateMapper', 'skeleton_from_landmarks',
]
