# Motion Package
# Contains skeleton tracking and exercise logic for SKELETON COACH.
# The OpenCV-based parts (core.sensor, utils) are imported on demand.

from .core import ExerciseSession, ExerciseStateMachine, ExercisePhase, JointSample
from .modules import compute_guide_points

__all__ = [
    'ExerciseSession',
    'ExerciseStateMachine',
    'ExercisePhase',
    'JointSample',
    'compute_guide_points',
]
