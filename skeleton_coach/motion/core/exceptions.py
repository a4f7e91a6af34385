"""
Exceptions for SKELETON COACH.
"""


class SkeletonCoachError(Exception):
    """Base class for all errors raised by the motion package."""


class SensorStartError(SkeletonCoachError, IOError):
    """The camera or the pose landmarker could not be started."""


class InvalidToleranceError(SkeletonCoachError, ValueError):
    """A tolerance value that is not strictly positive."""

    def __init__(self, value: float):
        super().__init__(f"Tolerance must be greater than 0, got {value}")
        self.value = value
