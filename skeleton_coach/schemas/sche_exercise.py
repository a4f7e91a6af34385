from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from skeleton_coach.motion.core.data_types import (
    Joint, JointSample, JointType, Point3D, TrackingState,
)


class JointIn(BaseModel):
    x: float
    y: float
    z: float
    tracking_state: TrackingState = TrackingState.TRACKED


class FrameIn(BaseModel):
    """One body in one frame. Joints left out are treated as not tracked."""
    joints: Dict[JointType, JointIn] = {}

    def to_sample(self) -> JointSample:
        return JointSample({
            joint_type: Joint(joint_type, Point3D(j.x, j.y, j.z), j.tracking_state)
            for joint_type, j in self.joints.items()
        })


class SessionCreateRequest(BaseModel):
    tolerance: Optional[float] = Field(None, gt=0)
    repetition_target: Optional[int] = Field(None, ge=1)
    loop: bool = False


class ToleranceUpdateRequest(BaseModel):
    tolerance: float = Field(..., gt=0)


class GuidePointResponse(BaseModel):
    label: str
    x: float
    y: float
    z: float


class SessionResponse(BaseModel):
    session_id: str
    phase: str
    repetitions: int
    repetition_target: Optional[int] = None
    tolerance: float
    feedback: str
    guide_points: List[GuidePointResponse] = []


class StepResponse(BaseModel):
    session_id: str
    previous_phase: str
    phase: str
    evaluated: bool
    success: bool
    advanced: bool
    repetitions: int
    feedback: str
    guide_points: List[GuidePointResponse] = []


class SessionEndResponse(BaseModel):
    session_id: str
    repetitions: int
    completed: bool
    log_file: Optional[str] = None
