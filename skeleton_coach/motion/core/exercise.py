"""
Exercise State Machine Module for SKELETON COACH.

Finite State Machine (FSM) that guides the user through the three poses
of the exercise, one classification per frame:

    ┌────────────────────────────────────────────────────────┐
    │                                                        │
    │   ARMS_CROSS ──► HANDS_ON_HEAD ──► HANDS_DOWN ──┐      │
    │       ▲                                         │      │
    │       └─────────────────────────────────────────┘      │
    │                                  │                     │
    │                                  └──► COMPLETE         │
    │                      (after `repetition_target` cycles)│
    └────────────────────────────────────────────────────────┘

Only the rule of the current phase is evaluated. A failed check keeps the
phase. Leaving HANDS_DOWN counts one repetition; when the count reaches
the session's target the phase becomes COMPLETE and no further
classification happens. A session without a target loops forever.

Author: SKELETON COACH Team
Version: 1.0.0
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Optional, Tuple
import logging
import threading
import uuid

from .data_types import JointSample, SkeletonFrame
from .exceptions import InvalidToleranceError
from .pose_rules import PoseRule, is_arms_in_cross, is_hands_down, is_hands_on_head

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 0.1
DEFAULT_REPETITION_TARGET = 4


class ExercisePhase(Enum):
    """Stages of the guided exercise."""
    ARMS_CROSS = 0
    HANDS_ON_HEAD = 1
    HANDS_DOWN = 2
    COMPLETE = 4


class Outcome(Enum):
    """What happened in a frame, used to pick the feedback text."""
    PROMPT = "prompt"
    SUCCESS = "success"
    FAILURE = "failure"


POSE_RULES: Dict[ExercisePhase, PoseRule] = {
    ExercisePhase.ARMS_CROSS: is_arms_in_cross,
    ExercisePhase.HANDS_ON_HEAD: is_hands_on_head,
    ExercisePhase.HANDS_DOWN: is_hands_down,
}

NEXT_PHASE: Dict[ExercisePhase, ExercisePhase] = {
    ExercisePhase.ARMS_CROSS: ExercisePhase.HANDS_ON_HEAD,
    ExercisePhase.HANDS_ON_HEAD: ExercisePhase.HANDS_DOWN,
    ExercisePhase.HANDS_DOWN: ExercisePhase.ARMS_CROSS,
}

FEEDBACK_MESSAGES: Dict[Tuple[ExercisePhase, Outcome], str] = {
    (ExercisePhase.ARMS_CROSS, Outcome.PROMPT): "Place your arms in a cross",
    (ExercisePhase.ARMS_CROSS, Outcome.SUCCESS): "Well done. Now place your hands on your head",
    (ExercisePhase.ARMS_CROSS, Outcome.FAILURE): "Place your arms in a cross",
    (ExercisePhase.HANDS_ON_HEAD, Outcome.PROMPT): "Place your hands on your head",
    (ExercisePhase.HANDS_ON_HEAD, Outcome.SUCCESS): "Well done. Now lower your hands",
    (ExercisePhase.HANDS_ON_HEAD, Outcome.FAILURE): "Your hands are not on your head",
    (ExercisePhase.HANDS_DOWN, Outcome.PROMPT): "Lower your hands",
    (ExercisePhase.HANDS_DOWN, Outcome.SUCCESS): "Well done. Place your arms in a cross again",
    (ExercisePhase.HANDS_DOWN, Outcome.FAILURE): "Wrong. Lower your hands",
    (ExercisePhase.COMPLETE, Outcome.PROMPT): "The exercise is finished",
}


def feedback_for(phase: ExercisePhase, outcome: Outcome = Outcome.PROMPT) -> str:
    """Look up the feedback text for a phase and outcome."""
    if phase == ExercisePhase.COMPLETE:
        outcome = Outcome.PROMPT
    return FEEDBACK_MESSAGES[(phase, outcome)]


def validate_tolerance(value: float) -> float:
    value = float(value)
    # `not value > 0` also rejects NaN
    if not value > 0:
        raise InvalidToleranceError(value)
    return value


@dataclass
class ExerciseSession:
    """
    Mutable state of one guided exercise.

    The session is owned by the caller and passed into the state machine,
    so several sessions can run side by side. Tolerance may be written from
    another thread (slider, API request) while frames are processed; all
    reads and writes go through `lock`.

    Attributes:
        session_id: Unique identifier.
        tolerance: Allowed deviation for the pose rules (meters, > 0).
        repetition_target: Cycles before COMPLETE; None loops forever.
        phase: Current phase.
        repetitions: Completed cycles.
        feedback: Last feedback text shown to the user.
    """
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    tolerance: float = DEFAULT_TOLERANCE
    repetition_target: Optional[int] = DEFAULT_REPETITION_TARGET
    phase: ExercisePhase = ExercisePhase.ARMS_CROSS
    repetitions: int = 0
    feedback: str = field(default_factory=lambda: feedback_for(ExercisePhase.ARMS_CROSS))
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def __post_init__(self):
        self.tolerance = validate_tolerance(self.tolerance)
        if self.repetition_target is not None and self.repetition_target < 1:
            raise ValueError(
                f"repetition_target must be at least 1, got {self.repetition_target}"
            )

    @property
    def is_complete(self) -> bool:
        return self.phase == ExercisePhase.COMPLETE

    def set_tolerance(self, value: float) -> None:
        """
        Replace the tolerance used by the next classification.

        Raises:
            InvalidToleranceError: If value is not strictly positive.
        """
        value = validate_tolerance(value)
        with self.lock:
            self.tolerance = value

    def get_tolerance(self) -> float:
        with self.lock:
            return self.tolerance

    def reset(self) -> None:
        """Restart at ARMS_CROSS with no repetitions, keeping the tolerance."""
        with self.lock:
            self.phase = ExercisePhase.ARMS_CROSS
            self.repetitions = 0
            self.feedback = feedback_for(ExercisePhase.ARMS_CROSS)

    def to_dict(self) -> Dict:
        with self.lock:
            return {
                "session_id": self.session_id,
                "phase": self.phase.name.lower(),
                "repetitions": self.repetitions,
                "repetition_target": self.repetition_target,
                "tolerance": self.tolerance,
                "feedback": self.feedback,
            }


@dataclass(frozen=True)
class StepResult:
    """
    Outcome of feeding one frame to the state machine.

    Attributes:
        previous_phase: Phase before the frame.
        phase: Phase after the frame.
        evaluated: False when no rule ran (session already complete).
        success: True if the rule of previous_phase was satisfied.
        repetitions: Completed cycles after the frame.
        feedback: Text to display until the next frame.
    """
    previous_phase: ExercisePhase
    phase: ExercisePhase
    evaluated: bool
    success: bool
    repetitions: int
    feedback: str

    @property
    def advanced(self) -> bool:
        return self.phase != self.previous_phase


class ExerciseStateMachine:
    """
    Drives an ExerciseSession one frame at a time.

    Example:
        >>> machine = ExerciseStateMachine()
        >>> session = ExerciseSession(tolerance=0.1)
        >>> result = machine.step(session, sample)
        >>> if result.advanced:
        ...     print(result.feedback)
    """

    def __init__(self, rules: Optional[Dict[ExercisePhase, PoseRule]] = None):
        self._rules = dict(POSE_RULES if rules is None else rules)

        # Callbacks
        self._on_phase_change: Optional[Callable[[ExercisePhase, ExercisePhase], None]] = None
        self._on_repetition: Optional[Callable[[int], None]] = None

    def step(self, session: ExerciseSession, sample: JointSample) -> StepResult:
        """
        Classify one joint sample against the current phase.

        Args:
            session: Session to advance.
            sample: Joints of the body in this frame.

        Returns:
            StepResult describing the transition.
        """
        repetition_done = False
        with session.lock:
            previous = session.phase

            # COMPLETE is terminal: no rule runs
            if previous == ExercisePhase.COMPLETE:
                session.feedback = feedback_for(ExercisePhase.COMPLETE)
                return StepResult(
                    previous_phase=previous,
                    phase=previous,
                    evaluated=False,
                    success=False,
                    repetitions=session.repetitions,
                    feedback=session.feedback,
                )

            success = self._rules[previous](sample, session.tolerance)

            if success:
                new_phase = NEXT_PHASE[previous]
                if previous == ExercisePhase.HANDS_DOWN:
                    session.repetitions += 1
                    repetition_done = True
                    target = session.repetition_target
                    if target is not None and session.repetitions >= target:
                        new_phase = ExercisePhase.COMPLETE
                session.phase = new_phase
                session.feedback = feedback_for(
                    previous if new_phase != ExercisePhase.COMPLETE else new_phase,
                    Outcome.SUCCESS,
                )
            else:
                session.feedback = feedback_for(previous, Outcome.FAILURE)

            result = StepResult(
                previous_phase=previous,
                phase=session.phase,
                evaluated=True,
                success=success,
                repetitions=session.repetitions,
                feedback=session.feedback,
            )

        if result.advanced:
            logger.info(
                "Session %s: %s -> %s (repetitions=%d)",
                session.session_id, previous.name, result.phase.name, result.repetitions,
            )
            if self._on_phase_change:
                self._on_phase_change(previous, result.phase)
        if repetition_done and self._on_repetition:
            self._on_repetition(result.repetitions)

        return result

    def process_frame(
        self,
        session: ExerciseSession,
        frame: SkeletonFrame,
    ) -> Optional[StepResult]:
        """
        Step the session with the first tracked body of a skeleton frame.

        Returns:
            None when the frame holds no tracked body (nothing classified).
        """
        skeleton = frame.first_tracked()
        if skeleton is None:
            return None
        return self.step(session, skeleton.joints)

    def set_on_phase_change(
        self,
        callback: Callable[[ExercisePhase, ExercisePhase], None]
    ) -> None:
        """Set the callback fired after a phase transition."""
        self._on_phase_change = callback

    def set_on_repetition(self, callback: Callable[[int], None]) -> None:
        """Set the callback fired after each completed cycle."""
        self._on_repetition = callback
