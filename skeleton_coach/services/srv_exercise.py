"""
Exercise Service for SKELETON COACH

Keeps the guided-exercise sessions of remote clients in memory and runs
their joint samples through the exercise state machine. Each session has
its own SessionLogger, saved when the session ends.
"""

import logging
import threading
from typing import Any, Dict, List, Optional

from skeleton_coach.core.config import settings
from skeleton_coach.helpers.exception_handler import CustomException
from skeleton_coach.motion.core.data_types import JointSample
from skeleton_coach.motion.core.exceptions import InvalidToleranceError
from skeleton_coach.motion.core.exercise import (
    ExercisePhase, ExerciseSession, ExerciseStateMachine, StepResult,
)
from skeleton_coach.motion.modules.guide_points import compute_guide_points
from skeleton_coach.motion.utils.logger import LogCategory, SessionLogger

logger = logging.getLogger(__name__)


def _guide_points_payload(sample: Optional[JointSample], phase: ExercisePhase) -> List[Dict[str, Any]]:
    if sample is None:
        return []
    return [
        {
            'label': point.label,
            'x': point.position.x,
            'y': point.position.y,
            'z': point.position.z,
        }
        for point in compute_guide_points(sample, phase)
    ]


class ExerciseService:
    """
    In-memory registry of exercise sessions.

    The registry is guarded by its own lock; each session guards its phase
    and tolerance with the session lock.
    """

    def __init__(self, log_dir: Optional[str] = None):
        self.log_dir = log_dir or settings.SESSION_LOG_DIR
        self.machine = ExerciseStateMachine()

        self._lock = threading.Lock()
        self._sessions: Dict[str, ExerciseSession] = {}
        self._loggers: Dict[str, SessionLogger] = {}
        self._last_samples: Dict[str, JointSample] = {}
        self._frame_counts: Dict[str, int] = {}

    @property
    def active_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _check_tolerance_bound(self, value: float) -> None:
        if value > settings.TOLERANCE_MAX:
            raise CustomException(
                http_code=400,
                code='400',
                message=f'Tolerance must not exceed {settings.TOLERANCE_MAX}, got {value}'
            )

    def create_session(
        self,
        tolerance: Optional[float] = None,
        repetition_target: Optional[int] = None,
        loop: bool = False,
    ) -> Dict[str, Any]:
        tolerance = settings.DEFAULT_TOLERANCE if tolerance is None else tolerance
        self._check_tolerance_bound(tolerance)
        if loop:
            repetition_target = None
        elif repetition_target is None:
            repetition_target = settings.REPETITION_TARGET

        try:
            session = ExerciseSession(tolerance=tolerance, repetition_target=repetition_target)
        except InvalidToleranceError as e:
            raise CustomException(http_code=400, code='400', message=str(e))

        session_logger = SessionLogger(session.session_id, self.log_dir)
        session_logger.info(LogCategory.SYSTEM, "Session started", {
            'tolerance': session.tolerance,
            'repetition_target': session.repetition_target,
        })

        with self._lock:
            self._sessions[session.session_id] = session
            self._loggers[session.session_id] = session_logger
            self._frame_counts[session.session_id] = 0

        logger.info(f"Started exercise session {session.session_id}")
        return self.get_state(session.session_id)

    def get_session(self, session_id: str) -> ExerciseSession:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise CustomException(http_code=404, code='404', message='Session not found')
        return session

    def _logger_for(self, session_id: str) -> SessionLogger:
        with self._lock:
            session_logger = self._loggers.get(session_id)
        if session_logger is None:
            raise CustomException(http_code=404, code='404', message='Session not found')
        return session_logger

    def get_state(self, session_id: str) -> Dict[str, Any]:
        session = self.get_session(session_id)
        state = session.to_dict()
        with self._lock:
            sample = self._last_samples.get(session_id)
        state['guide_points'] = _guide_points_payload(sample, session.phase)
        return state

    def set_tolerance(self, session_id: str, value: float) -> Dict[str, Any]:
        session = self.get_session(session_id)
        self._check_tolerance_bound(value)
        try:
            session.set_tolerance(value)
        except InvalidToleranceError as e:
            raise CustomException(http_code=400, code='400', message=str(e))

        self._logger_for(session_id).info(LogCategory.SYSTEM, "Tolerance changed", {'tolerance': value})
        return self.get_state(session_id)

    def process_frame(self, session_id: str, sample: JointSample) -> Dict[str, Any]:
        """Classify one joint sample and return the step result with new guide points."""
        session = self.get_session(session_id)
        result: StepResult = self.machine.step(session, sample)

        # The session may have ended while the frame was classified
        with self._lock:
            session_logger = self._loggers.get(session_id)
            if session_id not in self._sessions or session_logger is None:
                raise CustomException(http_code=404, code='404', message='Session not found')
            self._last_samples[session_id] = sample
            frame_number = self._frame_counts.get(session_id, 0) + 1
            self._frame_counts[session_id] = frame_number

        if result.evaluated:
            session_logger.log_step(frame_number, result, session.get_tolerance())

        return {
            'session_id': session_id,
            'previous_phase': result.previous_phase.name.lower(),
            'phase': result.phase.name.lower(),
            'evaluated': result.evaluated,
            'success': result.success,
            'advanced': result.advanced,
            'repetitions': result.repetitions,
            'feedback': result.feedback,
            'guide_points': _guide_points_payload(sample, result.phase),
        }

    def reset_session(self, session_id: str) -> Dict[str, Any]:
        session = self.get_session(session_id)
        session.reset()
        self._logger_for(session_id).info(LogCategory.SYSTEM, "Session reset")
        logger.info(f"Reset exercise session {session_id}")
        return self.get_state(session_id)

    def end_session(self, session_id: str) -> Dict[str, Any]:
        """Remove the session and save its log."""
        with self._lock:
            session = self._sessions.pop(session_id, None)
            session_logger = self._loggers.pop(session_id, None)
            self._last_samples.pop(session_id, None)
            self._frame_counts.pop(session_id, None)
        if session is None:
            raise CustomException(http_code=404, code='404', message='Session not found')

        session_logger.info(LogCategory.SYSTEM, "Session ended", {
            'repetitions': session.repetitions,
            'completed': session.is_complete,
        })
        try:
            log_file = str(session_logger.save_session_log())
        except OSError as e:
            logger.error(f"Failed to save log for session {session_id}: {str(e)}")
            log_file = None

        logger.info(f"Ended exercise session {session_id}")
        return {
            'session_id': session_id,
            'repetitions': session.repetitions,
            'completed': session.is_complete,
            'log_file': log_file,
        }


exercise_service = ExerciseService()


def get_exercise_service() -> ExerciseService:
    return exercise_service
