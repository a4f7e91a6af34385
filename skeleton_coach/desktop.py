#!/usr/bin/env python3
"""
SKELETON COACH - Desktop application

Shows the camera image with the tracked skeleton, the guide points of the
current phase and the feedback text, and guides the user through:

    arms in cross -> hands on head -> hands down  (x repetitions)

Usage:
    python -m skeleton_coach.desktop
    python -m skeleton_coach.desktop --camera 1 --tolerance 0.15 --loop

Controls:
    Tolerance trackbar: allowed deviation (0.01 - 0.50)
    R: Restart the exercise
    Q / ESC: Quit

Author: SKELETON COACH Team
Version: 1.0.0
"""

import argparse
import logging
import logging.config
from pathlib import Path
from typing import List, Optional

import cv2
import numpy as np

from skeleton_coach.core.config import settings
from skeleton_coach.motion.core.data_types import SkeletonFrame
from skeleton_coach.motion.core.exceptions import SensorStartError
from skeleton_coach.motion.core.exercise import (
    ExercisePhase, ExerciseSession, ExerciseStateMachine,
)
from skeleton_coach.motion.core.projection import CoordinateMapper
from skeleton_coach.motion.core.sensor import SensorConfig, SkeletonSensor
from skeleton_coach.motion.modules.guide_points import GuidePoint, compute_guide_points
from skeleton_coach.motion.utils.logger import LogCategory, SessionLogger
from skeleton_coach.motion.utils.visualization import render_overlay

logger = logging.getLogger(__name__)


class SkeletonCoachApp:
    """Camera loop driving one exercise session."""

    WINDOW_NAME = "SKELETON COACH"
    TRACKBAR_NAME = "Tolerance"
    TRACKBAR_SCALE = 100  # trackbar position = tolerance * 100

    def __init__(
        self,
        session: ExerciseSession,
        sensor: Optional[SkeletonSensor] = None,
        log_dir: str = "./data/logs",
        display: bool = True,
    ):
        self._session = session
        self._sensor = sensor
        self._display = display
        self._is_running = False

        self._machine = ExerciseStateMachine()
        self._machine.set_on_phase_change(self._on_phase_change)
        self._machine.set_on_repetition(self._on_repetition)
        self._logger = SessionLogger(session.session_id, log_dir)

        # Latest data from the sensor callbacks
        self._color_frame: Optional[np.ndarray] = None
        self._skeleton_frame: Optional[SkeletonFrame] = None
        self._guide_points: List[GuidePoint] = []
        self._frame_number = 0

        if sensor is not None:
            sensor.set_on_color_frame(self._on_color_frame)
            sensor.set_on_skeleton_frame(self._on_skeleton_frame)

    @property
    def session(self) -> ExerciseSession:
        return self._session

    @property
    def mapper(self) -> CoordinateMapper:
        return self._sensor.mapper if self._sensor is not None else CoordinateMapper()

    # ---- sensor callbacks ----

    def _on_color_frame(self, frame: np.ndarray) -> None:
        self._color_frame = frame

    def _on_skeleton_frame(self, skeleton_frame: SkeletonFrame) -> None:
        self._frame_number += 1
        self._skeleton_frame = skeleton_frame

        skeleton = skeleton_frame.first_tracked()
        if skeleton is None:
            self._guide_points = []
            return

        # Guide points show the targets of the phase being checked
        self._guide_points = compute_guide_points(skeleton.joints, self._session.phase)
        result = self._machine.step(self._session, skeleton.joints)
        if result.evaluated:
            self._logger.log_step(self._frame_number, result, self._session.get_tolerance())

    # ---- state machine callbacks ----

    def _on_phase_change(self, previous: ExercisePhase, current: ExercisePhase) -> None:
        if current == ExercisePhase.COMPLETE:
            self._logger.info(LogCategory.PHASE, "Exercise complete", {
                'repetitions': self._session.repetitions,
            })

    def _on_repetition(self, repetitions: int) -> None:
        logger.info(f"Repetition {repetitions} done")

    # ---- UI ----

    def _on_tolerance_change(self, position: int) -> None:
        value = max(position, 1) / self.TRACKBAR_SCALE
        self._session.set_tolerance(value)
        self._logger.info(LogCategory.SYSTEM, "Tolerance changed", {'tolerance': value})

    def _create_window(self) -> None:
        cv2.namedWindow(self.WINDOW_NAME)
        cv2.createTrackbar(
            self.TRACKBAR_NAME, self.WINDOW_NAME,
            int(round(self._session.get_tolerance() * self.TRACKBAR_SCALE)),
            int(round(settings.TOLERANCE_MAX * self.TRACKBAR_SCALE)),
            self._on_tolerance_change,
        )
        cv2.setTrackbarMin(
            self.TRACKBAR_NAME, self.WINDOW_NAME,
            int(round(settings.TOLERANCE_MIN * self.TRACKBAR_SCALE)),
        )

    def _window_closed(self) -> bool:
        return cv2.getWindowProperty(self.WINDOW_NAME, cv2.WND_PROP_VISIBLE) < 1

    def _handle_key(self, key: int) -> None:
        if key == ord('q') or key == 27:
            self._is_running = False
        elif key == ord('r'):
            self._restart()

    def _restart(self) -> None:
        self._session.reset()
        self._guide_points = []
        self._logger.info(LogCategory.SYSTEM, "Session reset")
        logger.info("Exercise restarted")

    def render(self) -> np.ndarray:
        """Compose the current display frame."""
        mapper = self.mapper
        if self._color_frame is not None:
            frame = self._color_frame
        else:
            frame = np.zeros((mapper.height, mapper.width, 3), dtype=np.uint8)
        return render_overlay(
            frame,
            self._skeleton_frame,
            mapper,
            guide_points=self._guide_points,
            feedback=self._session.feedback,
            repetitions=self._session.repetitions,
        )

    def run(self, max_frames: Optional[int] = None) -> dict:
        """
        Run the camera loop until quit, stream end or max_frames.

        Without a sensor a blank window is shown until it is closed.
        """
        self._is_running = True
        self._logger.info(LogCategory.SYSTEM, "Session started", {
            'tolerance': self._session.get_tolerance(),
            'repetition_target': self._session.repetition_target,
            'sensor': self._sensor is not None,
        })
        if self._sensor is None:
            self._logger.warning(LogCategory.SENSOR, "No sensor available")

        if self._display:
            self._create_window()

        frames = 0
        try:
            while self._is_running:
                if self._sensor is not None:
                    if not self._sensor.poll():
                        break
                    frames += 1
                elif not self._display:
                    break

                if self._display:
                    cv2.imshow(self.WINDOW_NAME, self.render())
                    key = cv2.waitKey(1 if self._sensor is not None else 30) & 0xFF
                    self._handle_key(key)
                    if self._window_closed():
                        self._is_running = False

                if max_frames is not None and frames >= max_frames:
                    break
        finally:
            self.cleanup()

        return self._session.to_dict()

    def cleanup(self) -> None:
        self._is_running = False
        if self._sensor is not None:
            self._sensor.stop()
        if self._display:
            cv2.destroyAllWindows()

        self._logger.info(LogCategory.SYSTEM, "Session ended", self._session.to_dict())
        log_file = self._logger.save_session_log()
        logger.info(f"Session log saved to {log_file}")


def open_sensor(camera: Optional[int]) -> Optional[SkeletonSensor]:
    """
    Start the requested camera, or the first connected one.

    Returns:
        A running sensor, or None when no sensor could be started.
    """
    config = SensorConfig(
        pose_model_path=settings.POSE_MODEL_PATH,
        mirror=settings.MIRROR_CAMERA,
        subject_distance=settings.SUBJECT_DISTANCE_M,
    )
    if camera is not None:
        config.camera_index = camera
        sensor = SkeletonSensor(config)
    else:
        sensor = SkeletonSensor.first_connected(config, settings.MAX_CAMERA_INDEX)
        if sensor is None:
            logger.error("No connected camera found")
            return None

    try:
        sensor.start()
    except SensorStartError as e:
        logger.error(f"Sensor could not be started: {e}")
        return None
    return sensor


def main():
    parser = argparse.ArgumentParser(description="SKELETON COACH")
    parser.add_argument("--camera", type=int, default=settings.CAMERA_INDEX)
    parser.add_argument("--tolerance", type=float, default=settings.DEFAULT_TOLERANCE)
    parser.add_argument("--repetitions", type=int, default=settings.REPETITION_TARGET)
    parser.add_argument("--loop", action="store_true", help="repeat the cycle forever")
    parser.add_argument("--headless", action="store_true")
    parser.add_argument("--max-frames", type=int, default=None)
    parser.add_argument("--log-dir", type=str, default=settings.SESSION_LOG_DIR)
    args = parser.parse_args()

    if Path(settings.LOGGING_CONFIG_FILE).is_file():
        logging.config.fileConfig(settings.LOGGING_CONFIG_FILE, disable_existing_loggers=False)
    else:
        logging.basicConfig(level=logging.INFO)

    try:
        session = ExerciseSession(
            tolerance=args.tolerance,
            repetition_target=None if args.loop else args.repetitions,
        )
    except ValueError as e:
        parser.error(str(e))

    sensor = open_sensor(args.camera)
    app = SkeletonCoachApp(
        session=session,
        sensor=sensor,
        log_dir=args.log_dir,
        display=not args.headless,
    )
    summary = app.run(max_frames=args.max_frames)
    logger.info(f"Finished: {summary['repetitions']} repetitions, phase {summary['phase']}")


if __name__ == "__main__":
    main()
