"""
Skeleton Sensor Module for SKELETON COACH.

Turns a webcam into a skeleton-tracking sensor: frames are read with
OpenCV, run through the MediaPipe Tasks PoseLandmarker, and mapped onto
the 20-joint skeleton by skeleton_from_landmarks().

Author: SKELETON COACH Team
Version: 1.0.0
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional
import logging

import numpy as np

try:
    import cv2
    import mediapipe as mp
    from mediapipe.tasks import python as mp_tasks
    from mediapipe.tasks.python import vision as mp_vision
except ImportError as e:
    raise ImportError(
        "OpenCV/MediaPipe not found. Install with: pip install opencv-python mediapipe"
    ) from e

from .data_types import SkeletonFrame
from .exceptions import SensorStartError
from .projection import CoordinateMapper
from .skeleton_mapping import skeleton_from_landmarks

logger = logging.getLogger(__name__)

POSE_MODEL_URL = (
    "https://storage.googleapis.com/mediapipe-models/pose_landmarker/"
    "pose_landmarker_lite/float16/latest/pose_landmarker_lite.task"
)


def discover_cameras(max_index: int = 4) -> List[int]:
    """
    Look through camera indices and return the ones that open.

    Args:
        max_index: Highest index to try (inclusive).
    """
    connected = []
    for index in range(max_index + 1):
        cap = cv2.VideoCapture(index)
        try:
            if cap.isOpened():
                connected.append(index)
        finally:
            cap.release()
    logger.debug("Connected cameras: %s", connected)
    return connected


@dataclass
class SensorConfig:
    """
    Configuration for SkeletonSensor.

    Attributes:
        camera_index: OpenCV camera index.
        pose_model_path: Path to pose_landmarker*.task.
        mirror: Flip frames horizontally before detection.
        subject_distance: Fallback camera-to-body distance (meters).
        min_pose_detection_confidence: Pose detection threshold.
        min_pose_tracking_confidence: Pose tracking threshold.
        num_poses: Maximum number of bodies.
        fps: Frame rate used for timestamps when the camera reports none.
    """
    camera_index: int = 0
    pose_model_path: Optional[str] = "models/pose_landmarker_lite.task"
    mirror: bool = True
    subject_distance: float = 2.0
    min_pose_detection_confidence: float = 0.5
    min_pose_tracking_confidence: float = 0.5
    num_poses: int = 1
    fps: float = 30.0


ColorFrameCallback = Callable[[np.ndarray], None]
SkeletonFrameCallback = Callable[[SkeletonFrame], None]


class SkeletonSensor:
    """
    Webcam + MediaPipe skeleton sensor with frame-ready callbacks.

    Example:
        >>> sensor = SkeletonSensor(SensorConfig(camera_index=0))
        >>> sensor.set_on_skeleton_frame(lambda frame: print(len(frame)))
        >>> with sensor:
        ...     while sensor.poll():
        ...         pass
    """

    def __init__(self, config: Optional[SensorConfig] = None):
        self._config = config or SensorConfig()
        self._capture = None
        self._landmarker: Optional[mp_vision.PoseLandmarker] = None
        self._mapper = CoordinateMapper()
        self._frame_count = 0
        self._fps = self._config.fps

        # Callbacks
        self._on_color_frame: Optional[ColorFrameCallback] = None
        self._on_skeleton_frame: Optional[SkeletonFrameCallback] = None

    @classmethod
    def first_connected(
        cls,
        config: Optional[SensorConfig] = None,
        max_index: int = 4,
    ) -> Optional["SkeletonSensor"]:
        """Build a sensor on the first camera that opens, None if there is none."""
        config = config or SensorConfig()
        cameras = discover_cameras(max_index)
        if not cameras:
            return None
        config.camera_index = cameras[0]
        return cls(config)

    @property
    def config(self) -> SensorConfig:
        return self._config

    @property
    def mapper(self) -> CoordinateMapper:
        """Projection matching the size of the last frame read."""
        return self._mapper

    @property
    def is_running(self) -> bool:
        return self._capture is not None

    def set_on_color_frame(self, callback: ColorFrameCallback) -> None:
        """Set the callback receiving every BGR color frame."""
        self._on_color_frame = callback

    def set_on_skeleton_frame(self, callback: SkeletonFrameCallback) -> None:
        """Set the callback receiving every skeleton frame."""
        self._on_skeleton_frame = callback

    def _create_landmarker(self) -> mp_vision.PoseLandmarker:
        model_path = Path(self._config.pose_model_path or "")
        if not model_path.is_file():
            raise SensorStartError(
                f"Pose model not found: {model_path}. Download from: {POSE_MODEL_URL}"
            )

        options = mp_vision.PoseLandmarkerOptions(
            base_options=mp_tasks.BaseOptions(model_asset_path=str(model_path)),
            running_mode=mp_vision.RunningMode.VIDEO,
            num_poses=self._config.num_poses,
            min_pose_detection_confidence=self._config.min_pose_detection_confidence,
            min_pose_presence_confidence=self._config.min_pose_tracking_confidence,
            min_tracking_confidence=self._config.min_pose_tracking_confidence,
            output_segmentation_masks=False,
        )
        try:
            return mp_vision.PoseLandmarker.create_from_options(options)
        except (RuntimeError, ValueError) as e:
            raise SensorStartError(f"Could not create pose landmarker: {e}") from e

    def start(self) -> None:
        """
        Open the camera and the pose landmarker.

        Raises:
            SensorStartError: If the camera cannot be opened or the model
                cannot be loaded.
        """
        if self.is_running:
            return

        landmarker = self._create_landmarker()

        capture = cv2.VideoCapture(self._config.camera_index)
        if not capture.isOpened():
            capture.release()
            landmarker.close()
            raise SensorStartError(f"Cannot open camera {self._config.camera_index}")

        self._landmarker = landmarker
        self._capture = capture
        self._fps = capture.get(cv2.CAP_PROP_FPS) or self._config.fps
        self._frame_count = 0
        logger.info("Sensor started on camera %d", self._config.camera_index)

    def stop(self) -> None:
        """Release camera and landmarker. Safe to call twice."""
        if self._capture is not None:
            self._capture.release()
            self._capture = None
        if self._landmarker is not None:
            self._landmarker.close()
            self._landmarker = None
            logger.info("Sensor stopped")

    def detect(self, image: np.ndarray, timestamp_ms: int) -> SkeletonFrame:
        """
        Run pose detection on one BGR image.

        Detection errors are logged and produce an empty frame.
        """
        if self._landmarker is None or image is None or image.size == 0:
            return SkeletonFrame(timestamp_ms=timestamp_ms)

        height, width = image.shape[:2]
        if (width, height) != (self._mapper.width, self._mapper.height):
            self._mapper = CoordinateMapper.for_resolution(width, height)

        # Convert BGR to RGB for MediaPipe
        image_rgb = image[:, :, ::-1].copy()
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=image_rgb)

        try:
            result = self._landmarker.detect_for_video(mp_image, timestamp_ms)
        except (RuntimeError, ValueError) as e:
            logger.warning("Pose detection error: %s", e)
            return SkeletonFrame(timestamp_ms=timestamp_ms)

        skeletons = []
        world_poses = result.pose_world_landmarks or []
        for i, image_pose in enumerate(result.pose_landmarks or []):
            world_pose = world_poses[i] if i < len(world_poses) else None
            skeletons.append(skeleton_from_landmarks(
                image_pose, world_pose, self._mapper, self._config.subject_distance
            ))
        return SkeletonFrame(timestamp_ms=timestamp_ms, skeletons=tuple(skeletons))

    def poll(self) -> bool:
        """
        Read one frame and dispatch the color and skeleton callbacks.

        Returns:
            False when the sensor is stopped or the stream ended.
        """
        if self._capture is None:
            return False

        ok, frame = self._capture.read()
        if not ok:
            return False

        if self._config.mirror:
            frame = cv2.flip(frame, 1)

        timestamp_ms = int(self._frame_count * (1000 / self._fps))
        self._frame_count += 1

        if self._on_color_frame:
            self._on_color_frame(frame)

        skeleton_frame = self.detect(frame, timestamp_ms)
        if self._on_skeleton_frame:
            self._on_skeleton_frame(skeleton_frame)
        return True

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
