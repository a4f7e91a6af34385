"""
Visualization Module for SKELETON COACH.

Helpers to draw on an OpenCV (BGR) frame:
- skeleton bones and joints, colored by tracking state
- red bars on the image edges a body is clipped by
- guide points for the current exercise phase
- feedback text and repetition counter

Author: SKELETON COACH Team
Version: 1.0.0
"""

import cv2
import numpy as np
from typing import Iterable, Optional, Tuple

from ..core.data_types import (
    BONES, FrameEdges, Point3D, Skeleton, SkeletonFrame,
    SkeletonTrackingState, TrackingState,
)
from ..core.projection import CoordinateMapper
from ..modules.guide_points import GuidePoint


# Color schemes (BGR)
COLORS = {
    'joint_tracked': (68, 192, 68),   # Green
    'joint_inferred': (0, 255, 255),  # Yellow
    'bone_tracked': (0, 128, 0),      # Dark green
    'bone_inferred': (128, 128, 128), # Gray
    'body_center': (255, 0, 0),       # Blue
    'clip_edge': (0, 0, 255),         # Red
    'guide_point': (0, 255, 255),     # Yellow
    'text': (255, 255, 255),          # White
    'panel_bg': (40, 40, 40),         # Dark gray
}

JOINT_RADIUS = 3
BODY_CENTER_RADIUS = 10
CLIP_BOUNDS_THICKNESS = 10
GUIDE_POINT_RADIUS = 10
TRACKED_BONE_THICKNESS = 6
INFERRED_BONE_THICKNESS = 1


def _to_pixel(mapper: CoordinateMapper, point: Point3D) -> Tuple[int, int]:
    x, y = mapper.skeleton_point_to_screen(point)
    return int(round(x)), int(round(y))


def draw_skeleton(
    frame: np.ndarray,
    skeleton: Skeleton,
    mapper: CoordinateMapper,
) -> np.ndarray:
    """
    Draw bones and joints of one body.

    A bone is skipped when either end is not tracked, or when both ends
    are only inferred. Bones with two tracked ends are drawn thick green,
    the others thin gray.

    Args:
        frame: OpenCV frame.
        skeleton: Body to draw.
        mapper: Projection from skeleton space to frame pixels.

    Returns:
        Frame with the skeleton.
    """
    output = frame.copy()
    joints = skeleton.joints

    for start_type, end_type in BONES:
        start, end = joints[start_type], joints[end_type]

        if not start.is_visible or not end.is_visible:
            continue
        if (start.tracking_state == TrackingState.INFERRED
                and end.tracking_state == TrackingState.INFERRED):
            continue

        if start.is_tracked and end.is_tracked:
            color, thickness = COLORS['bone_tracked'], TRACKED_BONE_THICKNESS
        else:
            color, thickness = COLORS['bone_inferred'], INFERRED_BONE_THICKNESS

        cv2.line(
            output,
            _to_pixel(mapper, start.position),
            _to_pixel(mapper, end.position),
            color, thickness,
        )

    for joint in joints:
        if joint.tracking_state == TrackingState.TRACKED:
            color = COLORS['joint_tracked']
        elif joint.tracking_state == TrackingState.INFERRED:
            color = COLORS['joint_inferred']
        else:
            continue
        cv2.circle(output, _to_pixel(mapper, joint.position), JOINT_RADIUS, color, -1)

    return output


def draw_clipped_edges(frame: np.ndarray, skeleton: Skeleton) -> np.ndarray:
    """Draw a red bar on every image edge the body is clipped by."""
    output = frame.copy()
    h, w = frame.shape[:2]
    edges = skeleton.clipped_edges
    t = CLIP_BOUNDS_THICKNESS
    color = COLORS['clip_edge']

    if edges & FrameEdges.BOTTOM:
        cv2.rectangle(output, (0, h - t), (w, h), color, -1)
    if edges & FrameEdges.TOP:
        cv2.rectangle(output, (0, 0), (w, t), color, -1)
    if edges & FrameEdges.LEFT:
        cv2.rectangle(output, (0, 0), (t, h), color, -1)
    if edges & FrameEdges.RIGHT:
        cv2.rectangle(output, (w - t, 0), (w, h), color, -1)

    return output


def draw_body_center(
    frame: np.ndarray,
    skeleton: Skeleton,
    mapper: CoordinateMapper,
) -> np.ndarray:
    """Mark the center of a body that only reports its position."""
    output = frame.copy()
    cv2.circle(
        output, _to_pixel(mapper, skeleton.position),
        BODY_CENTER_RADIUS, COLORS['body_center'], -1,
    )
    return output


def draw_guide_points(
    frame: np.ndarray,
    points: Iterable[GuidePoint],
    mapper: CoordinateMapper,
) -> np.ndarray:
    """Draw the target positions of hands and elbows."""
    output = frame.copy()
    for point in points:
        cv2.circle(
            output, _to_pixel(mapper, point.position),
            GUIDE_POINT_RADIUS, COLORS['guide_point'], -1,
        )
    return output


def draw_feedback(
    frame: np.ndarray,
    text: str,
    repetitions: Optional[int] = None,
    alpha: float = 0.7,
) -> np.ndarray:
    """
    Draw the feedback panel at the bottom of the frame.

    Args:
        frame: OpenCV frame.
        text: Feedback message, replaced on every frame.
        repetitions: Completed cycles; hidden when None.
        alpha: Panel opacity (0-1).

    Returns:
        Frame with the panel.
    """
    output = frame.copy()
    h, w = frame.shape[:2]
    panel_h = 40

    # Translucent background
    overlay = output.copy()
    cv2.rectangle(overlay, (0, h - panel_h), (w, h), COLORS['panel_bg'], -1)
    cv2.addWeighted(overlay, alpha, output, 1 - alpha, 0, output)

    cv2.putText(
        output, text, (10, h - 14),
        cv2.FONT_HERSHEY_SIMPLEX, 0.6, COLORS['text'], 1, cv2.LINE_AA,
    )
    if repetitions is not None:
        label = f"Reps: {repetitions}"
        (text_w, _), _ = cv2.getTextSize(label, cv2.FONT_HERSHEY_SIMPLEX, 0.6, 1)
        cv2.putText(
            output, label, (w - text_w - 10, h - 14),
            cv2.FONT_HERSHEY_SIMPLEX, 0.6, COLORS['text'], 1, cv2.LINE_AA,
        )
    return output


def render_overlay(
    frame: np.ndarray,
    skeleton_frame: Optional[SkeletonFrame],
    mapper: CoordinateMapper,
    guide_points: Iterable[GuidePoint] = (),
    feedback: str = "",
    repetitions: Optional[int] = None,
) -> np.ndarray:
    """
    Compose the full overlay for one frame.

    Tracked bodies get their skeleton, position-only bodies a center dot,
    and every body its clipped-edge bars. Guide points and the feedback
    panel are drawn on top.
    """
    output = frame
    if skeleton_frame is not None:
        for skeleton in skeleton_frame.skeletons:
            output = draw_clipped_edges(output, skeleton)
            if skeleton.tracking_state == SkeletonTrackingState.TRACKED:
                output = draw_skeleton(output, skeleton, mapper)
            elif skeleton.tracking_state == SkeletonTrackingState.POSITION_ONLY:
                output = draw_body_center(output, skeleton, mapper)

    output = draw_guide_points(output, guide_points, mapper)
    if feedback:
        output = draw_feedback(output, feedback, repetitions)
    return output
