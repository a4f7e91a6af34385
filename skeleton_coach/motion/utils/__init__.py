"""
Utils Package for SKELETON COACH.

Contains:
- logger: per-session JSON event log
- visualization: OpenCV overlay drawing

Author: SKELETON COACH Team
Version: 1.0.0
"""

from .logger import (
    SessionLogger,
    LogLevel,
    LogCategory,
    LogEntry,
    create_session_logger,
)
from .visualization import (
    COLORS,
    draw_skeleton,
    draw_clipped_edges,
    draw_body_center,
    draw_guide_points,
    draw_feedback,
    render_overlay,
)

__all__ = [
    "SessionLogger",
    "LogLevel",
    "LogCategory",
    "LogEntry",
    "create_session_logger",
    "COLORS",
    "draw_skeleton",
    "draw_clipped_edges",
    "draw_body_center",
    "draw_guide_points",
    "draw_feedback",
    "render_overlay",
]
