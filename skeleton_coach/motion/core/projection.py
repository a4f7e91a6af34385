"""
Projection between skeleton space and screen pixels.

Pinhole model with the constants of a 640x480 depth camera
(focal length 571.26 px). Other resolutions scale the focal length with
the frame width.
"""

from dataclasses import dataclass
from typing import Tuple

from .data_types import Point3D

REFERENCE_WIDTH = 640
REFERENCE_HEIGHT = 480
REFERENCE_FOCAL_LENGTH = 571.26

MIN_DEPTH = 1e-3


@dataclass(frozen=True)
class CoordinateMapper:
    """
    Pinhole projection between skeleton space and screen pixels.

    Attributes:
        width: Screen width in pixels.
        height: Screen height in pixels.
        focal_length: Focal length in pixels.
    """
    width: int = REFERENCE_WIDTH
    height: int = REFERENCE_HEIGHT
    focal_length: float = REFERENCE_FOCAL_LENGTH

    @classmethod
    def for_resolution(cls, width: int, height: int) -> "CoordinateMapper":
        """Scale the reference focal length to another frame width."""
        return cls(
            width=int(width),
            height=int(height),
            focal_length=REFERENCE_FOCAL_LENGTH * float(width) / REFERENCE_WIDTH,
        )

    @property
    def center(self) -> Tuple[float, float]:
        return self.width / 2.0, self.height / 2.0

    def skeleton_point_to_screen(self, point: Point3D) -> Tuple[float, float]:
        """Project a skeleton-space point into screen pixels (y grows downward)."""
        cx, cy = self.center
        depth = max(point.z, MIN_DEPTH)
        return (
            cx + point.x * self.focal_length / depth,
            cy - point.y * self.focal_length / depth,
        )

    def screen_to_skeleton_point(self, px: float, py: float, depth: float) -> Point3D:
        """Lift a screen pixel at a known depth back into skeleton space."""
        cx, cy = self.center
        depth = max(depth, MIN_DEPTH)
        return Point3D(
            x=(px - cx) * depth / self.focal_length,
            y=-(py - cy) * depth / self.focal_length,
            z=depth,
        )
