"""
Kinematics Module for SKELETON COACH.

Contains the geometric helpers the pose rules and guide points are built from.
"""

import numpy as np

from .data_types import Point3D


def euclidean_distance(p: Point3D, q: Point3D) -> float:
    """
    Calculate the 3D Euclidean distance between two points.

    Args:
        p: First point
        q: Second point

    Returns:
        Distance in skeleton-space units (meters)
    """
    return float(np.linalg.norm(q.to_array() - p.to_array()))


def axis_difference(p: Point3D, q: Point3D, axis: str) -> float:
    """Absolute difference of p and q along one axis ("x", "y" or "z")."""
    return abs(getattr(p, axis) - getattr(q, axis))


def signed_axis_sum(p: Point3D, q: Point3D) -> float:
    """
    Sum of the signed per-axis differences p - q.

    This is not a norm: offsets on different axes can cancel out.
    """
    return (p.x - q.x) + (p.y - q.y) + (p.z - q.z)


def within_open_interval(value: float, upper: float) -> bool:
    """True iff 0 < value < upper (both bounds strict)."""
    return 0 < value < upper
