"""
Modules Package for SKELETON COACH.

Contains presentation helpers built on top of the core exercise logic.
"""

from .guide_points import GuidePoint, compute_guide_points

__all__ = [
    'GuidePoint', 'compute_guide_points',
]
