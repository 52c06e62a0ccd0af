"""
Pure geometric utility functions.
No imports from the rest of the project — safe to use anywhere.
"""
from __future__ import annotations
import math
from typing import Any, Sequence, Tuple

# (tip, lower joint) per finger, thumb first
FINGER_JOINTS: Tuple[Tuple[int, int], ...] = (
    (4, 2),
    (8, 7),
    (12, 11),
    (16, 15),
    (20, 19),
)


def coords(point: Any) -> Tuple[float, ...]:
    """
    Coordinates of a landmark as a tuple.

    Accepts plain sequences ``(x, y[, z])`` and objects exposing ``.x``,
    ``.y`` and optionally ``.z`` (MediaPipe landmarks).
    """
    if hasattr(point, "x") and hasattr(point, "y"):
        z = getattr(point, "z", None)
        if z is None:
            return (float(point.x), float(point.y))
        return (float(point.x), float(point.y), float(z))
    return tuple(float(v) for v in point)


def dist(a: Sequence[float], b: Sequence[float]) -> float:
    """Euclidean distance between two points, in the XY plane."""
    return math.hypot(a[0] - b[0], a[1] - b[1])


def extended_fingers(
    landmarks: Sequence[Any],
    thumb_threshold: float = 0.10,
    finger_threshold: float = 0.07,
) -> Tuple[bool, ...]:
    """
    Which fingers are extended, thumb to pinky.

    A finger counts as extended when its tip is far enough from the joint
    below it. Thresholds are in the landmark's own units (normalised image
    coordinates for MediaPipe output).
    """
    points = [coords(p) for p in landmarks]
    result = []
    for i, (tip, joint) in enumerate(FINGER_JOINTS):
        threshold = thumb_threshold if i == 0 else finger_threshold
        result.append(dist(points[tip], points[joint]) > threshold)
    return tuple(result)
