"""
Feature extraction — turns one landmark frame into a translation and
scale invariant vector for the symbol classifier.
"""
from __future__ import annotations
import math

import numpy as np

from domain.errors import InvalidFrame
from domain.models import LANDMARK_COUNT, LandmarkFrame
from utils.geometry import coords

ORIGIN_POINT = 0       # wrist
SCALE_POINT = 5        # index MCP


def extract_features(landmarks: LandmarkFrame) -> np.ndarray:
    """
    Translate so the wrist is the origin, then divide by the
    wrist→index-MCP distance.

    Z is included only when every point carries it. Rotation is not
    normalised.

    Raises
    ------
    InvalidFrame
        Fewer than 21 points, an unsized container, or non-numeric /
        non-finite coordinates.
    """
    if landmarks is None:
        raise InvalidFrame("no landmarks")
    try:
        count = len(landmarks)
    except TypeError as exc:
        raise InvalidFrame(f"landmarks must be a sized sequence: {exc}") from exc
    if count < LANDMARK_COUNT:
        raise InvalidFrame(f"expected {LANDMARK_COUNT} landmarks, got {count}")

    try:
        points = [coords(p) for p in list(landmarks)[:LANDMARK_COUNT]]
    except (TypeError, ValueError) as exc:
        raise InvalidFrame(f"unreadable landmark: {exc}") from exc

    if any(len(p) < 2 for p in points):
        raise InvalidFrame("every landmark needs at least x and y")

    dims = 3 if all(len(p) >= 3 for p in points) else 2
    arr = np.array([p[:dims] for p in points], dtype=np.float64)
    if not np.all(np.isfinite(arr)):
        raise InvalidFrame("landmark coordinates must be finite")

    origin = arr[ORIGIN_POINT]
    ref = arr[SCALE_POINT]
    scale = math.hypot(ref[0] - origin[0], ref[1] - origin[1]) or 1.0

    return ((arr - origin) / scale).reshape(-1)
