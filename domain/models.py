from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence, Tuple
import time

from domain.enums import EventKind

# Type aliases
Landmark = Tuple[float, ...]           # (x, y) or (x, y, z)
LandmarkFrame = Sequence[Any]          # 21 Landmarks, or objects with .x/.y/.z

LANDMARK_COUNT = 21


@dataclass(frozen=True)
class TrainingSample:
    """One recorded example: a label and its normalised feature vector."""
    label: str
    vector: Tuple[float, ...]


@dataclass(frozen=True)
class Prediction:
    """
    Classifier output for a single frame.

    ``distance`` is the mean distance to the neighbours that voted for
    ``label``.
    """
    label: str
    confidence: float
    distance: float = 0.0


@dataclass
class FrameData:
    """
    All data relevant to a single processed frame.
    Passed through the recognition pipeline instead of individual arguments.
    """
    landmarks: Optional[LandmarkFrame]
    timestamp: float = field(default_factory=time.monotonic)

    # ---- convenience accessors ----------------------------------------
    @property
    def has_hand(self) -> bool:
        """
        False for None or an empty frame. Anything else, including an
        unsized container, counts as a hand and is validated downstream.
        """
        if self.landmarks is None:
            return False
        try:
            return len(self.landmarks) > 0
        except TypeError:
            return True


@dataclass(frozen=True)
class RecognitionEvent:
    kind: EventKind
    value: str
    timestamp: float

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.value}"
