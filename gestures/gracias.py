"""
GraciasGesture — index and middle up, ring and pinky folded.
The thumb is ignored.
"""
from __future__ import annotations
from typing import Sequence

from domain.enums import ShortcutLabel
from gestures.base import Gesture


class GraciasGesture(Gesture):
    LABEL = ShortcutLabel.GRACIAS

    def matches(self, fingers: Sequence[bool]) -> bool:
        _, index, middle, ring, pinky = fingers
        return index and middle and not ring and not pinky
