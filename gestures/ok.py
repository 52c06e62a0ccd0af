"""
OkGesture — closed fist, nothing extended.
"""
from __future__ import annotations
from typing import Sequence

from domain.enums import ShortcutLabel
from gestures.base import Gesture


class OkGesture(Gesture):
    LABEL = ShortcutLabel.OK

    def matches(self, fingers: Sequence[bool]) -> bool:
        return not any(fingers)
