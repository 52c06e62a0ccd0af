"""
HolaGesture — open hand (four or more fingers extended).
"""
from __future__ import annotations
from typing import Sequence

from domain.enums import ShortcutLabel
from gestures.base import Gesture


class HolaGesture(Gesture):
    LABEL = ShortcutLabel.HOLA

    def __init__(self, min_extended: int = 4) -> None:
        self._min_extended = min_extended

    def matches(self, fingers: Sequence[bool]) -> bool:
        return sum(fingers) >= self._min_extended
