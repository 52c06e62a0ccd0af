"""
Abstract base class for all shortcut gestures.

Every gesture must:
  - implement matches(fingers) → bool
  - declare its LABEL class attribute

ShortcutDetector checks gestures in order; the first match wins.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Sequence

from domain.enums import ShortcutLabel


class Gesture(ABC):
    """Base class for all frame-level shortcut gestures."""

    # Override in subclasses
    LABEL: ShortcutLabel

    @abstractmethod
    def matches(self, fingers: Sequence[bool]) -> bool:
        """
        Decide whether this frame shows the gesture.

        Parameters
        ----------
        fingers : sequence of bool
            Extended state per finger, thumb to pinky.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} label={self.LABEL.value!r}>"
