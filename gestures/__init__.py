"""
Shortcut gestures, in priority order
"""

from .base import Gesture
from .hola import HolaGesture
from .ok import OkGesture
from .gracias import GraciasGesture

__all__ = [
    'Gesture',
    'HolaGesture',
    'OkGesture',
    'GraciasGesture',
    'default_gestures',
]


def default_gestures():
    """Shortcut vocabulary in the order it is checked."""
    return [HolaGesture(), OkGesture(), GraciasGesture()]
