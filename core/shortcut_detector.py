"""
ShortcutDetector — recognises the whole-hand shortcut vocabulary,
independently of the letter channel.

Debounce policy:
  - a gesture must be held for ``stable_frames`` consecutive frames,
  - after firing, the detector is disarmed until ``release_frames``
    consecutive frames show no gesture (or no hand),
  - a global cooldown applies between any two shortcuts.
"""
from __future__ import annotations
import logging
from typing import List, Optional, Sequence

from core.cooldown_manager import CooldownManager
from domain.enums import ShortcutLabel
from domain.errors import InvalidFrame
from domain.models import LANDMARK_COUNT, LandmarkFrame
from gestures import Gesture, default_gestures
from utils.geometry import extended_fingers

logger = logging.getLogger(__name__)

_COOLDOWN_KEY = "SHORTCUT"


class ShortcutDetector:
    """
    Parameters
    ----------
    cooldown : CooldownManager
        Cooldown tracker, injected so tests control time.
    stable_frames : int
    release_frames : int
    shortcut_cooldown : float
        Seconds between two shortcut emissions.
    gestures : list of Gesture, optional
        Vocabulary in priority order (defaults to HOLA, OK, GRACIAS).
    thumb_threshold, finger_threshold : float
        Finger extension thresholds passed to ``extended_fingers``.
    """

    def __init__(
        self,
        cooldown: CooldownManager,
        stable_frames: int = 5,
        release_frames: int = 4,
        shortcut_cooldown: float = 1.2,
        gestures: Optional[Sequence[Gesture]] = None,
        thumb_threshold: float = 0.10,
        finger_threshold: float = 0.07,
    ) -> None:
        self._cooldown = cooldown
        self._stable_frames = stable_frames
        self._release_frames = release_frames
        self._shortcut_cooldown = shortcut_cooldown
        self._gestures: List[Gesture] = list(gestures) if gestures is not None else default_gestures()
        self._thumb_threshold = thumb_threshold
        self._finger_threshold = finger_threshold
        self.reset()

    # ------------------------------------------------------------------
    def classify(self, landmarks: Optional[LandmarkFrame]) -> Optional[ShortcutLabel]:
        """Frame-level classification, no debounce."""
        if landmarks is None:
            return None
        try:
            count = len(landmarks)
        except TypeError as exc:
            raise InvalidFrame(f"landmarks must be a sized sequence: {exc}") from exc
        if count == 0:
            return None
        if count < LANDMARK_COUNT:
            raise InvalidFrame(f"expected {LANDMARK_COUNT} landmarks, got {count}")
        fingers = extended_fingers(landmarks, self._thumb_threshold, self._finger_threshold)
        for gesture in self._gestures:
            if gesture.matches(fingers):
                return gesture.LABEL
        return None

    def update(self, label: Optional[ShortcutLabel], now: float) -> Optional[ShortcutLabel]:
        """
        Advance the debounce state with this frame's label.

        Returns the shortcut to emit, or None.
        """
        if label is None:
            self._null_frames += 1
            self._stable_count = 0
            if self._null_frames >= self._release_frames:
                self._armed = True
                self._last_label = None
            return None

        self._null_frames = 0
        if label == self._last_label:
            self._stable_count += 1
        else:
            self._last_label = label
            self._stable_count = 1

        if (self._stable_count >= self._stable_frames
                and self._armed
                and self._cooldown.ok(_COOLDOWN_KEY, now, self._shortcut_cooldown)):
            self._armed = False
            logger.debug("Shortcut %s after %d frames", label.value, self._stable_count)
            return label
        return None

    def process(self, landmarks: Optional[LandmarkFrame], now: float) -> Optional[ShortcutLabel]:
        return self.update(self.classify(landmarks), now)

    def reset(self) -> None:
        self._last_label: Optional[ShortcutLabel] = None
        self._stable_count = 0
        self._null_frames = 0
        self._armed = True
        self._cooldown.reset(_COOLDOWN_KEY)

    # ------------------------------------------------------------------
    @property
    def armed(self) -> bool:
        return self._armed

    @property
    def cooldown_until(self) -> float:
        return self._cooldown.cooldown_until(_COOLDOWN_KEY)
