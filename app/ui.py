"""
OpenCVUI — all rendering logic isolated from recognition.

The session never calls cv2; the runner delegates drawing to this class.
"""
from __future__ import annotations
from collections import deque
from typing import Any, Deque, Optional

import cv2

from app.config import AppConfig
from domain.enums import EventKind, RecognitionPhase
from domain.models import Prediction

_PHASE_COLORS = {
    RecognitionPhase.IDLE:   (200, 200, 200),
    RecognitionPhase.LOCKED: (0,   255,   0),
}
_EVENT_COLORS = {
    EventKind.LETTER:   (255, 255,   0),
    EventKind.WORD:     (0,   255, 255),
    EventKind.SHORTCUT: (255,   0, 255),
}
_DEFAULT_COLOR = (255, 255, 255)

ESC = 27


class OpenCVUI:
    """Renders recognition overlays onto the frame and shows it in a window."""

    def __init__(self, config: AppConfig) -> None:
        self._cfg  = config
        self._name = config.window_name
        self._events: Deque[tuple] = deque(maxlen=config.event_history)
        self._last_key = -1

    def push_event(self, kind: EventKind, value: str) -> None:
        """Remember an event for the history panel (thread-safe append)."""
        self._events.append((kind, value))

    def render(
        self,
        frame: Any,
        phase: RecognitionPhase,
        locked_symbol: Optional[str],
        prediction: Optional[Prediction],
        word_buffer: str,
        capture_remaining: int = 0,
    ) -> None:
        """Flip frame, draw overlays, show window."""
        frame = cv2.flip(frame, 1)
        h, w = frame.shape[:2]

        # Phase + locked symbol
        color = _PHASE_COLORS.get(phase, _DEFAULT_COLOR)
        label = f"{phase.value} {locked_symbol}" if locked_symbol else phase.value
        cv2.putText(frame, label, (20, 50), cv2.FONT_HERSHEY_SIMPLEX, 1.2, color, 3)

        # Raw prediction + confidence
        if prediction is not None:
            ok = prediction.confidence >= self._cfg.session.min_confidence
            debug_color = (200, 200, 200) if ok else (100, 100, 100)
            cv2.putText(frame, f"Raw: {prediction.label} ({prediction.confidence*100:.0f}%)",
                        (20, 90), cv2.FONT_HERSHEY_SIMPLEX, 0.6, debug_color, 1)

        # Word being spelled
        cv2.putText(frame, f"Word: {word_buffer}_",
                    (20, 130), cv2.FONT_HERSHEY_SIMPLEX, 0.8, (255, 255, 255), 2)

        if capture_remaining:
            cv2.putText(frame, f"Recording... {capture_remaining}",
                        (20, 170), cv2.FONT_HERSHEY_SIMPLEX, 0.7, (0, 0, 255), 2)

        # Event history, newest last
        for i, (kind, value) in enumerate(list(self._events)):
            cv2.putText(frame, f"{kind.value}: {value}",
                        (w - 260, 40 + 28 * i), cv2.FONT_HERSHEY_SIMPLEX, 0.6,
                        _EVENT_COLORS.get(kind, _DEFAULT_COLOR), 1)

        cv2.putText(frame, "A-Z record  1 save  0 reset  ESC quit",
                    (20, h - 20), cv2.FONT_HERSHEY_SIMPLEX, 0.5, (255, 255, 255), 1)

        cv2.imshow(self._name, frame)
        self._last_key = cv2.waitKey(1) & 0xFF

    @property
    def last_key(self) -> int:
        """Key pressed during the last render(), or 255 if none."""
        return self._last_key

    def should_quit(self) -> bool:
        """Returns True if the user pressed ESC."""
        return self._last_key == ESC

    def close(self) -> None:
        cv2.destroyAllWindows()
