"""
Letter stabilization — temporal filters that turn noisy per-frame
predictions into discrete letter emissions.

Two strategies share one interface:

  WindowLockStabilizer   rolling window + lock. After emitting, the hand must
                         visibly change (or relax) before anything fires again.
  ConsecutiveStabilizer  N identical predictions in a row, emit, start over.
                         Holding a shape keeps re-firing every N frames.
"""
from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from collections import Counter, deque
from typing import Deque, Optional, Tuple

from core.config import SessionConfig
from domain.enums import RecognitionPhase
from domain.models import Prediction

logger = logging.getLogger(__name__)


class StabilizationStrategy(ABC):
    """Base class for letter stabilizers."""

    NAME: str = "UNNAMED_STABILIZER"

    @abstractmethod
    def update(self, prediction: Optional[Prediction], hand_present: bool = True) -> Optional[str]:
        """
        Feed one frame.

        Parameters
        ----------
        prediction : Prediction or None
            Classifier output, None when nothing could be predicted.
        hand_present : bool
            False when the frame contained no hand at all.

        Returns
        -------
        str or None
            The letter to emit this frame, if any.
        """

    @abstractmethod
    def reset(self) -> None:
        """Back to the initial state."""

    @property
    def phase(self) -> RecognitionPhase:
        return RecognitionPhase.IDLE

    @property
    def locked_symbol(self) -> Optional[str]:
        return None

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} phase={self.phase.value}>"


class WindowLockStabilizer(StabilizationStrategy):
    """
    Two-state machine: IDLE searches a rolling window for a stable label,
    LOCKED waits for sustained evidence of a different one.

    Parameters
    ----------
    window_size : int
        Number of confident predictions kept while searching.
    min_stable_frames : int
        Occurrences of the dominant label needed to lock (<= window_size).
    min_confidence : float
        Predictions below this confidence are ignored while IDLE and count
        as "different" while LOCKED.
    change_frames : int
        Consecutive differing frames that release a lock.
    no_confidence_reset_frames : int
        Consecutive frames without a confident prediction that release a lock.
    absence_reset_frames : int
        Consecutive hand-absent frames that force IDLE.
    """

    NAME = "window_lock"

    def __init__(
        self,
        window_size: int = 6,
        min_stable_frames: int = 3,
        min_confidence: float = 0.60,
        change_frames: int = 4,
        no_confidence_reset_frames: int = 8,
        absence_reset_frames: int = 4,
    ) -> None:
        if min_stable_frames > window_size:
            raise ValueError("min_stable_frames cannot exceed window_size")
        self._min_stable = min_stable_frames
        self._min_confidence = min_confidence
        self._change_frames = change_frames
        self._no_conf_frames = no_confidence_reset_frames
        self._absence_frames = absence_reset_frames
        self._window: Deque[Tuple[str, float]] = deque(maxlen=window_size)
        self.reset()

    # ------------------------------------------------------------------
    def update(self, prediction: Optional[Prediction], hand_present: bool = True) -> Optional[str]:
        if not hand_present:
            self._absent_frames += 1
            if self._absent_frames >= self._absence_frames and (
                self._phase is RecognitionPhase.LOCKED or self._window
            ):
                self._release("hand absent")
            return None
        self._absent_frames = 0

        confident = prediction is not None and prediction.confidence >= self._min_confidence

        if self._phase is RecognitionPhase.IDLE:
            if not confident:
                return None
            self._window.append((prediction.label, prediction.confidence))
            candidate = self._stable_candidate()
            if candidate is None:
                return None
            self._phase = RecognitionPhase.LOCKED
            self._locked = candidate
            self._window.clear()
            self._different_frames = 0
            self._unconfident_frames = 0
            logger.debug("Locked on %s", candidate)
            return candidate

        # LOCKED
        if confident and prediction.label == self._locked:
            self._different_frames = 0
            self._unconfident_frames = 0
            return None

        self._different_frames += 1
        self._unconfident_frames = 0 if confident else self._unconfident_frames + 1
        if self._different_frames >= self._change_frames:
            self._release("gesture changed")
        elif self._unconfident_frames >= self._no_conf_frames:
            self._release("no confident prediction")
        return None

    def reset(self) -> None:
        self._window.clear()
        self._phase = RecognitionPhase.IDLE
        self._locked: Optional[str] = None
        self._different_frames = 0
        self._unconfident_frames = 0
        self._absent_frames = 0

    # ------------------------------------------------------------------
    @property
    def phase(self) -> RecognitionPhase:
        return self._phase

    @property
    def locked_symbol(self) -> Optional[str]:
        return self._locked

    @property
    def window(self) -> Tuple[Tuple[str, float], ...]:
        return tuple(self._window)

    # ------------------------------------------------------------------
    def _stable_candidate(self) -> Optional[str]:
        """Most frequent label in the window, tie-broken by average confidence."""
        counts = Counter(label for label, _ in self._window)
        best_label, best_count, best_avg = None, 0, 0.0
        for label, count in counts.items():
            avg = sum(c for l, c in self._window if l == label) / count
            if (count, avg) > (best_count, best_avg):
                best_label, best_count, best_avg = label, count, avg
        if best_count >= self._min_stable and best_avg >= self._min_confidence:
            return best_label
        return None

    def _release(self, reason: str) -> None:
        if self._phase is RecognitionPhase.LOCKED:
            logger.debug("Released %s (%s)", self._locked, reason)
        self._phase = RecognitionPhase.IDLE
        self._locked = None
        self._window.clear()
        self._different_frames = 0
        self._unconfident_frames = 0


class ConsecutiveStabilizer(StabilizationStrategy):
    """
    Emits after ``frames`` identical confident predictions in a row, then
    starts counting again. Anything else restarts the count.
    """

    NAME = "consecutive"

    def __init__(self, frames: int = 4, min_confidence: float = 0.60) -> None:
        self._frames = frames
        self._min_confidence = min_confidence
        self.reset()

    def update(self, prediction: Optional[Prediction], hand_present: bool = True) -> Optional[str]:
        if not hand_present or prediction is None or prediction.confidence < self._min_confidence:
            self.reset()
            return None

        if prediction.label == self._last:
            self._count += 1
        else:
            self._last = prediction.label
            self._count = 1

        if self._count >= self._frames:
            label = self._last
            self.reset()
            return label
        return None

    def reset(self) -> None:
        self._last: Optional[str] = None
        self._count = 0


def make_stabilizer(config: SessionConfig) -> StabilizationStrategy:
    """Build the strategy selected by ``config.stabilizer``."""
    if config.stabilizer == ConsecutiveStabilizer.NAME:
        return ConsecutiveStabilizer(
            frames=config.consecutive_frames,
            min_confidence=config.min_confidence,
        )
    return WindowLockStabilizer(
        window_size=config.window_size,
        min_stable_frames=config.min_stable_frames,
        min_confidence=config.min_confidence,
        change_frames=config.change_frames,
        no_confidence_reset_frames=config.no_confidence_reset_frames,
        absence_reset_frames=config.absence_reset_frames,
    )
