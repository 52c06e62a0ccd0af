"""
RecognitionPipeline — the per-frame transition of the recognition core.

    landmarks → features → SymbolClassifier → Stabilizer → WordSegmenter
             ↘ ShortcutDetector

process() takes one FrameData, advances the component state it owns and
returns the events of that frame, in order. No I/O, no clock: time comes
from FrameData.timestamp.
"""
from __future__ import annotations
import logging
from typing import List, Optional

from core.config import SessionConfig
from core.cooldown_manager import CooldownManager
from core.features import extract_features
from core.shortcut_detector import ShortcutDetector
from core.state_stabilizer import StabilizationStrategy, make_stabilizer
from core.symbol_classifier import KNNClassifier, SymbolClassifier
from core.word_segmenter import WordSegmenter
from domain.enums import EventKind, RecognitionPhase
from domain.errors import InvalidFrame
from domain.models import FrameData, Prediction, RecognitionEvent

logger = logging.getLogger(__name__)


class RecognitionPipeline:
    """
    Usage
    -----
    pipeline = RecognitionPipeline.from_config(config)
    events   = pipeline.process(frame_data)

    Parameters
    ----------
    classifier : SymbolClassifier
        Holds the Dataset. Shared, never reset by the pipeline.
    stabilizer : StabilizationStrategy
    segmenter : WordSegmenter
    shortcuts : ShortcutDetector
    k : int
        Neighbours used for each prediction.
    """

    def __init__(
        self,
        classifier: SymbolClassifier,
        stabilizer: StabilizationStrategy,
        segmenter: WordSegmenter,
        shortcuts: ShortcutDetector,
        k: int = 3,
    ) -> None:
        self._classifier = classifier
        self._stabilizer = stabilizer
        self._segmenter = segmenter
        self._shortcuts = shortcuts
        self._k = k
        self._last_prediction: Optional[Prediction] = None

    @classmethod
    def from_config(
        cls,
        config: SessionConfig,
        classifier: Optional[SymbolClassifier] = None,
    ) -> "RecognitionPipeline":
        return cls(
            classifier=classifier if classifier is not None else KNNClassifier(),
            stabilizer=make_stabilizer(config),
            segmenter=WordSegmenter(config.idle_word_gap, config.word_cooldown),
            shortcuts=ShortcutDetector(
                CooldownManager(default_cooldown=config.shortcut_cooldown),
                stable_frames=config.shortcut_stable_frames,
                release_frames=config.shortcut_release_frames,
                shortcut_cooldown=config.shortcut_cooldown,
                thumb_threshold=config.thumb_extended_threshold,
                finger_threshold=config.finger_extended_threshold,
            ),
            k=config.k,
        )

    # ------------------------------------------------------------------
    def process(self, frame_data: FrameData) -> List[RecognitionEvent]:
        """
        Process one frame and return all triggered events.

        Ordering:
        1. Letter  — only on hand-present frames.
        2. Shortcut.
        3. Word    — only on hand-absent frames.

        A malformed frame is skipped: no state changes, no events.
        """
        now = frame_data.timestamp

        if not frame_data.has_hand:
            self._last_prediction = None
            self._stabilizer.update(None, hand_present=False)
            self._shortcuts.update(None, now)
            word = self._segmenter.update_absent(now)
            if word:
                return [RecognitionEvent(EventKind.WORD, word, now)]
            return []

        try:
            vector = extract_features(frame_data.landmarks)
            shortcut_label = self._shortcuts.classify(frame_data.landmarks)
        except InvalidFrame as exc:
            logger.debug("Skipping frame: %s", exc)
            return []

        # a well-formed hand the dataset cannot score still feeds the shortcut channel
        try:
            prediction = self._classifier.predict(vector, self._k)
        except InvalidFrame as exc:
            logger.debug("No prediction for frame: %s", exc)
            prediction = None

        events: List[RecognitionEvent] = []
        self._last_prediction = prediction
        self._segmenter.hand_seen(now)

        # 1. Letters
        letter = self._stabilizer.update(prediction, hand_present=True)
        if letter is not None:
            self._segmenter.push_letter(letter)
            events.append(RecognitionEvent(EventKind.LETTER, letter, now))

        # 2. Shortcuts
        shortcut = self._shortcuts.update(shortcut_label, now)
        if shortcut is not None:
            events.append(RecognitionEvent(EventKind.SHORTCUT, shortcut.value, now))

        return events

    def reset(self, now: float) -> None:
        """Reset every piece of ephemeral state. The Dataset is untouched."""
        self._stabilizer.reset()
        self._segmenter.reset(now)
        self._shortcuts.reset()
        self._last_prediction = None

    # ---- introspection (overlay / debugging) ---------------------------
    @property
    def classifier(self) -> SymbolClassifier:
        return self._classifier

    @property
    def stabilizer(self) -> StabilizationStrategy:
        return self._stabilizer

    @property
    def phase(self) -> RecognitionPhase:
        return self._stabilizer.phase

    @property
    def word_buffer(self) -> str:
        return self._segmenter.buffer

    @property
    def last_prediction(self) -> Optional[Prediction]:
        return self._last_prediction
