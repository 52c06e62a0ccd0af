"""
WordSegmenter — closes the word being spelled after the hand has been
out of view for long enough.
"""
from __future__ import annotations
import logging
from typing import Optional

logger = logging.getLogger(__name__)


class WordSegmenter:
    """
    Accumulates letters and flushes them as a word after an idle gap.

    Parameters
    ----------
    idle_word_gap : float
        Seconds of continuous hand absence that end a word.
    word_cooldown : float
        The same word is not emitted twice within this many seconds; the
        buffer is still cleared.
    """

    def __init__(self, idle_word_gap: float = 1.2, word_cooldown: float = 0.8) -> None:
        self._idle_gap = idle_word_gap
        self._cooldown = word_cooldown
        self.reset(0.0)

    # ------------------------------------------------------------------
    def push_letter(self, letter: str) -> None:
        self._buffer += letter

    def hand_seen(self, now: float) -> None:
        self._last_hand_seen_at = now

    def update_absent(self, now: float) -> Optional[str]:
        """
        Call on every frame without a hand.

        Returns the word to emit, or None.
        """
        if not self._buffer:
            return None
        if now - self._last_hand_seen_at < self._idle_gap:
            return None

        word, self._buffer = self._buffer, ""

        if word == self._last_word and now - self._last_word_at < self._cooldown:
            logger.debug("Suppressed repeated word %r", word)
            return None

        self._last_word = word
        self._last_word_at = now
        return word

    def reset(self, now: float) -> None:
        self._buffer = ""
        self._last_hand_seen_at = now
        self._last_word = ""
        self._last_word_at = float("-inf")

    # ------------------------------------------------------------------
    @property
    def buffer(self) -> str:
        return self._buffer

    @property
    def last_hand_seen_at(self) -> float:
        return self._last_hand_seen_at
