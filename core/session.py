"""
Session — owns all mutable recognition state for one application and
drives the frame loop.

    source.read() → Session.process_frame() → RecognitionPipeline.process()
                                             → on_letter / on_word / on_shortcut

The frame loop runs on one worker thread and processes frames strictly one
at a time. Callbacks are invoked on that thread, in event order, before the
next frame is requested. The Dataset survives start/stop cycles; everything
else is reset by start().
"""
from __future__ import annotations
import logging
import threading
import time
from typing import Callable, Dict, List, Optional, Protocol

from core.config import SessionConfig, default_session_config
from core.features import extract_features
from core.pipeline import RecognitionPipeline
from core.store import KeyValueStore, MemoryStore
from core.symbol_classifier import Dataset, KNNClassifier, SymbolClassifier, normalize_label
from domain.enums import EventKind, RecognitionPhase
from domain.errors import InvalidFrame, InvalidSource, StoreError
from domain.models import FrameData, LandmarkFrame, Prediction, RecognitionEvent

logger = logging.getLogger(__name__)

EventCallback = Callable[[str], None]


class FrameSource(Protocol):
    """What Session.start() needs from a landmark producer."""

    def is_ready(self) -> bool:
        """False while the underlying video is not delivering frames yet."""

    def read(self) -> Optional[LandmarkFrame]:
        """Landmarks of the single tracked hand, or None when no hand is visible."""


class Session:
    """
    Parameters
    ----------
    config : SessionConfig
    store : KeyValueStore, optional
        Persistence for the dataset (defaults to an in-memory store).
    classifier : SymbolClassifier, optional
        Defaults to a fresh KNNClassifier.
    clock : callable
        Returns the current time in seconds. Frames are stamped with it.
    join_timeout : float
        Seconds stop() waits for the frame loop to finish.
    """

    def __init__(
        self,
        config: SessionConfig = default_session_config,
        store: Optional[KeyValueStore] = None,
        classifier: Optional[SymbolClassifier] = None,
        clock: Callable[[], float] = time.monotonic,
        join_timeout: float = 3.0,
    ) -> None:
        self._config = config
        self._store = store if store is not None else MemoryStore()
        self._classifier = classifier if classifier is not None else KNNClassifier()
        self._pipeline = RecognitionPipeline.from_config(config, self._classifier)
        self._clock = clock
        self._join_timeout = join_timeout

        self._listeners: Dict[EventKind, List[EventCallback]] = {kind: [] for kind in EventKind}

        # lifecycle
        self._lifecycle_lock = threading.Lock()
        self._stop_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None
        self._source: Optional[FrameSource] = None

        # sample capture
        self._capture_lock = threading.Lock()
        self._capture_label: Optional[str] = None
        self._capture_remaining = 0

    # ---- subscriptions -------------------------------------------------
    def on_letter(self, callback: EventCallback) -> EventCallback:
        self._listeners[EventKind.LETTER].append(callback)
        return callback

    def on_word(self, callback: EventCallback) -> EventCallback:
        self._listeners[EventKind.WORD].append(callback)
        return callback

    def on_shortcut(self, callback: EventCallback) -> EventCallback:
        self._listeners[EventKind.SHORTCUT].append(callback)
        return callback

    # ---- lifecycle -----------------------------------------------------
    def start(self, source: FrameSource) -> bool:
        """
        Reset ephemeral state and start the frame loop on ``source``.

        Returns False (and does nothing) when already running.

        Raises
        ------
        InvalidSource
            ``source`` does not provide is_ready() and read().
        """
        with self._lifecycle_lock:
            if self.is_running:
                logger.info("Session already running; start() ignored")
                return False
            if not (callable(getattr(source, "is_ready", None))
                    and callable(getattr(source, "read", None))):
                raise InvalidSource(f"{source!r} is not a frame source")

            self._pipeline.reset(self._clock())
            self._clear_capture()

            stop_event = threading.Event()
            self._stop_event = stop_event
            self._source = source
            self._thread = threading.Thread(
                target=self._run, args=(source, stop_event),
                name="signkey-frame-loop", daemon=True,
            )
            self._thread.start()

        logger.info("Session started (%d samples, labels: %s)",
                    len(self._classifier), ", ".join(self._classifier.labels) or "-")
        return True

    def stop(self) -> None:
        """Stop the frame loop. Idempotent; never touches the dataset."""
        with self._lifecycle_lock:
            stop_event, thread, source = self._stop_event, self._thread, self._source
            if stop_event is None or stop_event.is_set():
                logger.debug("Session not running; stop() ignored")
                return
            stop_event.set()
            self._thread = None
            self._source = None

        cancel = getattr(source, "cancel", None)
        if callable(cancel):
            cancel()

        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self._join_timeout)
            if thread.is_alive():
                logger.warning("Frame loop did not finish within %.1fs", self._join_timeout)
        logger.info("Session stopped")

    @property
    def is_running(self) -> bool:
        return self._stop_event is not None and not self._stop_event.is_set()

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, *_) -> None:
        self.stop()

    # ---- frame processing ---------------------------------------------
    def process_frame(
        self,
        landmarks: Optional[LandmarkFrame],
        now: Optional[float] = None,
    ) -> List[RecognitionEvent]:
        """
        Run one frame through the pipeline and dispatch its events.

        Usable without start() to drive the session by hand.
        """
        if now is None:
            now = self._clock()
        self._capture(landmarks)
        events = self._pipeline.process(FrameData(landmarks=landmarks, timestamp=now))
        self._dispatch(events)
        return events

    def _run(self, source: FrameSource, stop_event: threading.Event) -> None:
        poll = self._config.poll_interval
        logger.debug("Frame loop running")

        while not stop_event.is_set():
            try:
                if not source.is_ready():
                    stop_event.wait(poll)
                    continue
                landmarks = source.read()
            except Exception as exc:
                logger.warning("Frame source failed (%s); retrying", exc)
                stop_event.wait(poll)
                continue

            if stop_event.is_set():
                break
            try:
                self.process_frame(landmarks)
            except Exception:
                logger.exception("Frame processing failed; frame skipped")

        logger.debug("Frame loop finished")

    def _dispatch(self, events: List[RecognitionEvent]) -> None:
        for event in events:
            logger.info("[%s] %s", event.kind.value, event.value)
            for callback in list(self._listeners[event.kind]):
                try:
                    callback(event.value)
                except Exception:
                    logger.exception("%s callback %r failed", event.kind.value, callback)

    # ---- training ------------------------------------------------------
    def add_example(self, label: str, landmarks: LandmarkFrame) -> None:
        """
        Record one training sample.

        Raises
        ------
        InvalidFrame
            Malformed landmarks.
        InvalidLabel
            Empty label.
        """
        self._classifier.add_example(label, extract_features(landmarks))

    def capture_samples(self, label: str, count: int) -> int:
        """
        Record the next ``count`` hand-present frames as samples for ``label``.

        ``count`` is clamped to [1, max_capture_samples]. Returns the
        clamped count.
        """
        label = normalize_label(label)
        count = max(1, min(int(count), self._config.max_capture_samples))
        with self._capture_lock:
            self._capture_label = label
            self._capture_remaining = count
        logger.info("Capturing %d samples for %s", count, label)
        return count

    @property
    def capture_remaining(self) -> int:
        return self._capture_remaining

    def _capture(self, landmarks: Optional[LandmarkFrame]) -> None:
        if landmarks is None:
            return
        with self._capture_lock:
            if self._capture_remaining <= 0:
                return
            try:
                self.add_example(self._capture_label, landmarks)
            except InvalidFrame as exc:
                logger.debug("Capture skipped a frame: %s", exc)
                return
            self._capture_remaining -= 1
            if self._capture_remaining == 0:
                logger.info("Captured samples for %s (%d total)",
                            self._capture_label, len(self._classifier))
                self._capture_label = None

    def _clear_capture(self) -> None:
        with self._capture_lock:
            self._capture_label = None
            self._capture_remaining = 0

    # ---- persistence ---------------------------------------------------
    def save(self) -> None:
        """
        Write the dataset to the store.

        Raises
        ------
        StoreError
            The store rejected the write; what was persisted before is kept.
        """
        blob = self._classifier.to_json()
        try:
            self._store.set(self._config.storage_key, blob)
        except StoreError:
            logger.warning("Saving dataset failed", exc_info=True)
            raise
        logger.info("Saved %d samples", len(self._classifier))

    def load(self) -> bool:
        """
        Replace the dataset with the stored one.

        Returns False when nothing has been stored yet.

        Raises
        ------
        StoreError
            The store failed or holds a malformed blob; the in-memory
            dataset is left as it was.
        """
        try:
            raw = self._store.get(self._config.storage_key)
            if raw is None:
                logger.info("No saved dataset under %r", self._config.storage_key)
                return False
            dataset = Dataset.from_json(raw)
        except StoreError:
            logger.warning("Loading dataset failed", exc_info=True)
            raise
        self._classifier.replace(dataset)
        logger.info("Loaded %d samples (labels: %s)",
                    len(dataset), ", ".join(dataset.labels) or "-")
        return True

    def reset(self, purge_store: bool = False) -> None:
        """
        Forget every training sample. With ``purge_store`` the persisted
        dataset is deleted as well.
        """
        self._classifier.reset()
        self._clear_capture()
        logger.info("Dataset reset")
        if purge_store:
            try:
                self._store.delete(self._config.storage_key)
            except StoreError:
                logger.warning("Purging stored dataset failed", exc_info=True)
                raise

    # ---- introspection -------------------------------------------------
    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def labels(self) -> List[str]:
        return self._classifier.labels

    @property
    def sample_count(self) -> int:
        return len(self._classifier)

    @property
    def phase(self) -> RecognitionPhase:
        return self._pipeline.phase

    @property
    def locked_symbol(self) -> Optional[str]:
        return self._pipeline.stabilizer.locked_symbol

    @property
    def word_buffer(self) -> str:
        return self._pipeline.word_buffer

    @property
    def last_prediction(self) -> Optional[Prediction]:
        return self._pipeline.last_prediction
