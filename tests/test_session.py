"""
Tests for Session: lifecycle, threaded frame loop, callbacks, training
capture and persistence.
"""
import threading
import unittest

from core.config import SessionConfig
from core.session import Session
from core.store import KeyValueStore, MemoryStore
from domain.enums import RecognitionPhase
from domain.errors import InvalidFrame, InvalidLabel, InvalidSource, StoreError
from synthetic import FIST, OPEN, W_SHAPE, Y_SHAPE, FakeClock, make_hand

FRAME = 1 / 30


class ScriptedSource:
    """Plays ``frames`` once, then reports no hand forever."""

    def __init__(self, frames=(), ready=True):
        self._frames = list(frames)
        self._ready = ready
        self.reads = 0
        self.ready_checks = 0
        self.cancelled = 0
        self._lock = threading.Lock()

    def is_ready(self):
        self.ready_checks += 1
        return self._ready

    def read(self):
        with self._lock:
            self.reads += 1
            if self._frames:
                return self._frames.pop(0)
        return None

    def cancel(self):
        self.cancelled += 1


class FlakySource(ScriptedSource):
    """Raises on its first reads, then behaves like ScriptedSource."""

    def __init__(self, failures, frames=()):
        super().__init__(frames)
        self._failures = failures

    def read(self):
        if self._failures > 0:
            self._failures -= 1
            raise RuntimeError("camera returned no frame")
        return super().read()


class BrokenStore(KeyValueStore):

    def get(self, key):
        raise StoreError("disk unavailable")

    def set(self, key, value):
        raise StoreError("disk full")

    def delete(self, key):
        raise StoreError("read-only")


def train(session, label, shape, n=3):
    for seed in range(n):
        session.add_example(label, make_hand(shape, jitter=0.002, seed=seed))


class SessionTestCase(unittest.TestCase):

    def setUp(self):
        self.store = MemoryStore()
        self.session = Session(SessionConfig(), store=self.store, clock=FakeClock(step=FRAME))

    def tearDown(self):
        self.session.stop()


class TestCallbacks(SessionTestCase):

    def test_events_dispatched_in_order(self):
        received = []
        self.session.on_letter(lambda v: received.append(("letter", v)))
        self.session.on_shortcut(lambda v: received.append(("shortcut", v)))
        self.session.on_word(lambda v: received.append(("word", v)))
        train(self.session, "B", OPEN)

        t = 0.0
        for _ in range(5):
            self.session.process_frame(make_hand(OPEN), now=t)
            t += FRAME
        for _ in range(40):
            self.session.process_frame(None, now=t)
            t += FRAME

        self.assertEqual(received, [("letter", "B"), ("shortcut", "HOLA"), ("word", "B")])

    def test_failing_callback_does_not_block_others(self):
        received = []

        @self.session.on_shortcut
        def broken(value):
            raise RuntimeError("boom")

        self.session.on_shortcut(received.append)

        with self.assertLogs("core.session", level="ERROR"):
            for i in range(5):
                self.session.process_frame(make_hand(FIST), now=i * FRAME)
        self.assertEqual(received, ["OK"])
        self.assertTrue(callable(broken))

    def test_process_frame_returns_events(self):
        events = []
        for i in range(5):
            events += self.session.process_frame(make_hand(OPEN), now=i * FRAME)
        self.assertEqual([str(e) for e in events], ["SHORTCUT:HOLA"])


class TestLifecycle(SessionTestCase):

    def test_invalid_source(self):
        with self.assertRaises(InvalidSource):
            self.session.start(object())
        self.assertFalse(self.session.is_running)

    def test_double_start_is_ignored(self):
        source = ScriptedSource(ready=False)
        self.assertTrue(self.session.start(source))
        self.assertFalse(self.session.start(ScriptedSource()))
        self.assertTrue(self.session.is_running)

    def test_stop_is_idempotent_and_cancels_source(self):
        source = ScriptedSource(ready=False)
        self.session.stop()
        self.session.start(source)
        self.session.stop()
        self.session.stop()
        self.assertFalse(self.session.is_running)
        self.assertEqual(source.cancelled, 1)

    def test_not_ready_source_is_never_read(self):
        source = ScriptedSource(ready=False)
        self.session.start(source)
        threading.Event().wait(0.1)
        self.session.stop()
        self.assertGreater(source.ready_checks, 0)
        self.assertEqual(source.reads, 0)

    def test_context_manager_stops(self):
        with self.session as session:
            session.start(ScriptedSource(ready=False))
            self.assertTrue(session.is_running)
        self.assertFalse(self.session.is_running)

    def test_start_resets_state_but_keeps_dataset(self):
        train(self.session, "H", W_SHAPE)
        for i in range(3):
            self.session.process_frame(make_hand(W_SHAPE), now=i * FRAME)
        self.assertEqual(self.session.phase, RecognitionPhase.LOCKED)
        self.assertEqual(self.session.word_buffer, "H")

        self.session.start(ScriptedSource(ready=False))
        self.assertEqual(self.session.phase, RecognitionPhase.IDLE)
        self.assertEqual(self.session.word_buffer, "")
        self.session.stop()

        self.session.start(ScriptedSource(ready=False))
        self.session.stop()
        self.assertEqual(self.session.labels, ["H"])
        self.assertEqual(self.session.sample_count, 3)


class TestFrameLoop(SessionTestCase):

    def test_letters_and_word_from_threaded_loop(self):
        train(self.session, "H", W_SHAPE)
        train(self.session, "O", Y_SHAPE)
        received = []
        done = threading.Event()
        self.session.on_letter(received.append)

        @self.session.on_word
        def word(value):
            received.append(value)
            done.set()

        frames = [make_hand(W_SHAPE)] * 3 + [make_hand(Y_SHAPE)] * 7
        source = ScriptedSource(frames)
        self.assertTrue(self.session.start(source))
        self.assertTrue(done.wait(5.0))
        self.session.stop()

        self.assertEqual(received, ["H", "O", "HO"])

    def test_source_failures_are_retried(self):
        received = []
        done = threading.Event()

        @self.session.on_shortcut
        def shortcut(value):
            received.append(value)
            done.set()

        source = FlakySource(failures=3, frames=[make_hand(OPEN)] * 5)
        with self.assertLogs("core.session", level="WARNING"):
            self.session.start(source)
            self.assertTrue(done.wait(5.0))
        self.session.stop()
        self.assertEqual(received, ["HOLA"])

    def test_unsized_frame_does_not_end_loop(self):
        received = []
        done = threading.Event()

        @self.session.on_shortcut
        def shortcut(value):
            received.append(value)
            done.set()

        source = ScriptedSource([iter(make_hand(OPEN))] + [make_hand(OPEN)] * 6)
        self.session.start(source)
        self.assertTrue(done.wait(5.0))
        self.assertTrue(self.session.is_running)
        self.session.stop()

        self.assertEqual(received, ["HOLA"])
        self.assertGreaterEqual(source.reads, 6)

    def test_processing_error_is_logged_and_skipped(self):
        received = []
        done = threading.Event()
        calls = []
        real_process = self.session.process_frame

        def flaky_process(landmarks, now=None):
            calls.append(landmarks)
            if len(calls) == 1:
                raise RuntimeError("unexpected")
            return real_process(landmarks, now)

        self.session.process_frame = flaky_process

        @self.session.on_shortcut
        def shortcut(value):
            received.append(value)
            done.set()

        source = ScriptedSource([make_hand(FIST)] * 6)
        with self.assertLogs("core.session", level="ERROR"):
            self.session.start(source)
            self.assertTrue(done.wait(5.0))
        self.session.stop()
        self.assertEqual(received, ["OK"])


class TestCapture(SessionTestCase):

    def test_count_is_clamped(self):
        self.assertEqual(self.session.capture_samples("a", 0), 1)
        self.assertEqual(self.session.capture_samples("a", 500), 50)
        self.assertEqual(self.session.capture_samples("a", 7), 7)
        self.assertEqual(self.session.capture_remaining, 7)

    def test_capture_consumes_hand_frames_only(self):
        self.session.capture_samples(" c ", 3)
        self.session.process_frame(None, now=0.0)
        self.session.process_frame(make_hand(FIST)[:5], now=0.1)
        self.assertEqual(self.session.sample_count, 0)

        for i in range(5):
            self.session.process_frame(make_hand(FIST, jitter=0.002, seed=i), now=0.2 + i * FRAME)
        self.assertEqual(self.session.sample_count, 3)
        self.assertEqual(self.session.capture_remaining, 0)
        self.assertEqual(self.session.labels, ["C"])

    def test_unsized_frame_is_not_captured(self):
        self.session.capture_samples("B", 1)
        self.assertEqual(self.session.process_frame(iter(make_hand(OPEN)), now=0.0), [])
        self.assertEqual(self.session.capture_remaining, 1)
        self.session.process_frame(make_hand(OPEN), now=0.1)
        self.assertEqual(self.session.sample_count, 1)
        self.assertEqual(self.session.capture_remaining, 0)

    def test_empty_label(self):
        with self.assertRaises(InvalidLabel):
            self.session.capture_samples("   ", 3)

    def test_add_example_rejects_bad_frame(self):
        with self.assertRaises(InvalidFrame):
            self.session.add_example("A", make_hand(OPEN)[:20])
        self.assertEqual(self.session.sample_count, 0)


class TestPersistence(SessionTestCase):

    def test_save_and_load_in_new_session(self):
        train(self.session, "H", W_SHAPE)
        train(self.session, "O", Y_SHAPE)
        self.session.save()
        self.assertIsNotNone(self.store.get("fs_knn_v1"))

        other = Session(SessionConfig(), store=self.store)
        self.assertTrue(other.load())
        self.assertEqual(other.labels, ["H", "O"])
        self.assertEqual(other.sample_count, 6)

        letters = []
        other.on_letter(letters.append)
        for i in range(3):
            other.process_frame(make_hand(Y_SHAPE), now=i * FRAME)
        self.assertEqual(letters, ["O"])

    def test_load_without_saved_data(self):
        train(self.session, "H", W_SHAPE)
        self.assertFalse(self.session.load())
        self.assertEqual(self.session.sample_count, 3)

    def test_malformed_blob_leaves_dataset(self):
        train(self.session, "H", W_SHAPE)
        self.store.set("fs_knn_v1", "{broken")
        with self.assertRaises(StoreError):
            self.session.load()
        self.assertEqual(self.session.labels, ["H"])

    def test_failing_store(self):
        session = Session(SessionConfig(), store=BrokenStore())
        train(session, "H", W_SHAPE)
        with self.assertRaises(StoreError):
            session.save()
        with self.assertRaises(StoreError):
            session.load()
        self.assertEqual(session.sample_count, 3)

    def test_reset_keeps_store_unless_purged(self):
        train(self.session, "H", W_SHAPE)
        self.session.save()
        self.session.reset()
        self.assertEqual(self.session.labels, [])
        self.assertIsNotNone(self.store.get("fs_knn_v1"))

        self.session.reset(purge_store=True)
        self.assertIsNone(self.store.get("fs_knn_v1"))
        self.assertFalse(self.session.load())

    def test_reset_cancels_capture(self):
        self.session.capture_samples("A", 5)
        self.session.reset()
        self.assertEqual(self.session.capture_remaining, 0)

    def test_custom_storage_key(self):
        session = Session(SessionConfig(storage_key="other"), store=self.store)
        train(session, "H", W_SHAPE)
        session.save()
        self.assertIsNotNone(self.store.get("other"))
        self.assertIsNone(self.store.get("fs_knn_v1"))


if __name__ == "__main__":
    unittest.main()
