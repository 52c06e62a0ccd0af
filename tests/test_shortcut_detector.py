"""
Tests for shortcut gesture classification and debounce.
"""
import unittest

from core.cooldown_manager import CooldownManager
from core.shortcut_detector import ShortcutDetector
from domain.enums import ShortcutLabel
from domain.errors import InvalidFrame
from gestures import GraciasGesture, HolaGesture, OkGesture
from synthetic import FIST, I_SHAPE, L_SHAPE, OPEN, PEACE, W_SHAPE, Y_SHAPE, make_hand

FRAME = 1 / 30


class TestShortcutVocabulary(unittest.TestCase):

    def setUp(self):
        self.detector = ShortcutDetector(CooldownManager())

    def test_open_hand_is_hola(self):
        self.assertEqual(self.detector.classify(make_hand(OPEN)), ShortcutLabel.HOLA)

    def test_four_fingers_is_hola(self):
        four = (False, True, True, True, True)
        self.assertEqual(self.detector.classify(make_hand(four)), ShortcutLabel.HOLA)

    def test_fist_is_ok(self):
        self.assertEqual(self.detector.classify(make_hand(FIST)), ShortcutLabel.OK)

    def test_peace_is_gracias(self):
        self.assertEqual(self.detector.classify(make_hand(PEACE)), ShortcutLabel.GRACIAS)
        with_thumb = (True, True, True, False, False)
        self.assertEqual(self.detector.classify(make_hand(with_thumb)), ShortcutLabel.GRACIAS)

    def test_other_shapes_are_not_shortcuts(self):
        for shape in (L_SHAPE, Y_SHAPE, W_SHAPE, I_SHAPE):
            with self.subTest(shape=shape):
                self.assertIsNone(self.detector.classify(make_hand(shape)))

    def test_no_hand(self):
        self.assertIsNone(self.detector.classify(None))
        self.assertIsNone(self.detector.classify([]))

    def test_short_frame(self):
        with self.assertRaises(InvalidFrame):
            self.detector.classify(make_hand(OPEN)[:10])

    def test_gesture_rules(self):
        self.assertTrue(HolaGesture().matches((True, True, True, True, False)))
        self.assertFalse(HolaGesture().matches((True, True, True, False, False)))
        self.assertTrue(OkGesture().matches((False,) * 5))
        self.assertFalse(GraciasGesture().matches((False, True, True, True, False)))

    def test_custom_vocabulary(self):
        detector = ShortcutDetector(CooldownManager(), gestures=[OkGesture()])
        self.assertIsNone(detector.classify(make_hand(OPEN)))
        self.assertEqual(detector.classify(make_hand(FIST)), ShortcutLabel.OK)


class TestShortcutDebounce(unittest.TestCase):

    def setUp(self):
        self.detector = ShortcutDetector(
            CooldownManager(),
            stable_frames=5,
            release_frames=4,
            shortcut_cooldown=1.2,
        )
        self.t = 0.0

    def feed(self, landmarks, n):
        fired = []
        for _ in range(n):
            label = self.detector.process(landmarks, self.t)
            if label is not None:
                fired.append(label)
            self.t += FRAME
        return fired

    def test_fires_once_after_stable_frames(self):
        open_hand = make_hand(OPEN)
        self.assertEqual(self.feed(open_hand, 4), [])
        self.assertEqual(self.feed(open_hand, 1), [ShortcutLabel.HOLA])
        self.assertFalse(self.detector.armed)

    def test_held_gesture_does_not_refire(self):
        open_hand = make_hand(OPEN)
        self.assertEqual(self.feed(open_hand, 200), [ShortcutLabel.HOLA])

    def test_refires_after_release(self):
        open_hand = make_hand(OPEN)
        self.assertEqual(self.feed(open_hand, 5), [ShortcutLabel.HOLA])
        self.t += 2.0
        self.assertEqual(self.feed(make_hand(L_SHAPE), 4), [])
        self.assertTrue(self.detector.armed)
        self.assertEqual(self.feed(open_hand, 5), [ShortcutLabel.HOLA])

    def test_hand_absence_releases(self):
        open_hand = make_hand(OPEN)
        self.feed(open_hand, 5)
        self.t += 2.0
        self.feed(None, 4)
        self.assertEqual(self.feed(open_hand, 5), [ShortcutLabel.HOLA])

    def test_short_release_does_not_rearm(self):
        open_hand = make_hand(OPEN)
        self.feed(open_hand, 5)
        self.t += 2.0
        self.feed(None, 3)
        self.assertEqual(self.feed(open_hand, 20), [])

    def test_different_gesture_needs_release_too(self):
        self.feed(make_hand(OPEN), 5)
        self.t += 2.0
        self.assertEqual(self.feed(make_hand(FIST), 20), [])

    def test_cooldown_delays_refire(self):
        open_hand = make_hand(OPEN)
        self.feed(open_hand, 5)
        self.feed(None, 4)
        # re-armed, but still inside the 1.2s cooldown
        self.assertEqual(self.feed(open_hand, 5), [])
        self.assertTrue(self.detector.armed)
        fired = self.feed(open_hand, 40)
        self.assertEqual(fired, [ShortcutLabel.HOLA])
        self.assertGreaterEqual(self.t, 1.2)

    def test_changing_gesture_restarts_count(self):
        self.feed(make_hand(OPEN), 4)
        self.assertEqual(self.feed(make_hand(FIST), 4), [])
        self.assertEqual(self.feed(make_hand(FIST), 1), [ShortcutLabel.OK])

    def test_reset(self):
        self.feed(make_hand(OPEN), 5)
        self.detector.reset()
        self.assertTrue(self.detector.armed)
        self.assertEqual(self.feed(make_hand(OPEN), 5), [ShortcutLabel.HOLA])


if __name__ == "__main__":
    unittest.main()
