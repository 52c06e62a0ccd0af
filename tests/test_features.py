"""
Tests for landmark feature extraction.
"""
import unittest
from types import SimpleNamespace

import numpy as np

from core.features import extract_features
from domain.errors import InvalidFrame
from synthetic import L_SHAPE, OPEN, make_hand


class TestExtractFeatures(unittest.TestCase):

    def test_translation_invariance(self):
        base = extract_features(make_hand(OPEN, offset=(0.5, 0.7)))
        moved = extract_features(make_hand(OPEN, offset=(0.21, 0.33)))
        self.assertTrue(np.allclose(base, moved, atol=1e-9))

    def test_translation_invariance_3d(self):
        frame = make_hand(L_SHAPE, z=True)
        shifted = [(x + 0.1, y - 0.2, z + 0.05) for x, y, z in frame]
        self.assertTrue(np.allclose(extract_features(frame), extract_features(shifted), atol=1e-9))

    def test_scale_invariance(self):
        small = extract_features(make_hand(OPEN, size=0.5))
        large = extract_features(make_hand(OPEN, size=2.0))
        self.assertTrue(np.allclose(small, large, atol=1e-9))

    def test_wrist_is_origin_and_index_mcp_is_unit(self):
        vec = extract_features(make_hand(OPEN)).reshape(-1, 2)
        self.assertEqual(tuple(vec[0]), (0.0, 0.0))
        self.assertAlmostEqual(float(np.hypot(*vec[5])), 1.0)

    def test_deterministic(self):
        frame = make_hand(L_SHAPE, jitter=0.002, seed=7)
        self.assertTrue(np.array_equal(extract_features(frame), extract_features(list(frame))))

    def test_dimension_follows_z(self):
        self.assertEqual(extract_features(make_hand(OPEN)).shape, (42,))
        self.assertEqual(extract_features(make_hand(OPEN, z=True)).shape, (63,))

    def test_mixed_z_falls_back_to_2d(self):
        frame = make_hand(OPEN, z=True)
        frame[3] = frame[3][:2]
        self.assertEqual(extract_features(frame).shape, (42,))

    def test_accepts_landmark_objects(self):
        frame = make_hand(OPEN, z=True)
        objects = [SimpleNamespace(x=x, y=y, z=z) for x, y, z in frame]
        self.assertTrue(np.array_equal(extract_features(frame), extract_features(objects)))

    def test_extra_points_are_ignored(self):
        frame = make_hand(OPEN)
        self.assertTrue(np.array_equal(extract_features(frame),
                                       extract_features(frame + [(9.0, 9.0)])))

    def test_too_few_points(self):
        with self.assertRaises(InvalidFrame):
            extract_features(make_hand(OPEN)[:20])
        with self.assertRaises(InvalidFrame):
            extract_features([])

    def test_unsized_container(self):
        with self.assertRaises(InvalidFrame):
            extract_features(iter(make_hand(OPEN)))
        with self.assertRaises(InvalidFrame):
            extract_features(None)

    def test_non_finite_coordinates(self):
        frame = make_hand(OPEN)
        frame[8] = (float("nan"), 0.1)
        with self.assertRaises(InvalidFrame):
            extract_features(frame)

    def test_degenerate_scale(self):
        vec = extract_features([(0.3, 0.3)] * 21)
        self.assertTrue(np.array_equal(vec, np.zeros(42)))


if __name__ == "__main__":
    unittest.main()
