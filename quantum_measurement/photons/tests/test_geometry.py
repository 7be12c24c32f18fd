import math
import unittest
from unittest import TestCase

import numpy as np

from quantum_measurement.photons.geometry import DOWN, RIGHT, UP, rotated, segment_intersection, vector2


class TestSegmentIntersection(TestCase):

    def test_crossing(self):
        hit = segment_intersection(vector2(0, 0), vector2(2, 0), vector2(1, -1), vector2(1, 1))
        self.assertIsNotNone(hit)
        point, t = hit
        np.testing.assert_allclose(point, [1, 0])
        self.assertAlmostEqual(t, 0.5)

    def test_segment_too_short(self):
        self.assertIsNone(segment_intersection(vector2(0, 0), vector2(2, 0), vector2(3, -1), vector2(3, 1)))
        self.assertIsNone(segment_intersection(vector2(0, 0), vector2(2, 0), vector2(1, 0.5), vector2(1, 1)))

    def test_endpoint_counts(self):
        hit = segment_intersection(vector2(0, 0), vector2(2, 0), vector2(2, -1), vector2(2, 1))
        self.assertIsNotNone(hit)
        self.assertAlmostEqual(hit[1], 1.0)

    def test_parallel_and_collinear(self):
        self.assertIsNone(segment_intersection(vector2(0, 0), vector2(2, 0), vector2(0, 1), vector2(2, 1)))
        self.assertIsNone(segment_intersection(vector2(0, 0), vector2(2, 0), vector2(1, 0), vector2(3, 0)))

    def test_zero_length(self):
        self.assertIsNone(segment_intersection(vector2(1, 0), vector2(1, 0), vector2(1, -1), vector2(1, 1)))
        self.assertIsNone(segment_intersection(vector2(0, 0), vector2(2, 0), vector2(1, 0), vector2(1, 0)))

    def test_rotated(self):
        np.testing.assert_allclose(rotated(RIGHT, math.pi / 2), UP, atol=1e-15)
        np.testing.assert_allclose(rotated(RIGHT, -math.pi / 2), DOWN, atol=1e-15)


if __name__ == '__main__':
    unittest.main()
