import unittest
from unittest import TestCase

from quantum_measurement.qrng.random_source import RandomSource


class TestRandomSource(TestCase):

    def test_same_seed_same_sequence(self):
        a = RandomSource(seed=42)
        b = RandomSource(seed=42)
        self.assertEqual([a.next_double() for _ in range(10)], [b.next_double() for _ in range(10)])

    def test_reset_replays_sequence(self):
        source = RandomSource(seed=7)
        first = [source.next_double() for _ in range(5)]
        source.reset()
        self.assertEqual(first, [source.next_double() for _ in range(5)])
        self.assertEqual(source.get_draws(), 5)

    def test_set_seed(self):
        source = RandomSource()
        source.set_seed(3)
        self.assertEqual(source.get_seed(), 3)
        reference = RandomSource(seed=3)
        self.assertEqual(source.next_double(), reference.next_double())
        with self.assertRaises(ValueError):
            source.set_seed("3")

    def test_set_random_seed_drops_seed(self):
        source = RandomSource(seed=1)
        source.set_random_seed()
        self.assertIsNone(source.get_seed())

    def test_values_in_range(self):
        source = RandomSource(seed=0)
        for _ in range(1000):
            u = source.next_double()
            self.assertTrue(0 <= u < 1)
            x = source.next_double_between(-2.0, 3.0)
            self.assertTrue(-2.0 <= x < 3.0)

    def test_next_boolean_extremes(self):
        source = RandomSource(seed=5)
        self.assertTrue(all(source.next_boolean(1.0) for _ in range(100)))
        self.assertFalse(any(source.next_boolean(0.0) for _ in range(100)))
        with self.assertRaises(ValueError):
            source.next_boolean(1.5)


if __name__ == '__main__':
    unittest.main()
