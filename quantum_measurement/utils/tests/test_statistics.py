import unittest
from unittest import TestCase

from quantum_measurement.utils.statistics import (
    AveragingCounter,
    estimate_bias,
    normalized_outcome_value,
    outcome_fraction,
)


class TestOutcomeValues(TestCase):

    def test_normalized_outcome_value(self):
        self.assertEqual(normalized_outcome_value(0, 0), 0.0)
        self.assertEqual(normalized_outcome_value(10, 0), 1.0)
        self.assertEqual(normalized_outcome_value(0, 10), -1.0)
        self.assertEqual(normalized_outcome_value(5, 5), 0.0)
        self.assertAlmostEqual(normalized_outcome_value(3, 1), 0.5)

    def test_outcome_fraction(self):
        self.assertEqual(outcome_fraction(0, 0), 0.0)
        self.assertEqual(outcome_fraction(1, 3), 0.25)

    def test_estimate_bias(self):
        self.assertAlmostEqual(estimate_bias([5, 7], 10), 0.6)
        self.assertEqual(estimate_bias([], 10), 0.0)
        with self.assertRaises(ValueError):
            estimate_bias([1], 0)


class TestAveragingCounter(TestCase):

    def test_first_sample_is_taken_directly(self):
        counter = AveragingCounter()
        for _ in range(5):
            counter.count_event()
        counter.step(0.5)
        self.assertAlmostEqual(counter.value, 10.0)

    def test_no_update_before_sample_period(self):
        counter = AveragingCounter()
        counter.count_event()
        counter.step(0.25)
        self.assertEqual(counter.value, 0.0)

    def test_exponential_moving_average(self):
        counter = AveragingCounter(total_averaging_period=2.0, count_sample_period=0.5)
        for _ in range(5):
            counter.count_event()
        counter.step(0.5)  # 10 events/s
        counter.step(0.5)  # 0 events/s, alpha = 0.25
        self.assertAlmostEqual(counter.value, 7.5)

    def test_converges_to_constant_rate(self):
        counter = AveragingCounter()
        for _ in range(100):
            for _ in range(3):
                counter.count_event()
            counter.step(0.5)
        self.assertAlmostEqual(counter.value, 6.0)

    def test_reset(self):
        counter = AveragingCounter()
        counter.count_event()
        counter.step(1.0)
        counter.reset()
        self.assertEqual(counter.value, 0.0)

    def test_invalid_periods(self):
        with self.assertRaises(ValueError):
            AveragingCounter(total_averaging_period=0)
        with self.assertRaises(ValueError):
            AveragingCounter(total_averaging_period=0.25, count_sample_period=0.5)


if __name__ == '__main__':
    unittest.main()
