import unittest
from unittest import TestCase

from quantum_measurement.common.two_outcome_system import SharedBias, TwoOutcomeEnsemble, TwoOutcomeSystem
from quantum_measurement.exceptions import InvalidConfigurationError, InvalidStateError
from quantum_measurement.qrng.random_source import RandomSource
from quantum_measurement.utils.data_structures import UNDETERMINED, MeasurementState

VALUES = ("a", "b")


class TestTwoOutcomeSystem(TestCase):

    def setUp(self):
        self.random_source = RandomSource(seed=1234)
        self.bias = SharedBias(0.5)
        self.system = TwoOutcomeSystem(VALUES, "a", self.bias, self.random_source)

    def test_measure_is_idempotent(self):
        self.system.prepare_instantly()
        self.assertIs(self.system.current_state, UNDETERMINED)
        first = self.system.measure()
        draws = self.random_source.get_draws()
        second = self.system.measure()
        self.assertEqual(first, second)
        self.assertEqual(self.random_source.get_draws(), draws)

    def test_measured_value_never_undetermined(self):
        self.system.prepare_instantly()
        self.assertEqual(self.system.measured_value, "a")
        value = self.system.measure()
        self.assertEqual(self.system.measured_value, value)

    def test_forced_preparation(self):
        self.system.prepare(forced_value="b")
        self.assertEqual(self.system.current_state, "b")
        self.assertEqual(self.system.measure(), "b")

    def test_extreme_bias(self):
        self.bias.value = 1.0
        for _ in range(50):
            self.system.prepare_instantly()
            self.assertEqual(self.system.measure(), "a")
        self.bias.value = 0.0
        for _ in range(50):
            self.system.prepare_instantly()
            self.assertEqual(self.system.measure(), "b")

    def test_same_seed_reproduces_run(self):
        def run(seed):
            system = TwoOutcomeSystem(VALUES, "a", SharedBias(0.3), RandomSource(seed=seed))
            outcomes = []
            for _ in range(100):
                system.prepare_instantly()
                outcomes.append(system.measure())
            return outcomes
        self.assertEqual(run(99), run(99))

    def test_prepare_then_measure_in_strict_mode(self):
        system = TwoOutcomeSystem(VALUES, "a", self.bias, self.random_source, strict=True)
        system.prepare()
        self.assertEqual(system.measurement_state, MeasurementState.READY_TO_BE_MEASURED)
        self.assertIn(system.measure(), VALUES)

    def test_timed_preparation_on_request(self):
        self.system.prepare(preparation_time=1.0)
        self.assertEqual(self.system.measurement_state, MeasurementState.PREPARING_TO_BE_MEASURED)
        self.system.step(1.0)
        self.assertEqual(self.system.measurement_state, MeasurementState.READY_TO_BE_MEASURED)

    def test_hide_keeps_value(self):
        self.system.prepare()
        value = self.system.measure()
        self.assertEqual(self.system.measurement_state, MeasurementState.MEASURED_AND_REVEALED)
        self.system.hide()
        self.assertEqual(self.system.measurement_state, MeasurementState.READY_TO_BE_MEASURED)
        self.assertEqual(self.system.current_state, value)

    def test_invalid_initial_state(self):
        with self.assertRaises(InvalidConfigurationError):
            TwoOutcomeSystem(VALUES, "c", self.bias, self.random_source)

    def test_invalid_immediate_value(self):
        with self.assertRaises(ValueError):
            self.system.set_measurement_value_immediate("c")


class TestTwoOutcomeEnsemble(TestCase):

    def setUp(self):
        self.random_source = RandomSource(seed=2024)
        self.bias = SharedBias(0.3)
        self.ensemble = TwoOutcomeEnsemble(VALUES, UNDETERMINED, self.bias, self.random_source,
                                           max_systems=10000)

    def test_law_of_large_numbers(self):
        result = self.ensemble.measure_all()
        self.assertEqual(result.length, 10000)
        self.assertEqual(result.count_a + result.count_b, 10000)
        self.assertAlmostEqual(result.count_a / 10000, 0.3, delta=0.02)

    def test_order_is_preserved(self):
        self.ensemble.measure_all()
        before = list(self.ensemble.measured_values)
        self.ensemble.measure_all()
        self.assertEqual(before, self.ensemble.measured_values)

    def test_listeners_run_after_mutation_in_order(self):
        calls = []
        self.ensemble.add_data_changed_listener(lambda e: calls.append(("first", e.count_a + e.count_b)))
        self.ensemble.add_data_changed_listener(lambda e: calls.append(("second", e.count_a + e.count_b)))
        self.ensemble.measure_all()
        self.assertEqual(calls, [("first", 10000), ("second", 10000)])

    def test_remove_listener(self):
        calls = []
        listener = calls.append
        self.ensemble.add_data_changed_listener(listener)
        self.ensemble.remove_data_changed_listener(listener)
        self.ensemble.measure_all()
        self.assertEqual(calls, [])

    def test_measure_during_preparation_strict(self):
        ensemble = TwoOutcomeEnsemble(VALUES, "a", self.bias, self.random_source, max_systems=10, strict=True)
        ensemble.prepare()
        self.assertTrue(ensemble.is_preparing)
        with self.assertRaises(InvalidStateError):
            ensemble.measure_all()
        self.assertTrue(ensemble.is_preparing)

    def test_measure_during_preparation_fallback(self):
        ensemble = TwoOutcomeEnsemble(VALUES, "a", self.bias, self.random_source, max_systems=10)
        ensemble.prepare()
        with self.assertLogs(ensemble.logger, level='WARNING'):
            result = ensemble.measure_all()
        self.assertEqual(result.count_a + result.count_b, 10)
        self.assertEqual(ensemble.measurement_state, MeasurementState.MEASURED_AND_REVEALED)

    def test_timed_preparation_measures_when_ready(self):
        ensemble = TwoOutcomeEnsemble(VALUES, "a", self.bias, self.random_source, max_systems=10)
        ensemble.prepare(measure_when_prepared=True)
        ensemble.step(0.5)
        self.assertTrue(ensemble.is_preparing)
        self.assertEqual(ensemble.count_a + ensemble.count_b, 0)
        ensemble.step(0.6)
        self.assertFalse(ensemble.is_preparing)
        self.assertEqual(ensemble.count_a + ensemble.count_b, 10)

    def test_active_systems(self):
        ensemble = TwoOutcomeEnsemble(VALUES, UNDETERMINED, self.bias, self.random_source, max_systems=100,
                                      number_of_active_systems=10, allowed_quantities=(10, 100))
        result = ensemble.measure_all()
        self.assertEqual(result.length, 10)
        self.assertTrue(all(v is UNDETERMINED for v in ensemble.measured_values[10:]))
        ensemble.number_of_active_systems = 100
        self.assertEqual(ensemble.number_of_active_systems, 100)
        with self.assertRaises(InvalidConfigurationError):
            ensemble.number_of_active_systems = 50

    def test_set_measured_values_immediate(self):
        self.ensemble.prepare()
        self.ensemble.set_measured_values_immediate("b")
        self.assertFalse(self.ensemble.is_preparing)
        self.assertEqual(self.ensemble.count_b, 10000)

    def test_reset(self):
        self.ensemble.measure_all()
        self.ensemble.reset()
        self.assertEqual(self.ensemble.count_a + self.ensemble.count_b, 0)
        self.assertEqual(self.ensemble.measurement_state, MeasurementState.READY_TO_BE_MEASURED)

    def test_invalid_configuration(self):
        with self.assertRaises(InvalidConfigurationError):
            TwoOutcomeEnsemble(("a", "a"), "a", self.bias, self.random_source)
        with self.assertRaises(InvalidConfigurationError):
            TwoOutcomeEnsemble(("a", "b", "c"), "a", self.bias, self.random_source)
        with self.assertRaises(InvalidConfigurationError):
            TwoOutcomeEnsemble(VALUES, "a", self.bias, self.random_source, max_systems=0)

    def test_bias_validation(self):
        with self.assertRaises(ValueError):
            self.bias.value = -0.1


if __name__ == '__main__':
    unittest.main()
