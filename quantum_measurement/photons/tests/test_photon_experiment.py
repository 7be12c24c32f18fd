import unittest
from unittest import TestCase

from quantum_measurement.photons.geometry import DOWN, RIGHT, vector2
from quantum_measurement.photons.laser import Laser
from quantum_measurement.photons.optical_elements import InteractionType
from quantum_measurement.photons.photon import PHOTON_SPEED, Photon
from quantum_measurement.photons.photon_experiment import PhotonsExperiment
from quantum_measurement.qrng.random_source import RandomSource
from quantum_measurement.exceptions import InvalidConfigurationError
from quantum_measurement.utils.data_structures import (
    DisplayMode,
    PhotonEmissionMode,
    PresetPolarizationDirection,
)
from quantum_measurement.utils.logging_setup import DEBUG_L3

DT = 1 / 60


def run(experiment, seconds, check=None):
    for _ in range(int(seconds / DT)):
        experiment.step(DT)
        if check is not None:
            check()


class TestSinglePhotonExperiment(TestCase):

    def make_experiment(self, polarization, seed=9, **kwargs):
        info = {"polarization_direction": polarization}
        info.update(kwargs)
        return PhotonsExperiment(info, RandomSource(seed=seed))

    def test_horizontal_photon_reaches_horizontal_detector(self):
        experiment = self.make_experiment(PresetPolarizationDirection.HORIZONTAL)
        experiment.emit_photon()
        run(experiment, 2.0)
        self.assertEqual(experiment.horizontal_polarization_detector.detection_count, 1)
        self.assertEqual(experiment.vertical_polarization_detector.detection_count, 0)
        self.assertEqual(experiment.photons, [])
        self.assertEqual(experiment.normalized_outcome_value, 1.0)

    def test_vertical_photon_reaches_vertical_detector(self):
        experiment = self.make_experiment(PresetPolarizationDirection.VERTICAL)
        experiment.emit_photon()
        run(experiment, 2.0)
        self.assertEqual(experiment.vertical_polarization_detector.detection_count, 1)
        self.assertEqual(experiment.normalized_outcome_value, -1.0)

    def test_split_photon_has_two_trajectories(self):
        experiment = self.make_experiment(PresetPolarizationDirection.FORTY_FIVE_DEGREES)
        photon = experiment.emit_photon()
        run(experiment, 0.8)
        self.assertEqual(set(photon.possible_states), {"horizontal", "vertical"})
        for state in photon.possible_states.values():
            self.assertAlmostEqual(state.probability, 0.5)

    def test_probability_conservation_every_frame(self):
        experiment = self.make_experiment(PresetPolarizationDirection.CUSTOM, custom_polarization_angle_deg=30)
        for _ in range(50):
            experiment.emit_photon()
        run(experiment, 2.5, check=lambda: self.assertTrue(experiment.probability_is_conserved()))

    def test_forty_five_degree_statistics(self):
        experiment = self.make_experiment(PresetPolarizationDirection.FORTY_FIVE_DEGREES, seed=31)
        for _ in range(400):
            experiment.emit_photon()
        run(experiment, 2.0)
        h = experiment.horizontal_polarization_detector.detection_count
        v = experiment.vertical_polarization_detector.detection_count
        self.assertEqual(h + v, 400)
        self.assertAlmostEqual(h / 400, 0.5, delta=0.1)

    def test_changing_polarization_clears_photons_and_counts(self):
        experiment = self.make_experiment(PresetPolarizationDirection.HORIZONTAL)
        experiment.emit_photon()
        run(experiment, 2.0)
        experiment.emit_photon()
        experiment.set_polarization(PresetPolarizationDirection.CUSTOM, 60)
        self.assertEqual(experiment.photons, [])
        self.assertEqual(experiment.horizontal_polarization_detector.detection_count, 0)
        self.assertEqual(experiment.laser.polarization_angle, 60)

    def test_paused_experiment_does_not_move(self):
        experiment = self.make_experiment(PresetPolarizationDirection.HORIZONTAL)
        photon = experiment.emit_photon()
        position = photon.possible_states["emitted"].position.copy()
        experiment.set_playing(False)
        run(experiment, 1.0)
        self.assertTrue((photon.possible_states["emitted"].position == position).all())

    def test_photon_leaving_the_area_is_retired(self):
        experiment = self.make_experiment(PresetPolarizationDirection.HORIZONTAL)
        experiment.add_photon(Photon(0, vector2(0.45, 0.3), RIGHT))
        with self.assertLogs(experiment.logger, level='WARNING'):
            experiment.step(0.5)
        self.assertEqual(experiment.photons, [])
        self.assertEqual(experiment.lost_count, 1)
        self.assertFalse(experiment.probability_is_conserved())

    def test_photon_pool_limit(self):
        experiment = self.make_experiment(PresetPolarizationDirection.HORIZONTAL, max_photons=2)
        self.assertIsNotNone(experiment.emit_photon())
        self.assertIsNotNone(experiment.emit_photon())
        with self.assertLogs(experiment.logger, level='WARNING'):
            self.assertIsNone(experiment.emit_photon())

    def test_every_photon_detected_at_thirty_frames_per_second(self):
        for seed in range(5):
            experiment = self.make_experiment(PresetPolarizationDirection.HORIZONTAL, seed=seed)
            for _ in range(40):
                experiment.emit_photon()
            for _ in range(120):
                experiment.step(1 / 30)
            self.assertEqual(experiment.horizontal_polarization_detector.detection_count, 40)
            self.assertEqual(experiment.lost_count, 0)
            self.assertEqual(experiment.photons, [])

    def test_split_photons_all_detected_at_thirty_frames_per_second(self):
        experiment = self.make_experiment(PresetPolarizationDirection.FORTY_FIVE_DEGREES, seed=3)
        for _ in range(100):
            experiment.emit_photon()
        for _ in range(120):
            experiment.step(1 / 30)
            self.assertTrue(experiment.probability_is_conserved())
        h = experiment.horizontal_polarization_detector.detection_count
        v = experiment.vertical_polarization_detector.detection_count
        self.assertEqual(h + v, experiment.launched_count)
        self.assertEqual(experiment.detected_count, 100)

    def test_trajectory_starting_on_detector_line_is_detected(self):
        experiment = self.make_experiment(PresetPolarizationDirection.HORIZONTAL)
        photon = Photon(0, vector2(0.125, -0.075), DOWN)
        photon.possible_states["emitted"].last_element = experiment.mirror
        experiment.add_photon(photon)
        experiment.step(1 / 30)
        self.assertEqual(experiment.horizontal_polarization_detector.detection_count, 1)
        self.assertEqual(experiment.lost_count, 0)
        self.assertTrue(experiment.probability_is_conserved())

    def test_nearest_element_wins(self):
        experiment = self.make_experiment(PresetPolarizationDirection.FORTY_FIVE_DEGREES)
        experiment.optical_elements.reverse()
        photon = Photon(45, vector2(-0.02, 0.0), RIGHT)
        experiment.add_photon(photon)
        dt = 0.2 / PHOTON_SPEED

        # One step crosses the beam splitter (t=0.1) and the mirror (t=0.725)
        interactions = experiment.compute_interactions(photon, dt)
        result = interactions["emitted"]
        self.assertIs(result.element, experiment.polarizing_beam_splitter)
        self.assertEqual(result.interaction_type, InteractionType.SPLIT)
        self.assertAlmostEqual(result.t, 0.1)

        with self.assertLogs(experiment.logger, level=DEBUG_L3) as logs:
            experiment.step(dt)
        self.assertTrue(any("split" in line for line in logs.output))
        self.assertEqual(set(photon.possible_states), {"horizontal", "vertical"})
        for state in photon.possible_states.values():
            self.assertIs(state.last_element, experiment.polarizing_beam_splitter)
        self.assertAlmostEqual(photon.possible_states["horizontal"].position[0], 0.18)

    def test_nearest_element_wins_between_mirror_and_detector(self):
        experiment = self.make_experiment(PresetPolarizationDirection.HORIZONTAL)
        photon = Photon(0, vector2(0.125, 0.01), DOWN)
        # Crosses the mirror at t=0.1 and the horizontal detector at t=0.85
        result = experiment.compute_interactions(photon, 0.1 / PHOTON_SPEED)["emitted"]
        self.assertIs(result.element, experiment.mirror)
        self.assertEqual(result.interaction_type, InteractionType.REFLECTED)

    def test_ledger_cleared_by_reset(self):
        experiment = self.make_experiment(PresetPolarizationDirection.HORIZONTAL)
        experiment.emit_photon()
        run(experiment, 2.0)
        self.assertEqual((experiment.launched_count, experiment.detected_count), (1, 1))
        experiment.reset()
        self.assertEqual((experiment.launched_count, experiment.detected_count, experiment.lost_count), (0, 0, 0))

    def test_reset(self):
        experiment = self.make_experiment(PresetPolarizationDirection.HORIZONTAL)
        laser = experiment.laser
        experiment.emit_photon()
        run(experiment, 2.0)
        experiment.set_splitter_axis(30)
        experiment.reset()
        self.assertIs(experiment.laser, laser)
        self.assertEqual(experiment.horizontal_polarization_detector.detection_count, 0)
        self.assertEqual(experiment.polarizing_beam_splitter.axis_angle, 0)
        self.assertTrue(experiment.is_playing)


class TestManyPhotonExperiment(TestCase):

    def test_rates(self):
        experiment = PhotonsExperiment({"emission_mode": PhotonEmissionMode.MANY_PHOTONS, "emission_rate_hz": 100},
                                       RandomSource(seed=4))
        self.assertEqual(experiment.horizontal_polarization_detector.display_mode, DisplayMode.RATE)
        run(experiment, 10.0)
        h = experiment.horizontal_polarization_detector.detection_rate
        v = experiment.vertical_polarization_detector.detection_rate
        self.assertGreater(h, 0)
        self.assertGreater(v, 0)
        self.assertLess(abs(experiment.normalized_outcome_value), 0.5)

    def test_polarization_change_keeps_counts(self):
        experiment = PhotonsExperiment({"emission_mode": PhotonEmissionMode.MANY_PHOTONS, "emission_rate_hz": 100},
                                       RandomSource(seed=4))
        run(experiment, 3.0)
        in_flight = len(experiment.photons)
        experiment.set_polarization(PresetPolarizationDirection.VERTICAL)
        self.assertEqual(len(experiment.photons), in_flight)


class TestLaser(TestCase):

    def setUp(self):
        self.laser = Laser(vector2(-0.15, 0), RandomSource(seed=6))

    def test_beam_offset(self):
        for _ in range(200):
            photon = self.laser.emit_photon()
            position = photon.possible_states["emitted"].position
            self.assertEqual(position[0], -0.15)
            self.assertLessEqual(abs(position[1]), 0.02)
            self.assertEqual(photon.polarization_angle, 45)

    def test_single_mode_does_not_emit_on_step(self):
        self.laser.set_emission_rate(100)
        self.assertEqual(self.laser.step(1.0), [])

    def test_many_mode_emits_on_step(self):
        laser = Laser(vector2(0, 0), RandomSource(seed=1), emission_mode=PhotonEmissionMode.MANY_PHOTONS,
                      emission_rate=10)
        emitted = sum(len(laser.step(0.05)) for _ in range(200))
        self.assertGreater(emitted, 50)

    def test_rate_validation(self):
        with self.assertRaises(InvalidConfigurationError):
            self.laser.set_emission_rate(250)
        with self.assertRaises(InvalidConfigurationError):
            self.laser.set_polarization(PresetPolarizationDirection.CUSTOM, 200)

    def test_reset(self):
        self.laser.set_polarization(PresetPolarizationDirection.VERTICAL)
        self.laser.emit_photon()
        self.laser.reset()
        self.assertEqual(self.laser.polarization_angle, 45)
        self.assertEqual(self.laser.emitted_count, 0)


if __name__ == '__main__':
    unittest.main()
