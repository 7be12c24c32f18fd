"""Photon polarization experiment: laser, beam splitter, mirror and two detectors."""
import logging
from typing import Dict, List, Optional, Tuple, Union

import numpy as np

from ..qrng.random_source import RandomSource
from ..utils.data_structures import (
    DetectionDirection,
    DisplayMode,
    PhotonEmissionMode,
    PhotonExperimentInfo,
    PresetPolarizationDirection,
    build_info,
)
from ..utils.statistics import normalized_outcome_value
from .geometry import vector2
from .laser import Laser
from .optical_elements import (
    InteractionResult,
    InteractionType,
    Mirror,
    OpticalElement,
    PhotonDetector,
    PolarizingBeamSplitter,
)
from .photon import PHOTON_SPEED, Photon, PhotonMotionState

LASER_POSITION = (-0.15, 0.0)
BEAM_SPLITTER_POSITION = (0.0, 0.0)
MIRROR_POSITION = (0.125, 0.0)
VERTICAL_DETECTOR_POSITION = (0.0, 0.2)
HORIZONTAL_DETECTOR_POSITION = (0.125, -0.075)
# Photons are retired once every trajectory has left this square around the origin
BOUNDS_HALF_WIDTH = 0.5

PhotonInteractions = Dict[str, InteractionResult]


class PhotonsExperiment:
    """
    Per-frame photon simulation.

    Each step the laser may emit, then every active photon is tested against every
    optical element. All interactions of the frame are computed before any of them is
    applied, so detectors and photons only change in the commit phase.
    """

    def __init__(self,
                 info: Optional[Union[PhotonExperimentInfo, dict]] = None,
                 random_source: Optional[RandomSource] = None):
        self.info = build_info(PhotonExperimentInfo, info)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.random_source = random_source if random_source is not None else RandomSource()

        self.emission_mode = self.info.emission_mode
        display_mode = DisplayMode.COUNT if self.emission_mode == PhotonEmissionMode.SINGLE_PHOTON \
            else DisplayMode.RATE

        self.laser = Laser(
            vector2(*LASER_POSITION), self.random_source,
            emission_mode=self.emission_mode,
            emission_rate=self.info.emission_rate_hz,
            polarization_direction=self.info.polarization_direction,
            custom_polarization_angle=self.info.custom_polarization_angle_deg,
        )
        self.polarizing_beam_splitter = PolarizingBeamSplitter(vector2(*BEAM_SPLITTER_POSITION))
        self.set_splitter_axis(self.info.splitter_axis_deg)
        self.mirror = Mirror(vector2(*MIRROR_POSITION))
        self.vertical_polarization_detector = PhotonDetector(
            vector2(*VERTICAL_DETECTOR_POSITION), DetectionDirection.UP, display_mode, name="vertical")
        self.horizontal_polarization_detector = PhotonDetector(
            vector2(*HORIZONTAL_DETECTOR_POSITION), DetectionDirection.DOWN, display_mode, name="horizontal")

        self.optical_elements: List[OpticalElement] = [
            self.polarizing_beam_splitter,
            self.mirror,
            self.horizontal_polarization_detector,
            self.vertical_polarization_detector,
        ]

        self.photons: List[Photon] = []
        self.is_playing = True
        self._reset_ledger()
        self.logger.info(f"Photon experiment initialized in {self.emission_mode.value} mode")

    @property
    def detectors(self) -> List[PhotonDetector]:
        return [self.horizontal_polarization_detector, self.vertical_polarization_detector]

    @property
    def normalized_outcome_value(self) -> float:
        """(h - v) / (h + v) from counts in single-photon mode and rates in many-photon mode."""
        if self.emission_mode == PhotonEmissionMode.SINGLE_PHOTON:
            h = self.horizontal_polarization_detector.detection_count
            v = self.vertical_polarization_detector.detection_count
        else:
            h = self.horizontal_polarization_detector.detection_rate
            v = self.vertical_polarization_detector.detection_rate
        return normalized_outcome_value(h, v)

    # ----------------------------------------------------------------------------------
    # Configuration
    # ----------------------------------------------------------------------------------

    def set_splitter_axis(self, angle_degrees: float) -> None:
        if not (-90 <= angle_degrees <= 90):
            raise ValueError("Splitter axis must be between -90 and 90 degrees.")
        self.polarizing_beam_splitter.preset_axis = PresetPolarizationDirection.HORIZONTAL if angle_degrees == 0 \
            else PresetPolarizationDirection.CUSTOM
        self.polarizing_beam_splitter.custom_axis_angle = angle_degrees

    def set_polarization(self, direction: PresetPolarizationDirection, custom_angle: Optional[float] = None) -> None:
        """Change the laser polarization; in single-photon mode photons in flight and counts are cleared."""
        self.laser.set_polarization(direction, custom_angle)
        if self.emission_mode == PhotonEmissionMode.SINGLE_PHOTON:
            self.photons.clear()
            self._reset_ledger()
            for detector in self.detectors:
                detector.reset_detection_count()

    def set_emission_rate(self, rate: float) -> None:
        self.laser.set_emission_rate(rate)

    def set_playing(self, playing: bool) -> None:
        self.is_playing = playing

    # ----------------------------------------------------------------------------------
    # Emission
    # ----------------------------------------------------------------------------------

    def add_photon(self, photon: Photon) -> bool:
        """Launch a photon into the apparatus; False if the photon pool is full."""
        if len(self.photons) >= self.info.max_photons:
            self.logger.warning("Photon pool exhausted, photon dropped")
            return False
        self.photons.append(photon)
        self.launched_count += 1
        return True

    def emit_photon(self) -> Optional[Photon]:
        """Emit one photon now; None if the photon pool is full."""
        photon = self.laser.emit_photon()
        return photon if self.add_photon(photon) else None

    # ----------------------------------------------------------------------------------
    # Stepping
    # ----------------------------------------------------------------------------------

    def compute_interactions(self, photon: Photon, dt: float) -> PhotonInteractions:
        """Nearest interaction (smallest path parameter) over all elements, per trajectory."""
        nearest: PhotonInteractions = {}
        for element in self.optical_elements:
            for label, result in element.test_for_photon_interaction(photon, dt).items():
                if label not in nearest or result.t < nearest[label].t:
                    nearest[label] = result
        return nearest

    def step(self, dt: float) -> None:
        if not self.is_playing:
            return

        for photon in self.laser.step(dt):
            self.add_photon(photon)

        planned: List[Tuple[Photon, PhotonInteractions]] = [
            (photon, self.compute_interactions(photon, dt)) for photon in self.photons if photon.active
        ]

        for photon, interactions in planned:
            self._commit(photon, interactions, dt)

        self.photons = [photon for photon in self.photons if photon.active]
        for detector in self.detectors:
            detector.step(dt)

    def _commit(self, photon: Photon, interactions: PhotonInteractions, dt: float) -> None:
        detections: List[Tuple[str, InteractionResult]] = []

        for label in list(photon.possible_states):
            state = photon.possible_states[label]
            result = interactions.get(label)
            if result is None:
                state.step(dt)
                continue

            remaining = PHOTON_SPEED * dt * (1 - result.t)
            if result.interaction_type == InteractionType.REFLECTED:
                state.position = result.point + result.direction * remaining
                state.direction = result.direction
                state.last_element = result.element
            elif result.interaction_type == InteractionType.SPLIT:
                children = {
                    child_label: PhotonMotionState(result.point + direction * remaining, direction, weight,
                                                   last_element=result.element)
                    for child_label, (direction, weight) in result.split_weights.items()
                }
                photon.split(label, children)
            elif result.interaction_type == InteractionType.ABSORBED:
                state.position = result.point
                detections.append((label, result))

            self.logger.debug3(f"{label}: {result.interaction_type.value} at {result.point} (t={result.t:.3f})")

        for label, result in sorted(detections, key=lambda item: item[1].t):
            state = photon.possible_states.get(label)
            if state is None or not photon.active:
                continue
            if self.random_source.next_double() < state.probability / photon.in_flight_weight:
                result.element.count_event()
                photon.mark_detected()
                self.detected_count += 1
                self.logger.debug(f"Photon detected by {result.element.name}")
            else:
                photon.drop_state(label)

        if photon.active and all(self._out_of_bounds(s.position) for s in photon.possible_states.values()):
            self.logger.warning(f"Photon left the apparatus undetected with weight {photon.in_flight_weight:.3f}")
            photon.retire()
            self.lost_count += 1

    @staticmethod
    def _out_of_bounds(position: np.ndarray) -> bool:
        return bool(np.any(np.abs(position) > BOUNDS_HALF_WIDTH))

    def _reset_ledger(self) -> None:
        self.launched_count = 0
        self.detected_count = 0
        self.lost_count = 0

    def probability_is_conserved(self) -> bool:
        """
        Every launched photon is detected or still in flight with its full weight.

        A photon retired out of bounds before reaching a detector breaks conservation.
        """
        in_flight = [photon for photon in self.photons if photon.active]
        if self.lost_count > 0:
            return False
        if self.launched_count != self.detected_count + len(in_flight):
            return False
        return all(photon.is_conserved() for photon in in_flight)

    def reset(self) -> None:
        self.laser.reset()
        self.photons.clear()
        self._reset_ledger()
        for detector in self.detectors:
            detector.reset()
        self.set_splitter_axis(self.info.splitter_axis_deg)
        self.is_playing = True
        self.logger.info("Photon experiment reset")
