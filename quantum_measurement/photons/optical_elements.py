"""Optical elements photons can interact with."""
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

import numpy as np

from ..exceptions import InvalidConfigurationError
from ..utils.data_structures import DetectionDirection, DisplayMode, PresetPolarizationDirection
from ..utils.statistics import MAX_DISPLAYED_COUNT, AveragingCounter
from .geometry import DOWN, RIGHT, UP, rotated, vector2
from .photon import Photon, PhotonMotionState

MIRROR_LENGTH = 0.095  # meters
BEAM_SPLITTER_SIZE = (0.1, 0.1)  # meters
PHOTON_BEAM_WIDTH = 0.04  # meters
DETECTOR_APERTURE = PHOTON_BEAM_WIDTH * 1.75

TRANSMITTED_LABEL = "horizontal"
REFLECTED_LABEL = "vertical"

# Malus fractions this close to 0 or 1 are taken as exact
WEIGHT_SNAP = 1e-12


class InteractionType(Enum):
    NONE = "none"
    REFLECTED = "reflected"
    SPLIT = "split"
    ABSORBED = "absorbed"


@dataclass
class InteractionResult:
    """
    Interaction of one candidate trajectory with one element during a time step.

    `t` is the fraction of the step travelled before the interaction. For SPLIT results
    `split_weights` maps child labels to (direction, weight).
    """
    interaction_type: InteractionType
    t: float = 1.0
    point: Optional[np.ndarray] = None
    direction: Optional[np.ndarray] = None
    split_weights: Dict[str, Tuple[np.ndarray, float]] = field(default_factory=dict)
    element: Optional["OpticalElement"] = None


class OpticalElement(ABC):
    """A fixed line segment that candidate trajectories are tested against."""

    def __init__(self, line_start: np.ndarray, line_end: np.ndarray):
        if np.allclose(line_start, line_end):
            raise InvalidConfigurationError(f"{self.__class__.__name__} needs a non-zero length surface.")
        self.line_start = np.array(line_start, dtype=float)
        self.line_end = np.array(line_end, dtype=float)

    def _hit(self, state: PhotonMotionState, dt: float) -> Optional[Tuple[np.ndarray, float]]:
        if state.last_element is self:
            return None
        return state.travel_path_intersection(self.line_start, self.line_end, dt)

    def test_for_photon_interaction(self, photon: Photon, dt: float) -> Dict[str, InteractionResult]:
        """
        Test every candidate trajectory of a photon against this element.

        Pure function of the photon and the element: nothing is mutated. Trajectories
        that do not interact are left out of the returned map, and so are trajectories
        whose last interaction was with this element.
        """
        results = {}
        for label, state in photon.possible_states.items():
            hit = self._hit(state, dt)
            if hit is None:
                continue
            result = self._interact(photon, state, hit[0], hit[1])
            if result.interaction_type != InteractionType.NONE:
                result.element = self
                results[label] = result
        return results

    @abstractmethod
    def _interact(self, photon: Photon, state: PhotonMotionState,
                  point: np.ndarray, t: float) -> InteractionResult:
        """Interaction of a trajectory known to cross this element at `point`."""
        pass


class Mirror(OpticalElement):
    """Plane mirror at -45 degrees reflecting every incoming photon downwards."""

    def __init__(self, center_position: np.ndarray, length: float = MIRROR_LENGTH):
        self.center_position = np.array(center_position, dtype=float)
        half = rotated(vector2(length / 2, 0), -math.pi / 4)
        super().__init__(self.center_position + half, self.center_position - half)
        self.reflection_direction = DOWN

    def _interact(self, photon, state, point, t):
        return InteractionResult(InteractionType.REFLECTED, t=t, point=point,
                                 direction=self.reflection_direction.copy())


class PolarizingBeamSplitter(OpticalElement):
    """
    Transmits the component polarized along its axis and reflects the orthogonal one up.

    For a trajectory of weight w and relative angle d between the photon polarization and
    the splitter axis (Malus law):
        transmitted = w * cos^2(d), reflected = w * sin^2(d)
    """

    def __init__(self, center_position: np.ndarray,
                 preset_axis: PresetPolarizationDirection = PresetPolarizationDirection.HORIZONTAL,
                 custom_axis_angle: float = 0.0):
        self.center_position = np.array(center_position, dtype=float)
        width, height = BEAM_SPLITTER_SIZE
        half = vector2(width / 2, height / 2)
        super().__init__(self.center_position - half, self.center_position + half)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.preset_axis = preset_axis
        self.custom_axis_angle = custom_axis_angle
        self.transmission_direction = RIGHT
        self.reflection_direction = UP

    @property
    def axis_angle(self) -> float:
        """Polarization axis in degrees."""
        if self.preset_axis == PresetPolarizationDirection.CUSTOM:
            return self.custom_axis_angle
        return self.preset_axis.angle_degrees

    def split_weights(self, polarization_angle: float, weight: float = 1.0) -> Tuple[float, float]:
        """(transmitted, reflected) weights for a trajectory of the given weight."""
        delta = math.radians(polarization_angle - self.axis_angle)
        fraction = math.cos(delta) ** 2
        if fraction < WEIGHT_SNAP:
            fraction = 0.0
        elif fraction > 1 - WEIGHT_SNAP:
            fraction = 1.0
        transmitted = weight * fraction
        return transmitted, weight - transmitted

    def _interact(self, photon, state, point, t):
        transmitted, reflected = self.split_weights(photon.polarization_angle, state.probability)
        self.logger.debug(f"Split at {point}: transmitted={transmitted:.3f}, reflected={reflected:.3f}")
        return InteractionResult(
            InteractionType.SPLIT, t=t, point=point,
            split_weights={
                TRANSMITTED_LABEL: (self.transmission_direction.copy(), transmitted),
                REFLECTED_LABEL: (self.reflection_direction.copy(), reflected),
            },
        )


class PhotonDetector(OpticalElement):
    """
    Horizontal detector aperture accepting photons that travel in its detection direction.

    The detection count saturates at MAX_DISPLAYED_COUNT; the rate is an averaged
    events-per-second value.
    """

    def __init__(self, position: np.ndarray, detection_direction: DetectionDirection,
                 display_mode: DisplayMode = DisplayMode.COUNT, name: str = "detector"):
        self.position = np.array(position, dtype=float)
        self.aperture_diameter = DETECTOR_APERTURE
        offset = vector2(self.aperture_diameter / 2, 0)
        super().__init__(self.position - offset, self.position + offset)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}_{name}")
        self.name = name
        self.detection_direction = detection_direction
        self.display_mode = display_mode
        self.detection_count = 0
        self.detection_rate_counter = AveragingCounter()

    @property
    def detection_vector(self) -> np.ndarray:
        return UP if self.detection_direction == DetectionDirection.UP else DOWN

    @property
    def detection_rate(self) -> float:
        return min(self.detection_rate_counter.value, MAX_DISPLAYED_COUNT)

    @property
    def displayed_value(self) -> float:
        return self.detection_count if self.display_mode == DisplayMode.COUNT else self.detection_rate

    def _interact(self, photon, state, point, t):
        if float(np.dot(state.direction, self.detection_vector)) <= 0:
            return InteractionResult(InteractionType.NONE)
        return InteractionResult(InteractionType.ABSORBED, t=t, point=point)

    def count_event(self) -> None:
        self.detection_count = min(self.detection_count + 1, MAX_DISPLAYED_COUNT)
        self.detection_rate_counter.count_event()
        self.logger.debug(f"Photon detected, count={self.detection_count}")

    def step(self, dt: float) -> None:
        self.detection_rate_counter.step(dt)

    def reset_detection_count(self) -> None:
        self.detection_count = 0

    def reset(self) -> None:
        self.detection_count = 0
        self.detection_rate_counter.reset()
