"""Laser emitting polarized photons."""
import logging
import math
from typing import List, Optional

import numpy as np

from ..exceptions import InvalidConfigurationError
from ..qrng.random_source import RandomSource
from ..utils.data_structures import PhotonEmissionMode, PresetPolarizationDirection
from .geometry import RIGHT
from .optical_elements import PHOTON_BEAM_WIDTH
from .photon import Photon

MAX_PHOTON_EMISSION_RATE = 200  # photons per second


class Laser:
    """
    Photon source.

    In single-photon mode photons are emitted on demand with emit_photon(). In
    many-photon mode step() emits at `emission_rate` photons per second. Each photon
    starts at a random vertical offset within the beam width.
    """

    def __init__(self,
                 position: np.ndarray,
                 random_source: RandomSource,
                 emission_mode: PhotonEmissionMode = PhotonEmissionMode.SINGLE_PHOTON,
                 emission_rate: float = 0.0,
                 polarization_direction: PresetPolarizationDirection = PresetPolarizationDirection.FORTY_FIVE_DEGREES,
                 custom_polarization_angle: float = 45.0):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.position = np.array(position, dtype=float)
        self.random_source = random_source
        self.emission_direction = RIGHT
        self.emission_mode = emission_mode
        self.emitted_beam_width = PHOTON_BEAM_WIDTH

        self._default_emission_rate = emission_rate
        self._default_polarization_direction = polarization_direction
        self._default_custom_polarization_angle = custom_polarization_angle

        self.emission_rate = 0.0
        self.time_between_photons = math.inf
        self.time_since_last_photon = math.inf
        self.set_emission_rate(emission_rate)
        self.polarization_direction = polarization_direction
        self.custom_polarization_angle = custom_polarization_angle

        self.emitted_count = 0
        self.logger.info(f"Laser initialized in {emission_mode.value} mode at {tuple(self.position)}")

    @property
    def polarization_angle(self) -> float:
        """Polarization of emitted photons in degrees."""
        if self.polarization_direction == PresetPolarizationDirection.CUSTOM:
            return self.custom_polarization_angle
        return self.polarization_direction.angle_degrees

    def set_emission_rate(self, rate: float) -> None:
        if not (0 <= rate <= MAX_PHOTON_EMISSION_RATE):
            self.logger.error(f"Invalid emission rate {rate}")
            raise InvalidConfigurationError(f"Emission rate must be between 0 and {MAX_PHOTON_EMISSION_RATE}.")
        self.emission_rate = rate
        self.time_between_photons = 1 / rate if rate > 0 else math.inf

    def set_polarization(self, direction: PresetPolarizationDirection,
                         custom_angle: Optional[float] = None) -> None:
        if custom_angle is not None and not (0 <= custom_angle <= 180):
            self.logger.error(f"Invalid custom polarization angle {custom_angle}")
            raise InvalidConfigurationError("Custom polarization angle must be between 0 and 180 degrees.")
        self.polarization_direction = direction
        if custom_angle is not None:
            self.custom_polarization_angle = custom_angle
        self.logger.info(f"Polarization set to {self.polarization_angle} degrees")

    def emit_photon(self) -> Photon:
        y_offset = self.emitted_beam_width / 2 * (1 - 2 * self.random_source.next_double())
        self.emitted_count += 1
        return Photon(self.polarization_angle, self.position + np.array([0.0, y_offset]), self.emission_direction)

    def step(self, dt: float) -> List[Photon]:
        """Photons emitted during this step (many-photon mode only)."""
        if self.emission_mode != PhotonEmissionMode.MANY_PHOTONS:
            return []
        self.time_since_last_photon += dt
        if self.time_since_last_photon > self.time_between_photons:
            self.time_since_last_photon = 0.0
            return [self.emit_photon()]
        return []

    def reset(self) -> None:
        self.set_emission_rate(self._default_emission_rate)
        self.polarization_direction = self._default_polarization_direction
        self.custom_polarization_angle = self._default_custom_polarization_angle
        self.time_since_last_photon = math.inf
        self.emitted_count = 0
