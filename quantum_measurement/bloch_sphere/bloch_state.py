"""Bloch sphere representation of a two-level quantum state."""
import cmath
import logging
import math
from typing import Union

import numpy as np

from ..exceptions import InvalidAmplitudeError, InvalidConfigurationError
from ..qrng.random_source import RandomSource
from ..utils.data_structures import MeasurementAxis, MeasurementBasis, StateDirection, angles_to_vector

AMPLITUDE_TOLERANCE = 1e-9
TWO_PI = 2 * math.pi

Direction = Union[StateDirection, MeasurementAxis]


class BlochState:
    """
    Two-level state kept both as Bloch angles and as amplitudes.

    The canonical mapping between the two views is
        alpha = cos(polar / 2)
        beta  = exp(i * azimuthal) * sin(polar / 2)
    with polar in [0, pi] and azimuthal in [0, 2 pi). At the poles the azimuthal
    angle is 0 by convention.
    """

    def __init__(self, direction: Direction = StateDirection.Z_PLUS, rotating_speed: float = 0.0):
        """
        Initialize the Bloch state.

        Args:
            direction: Initial direction, also used by reset()
            rotating_speed: Free precession rate of the azimuthal angle in rad/s
        """
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self._default_direction = direction
        self._default_rotating_speed = rotating_speed

        self.polar_angle = 0.0
        self.azimuthal_angle = 0.0
        self.alpha: complex = 1 + 0j
        self.beta: complex = 0j
        self.rotating_speed = rotating_speed

        self.set_from_direction(direction)

    @staticmethod
    def direction_to_vector(direction: Direction) -> np.ndarray:
        """Cartesian unit vector (x, y, z) of an enumerated direction."""
        return angles_to_vector(direction.polar_angle, direction.azimuthal_angle)

    @staticmethod
    def angles_to_vector(polar_angle: float, azimuthal_angle: float) -> np.ndarray:
        return angles_to_vector(polar_angle, azimuthal_angle)

    def to_vector(self) -> np.ndarray:
        """Bloch vector of the current state."""
        return angles_to_vector(self.polar_angle, self.azimuthal_angle)

    def expectation_vector(self) -> np.ndarray:
        """(<sigma_x>, <sigma_y>, <sigma_z>), equal to the Bloch vector for a pure state."""
        return self.to_vector()

    @property
    def up_coefficient(self) -> float:
        return math.cos(self.polar_angle / 2)

    @property
    def down_coefficient(self) -> float:
        return math.sin(self.polar_angle / 2)

    @property
    def phase_factor(self) -> float:
        """Relative phase in units of pi."""
        return self.azimuthal_angle / math.pi

    def set_from_direction(self, direction: Direction) -> None:
        if direction == StateDirection.CUSTOM:
            self.logger.error("Cannot set the state from the CUSTOM direction.")
            raise InvalidConfigurationError("The CUSTOM direction has no fixed angles.")
        self.set_from_angles(direction.polar_angle, direction.azimuthal_angle)

    def set_from_angles(self, polar_angle: float, azimuthal_angle: float) -> None:
        if not (0 <= polar_angle <= math.pi):
            raise ValueError("Polar angle must be between 0 and pi.")
        self.polar_angle = float(polar_angle)
        if polar_angle == 0 or polar_angle == math.pi:
            self.azimuthal_angle = 0.0
        else:
            self.azimuthal_angle = float(azimuthal_angle) % TWO_PI
        self._update_amplitudes()

    def set_from_amplitudes(self, alpha: complex, beta: complex) -> None:
        """
        Set the state from an amplitude pair.

        Pairs whose squared norm is within AMPLITUDE_TOLERANCE of 1 are renormalized
        exactly; the global phase is removed so that alpha is real and non-negative.

        Raises:
            InvalidAmplitudeError: if the pair is not normalized within tolerance.
                The previous state is kept.
        """
        norm_squared = abs(alpha) ** 2 + abs(beta) ** 2
        if not math.isfinite(norm_squared) or abs(norm_squared - 1) > AMPLITUDE_TOLERANCE:
            self.logger.error(f"Rejected amplitudes alpha={alpha}, beta={beta} (|alpha|^2+|beta|^2={norm_squared})")
            raise InvalidAmplitudeError(f"Amplitudes are not normalized: |alpha|^2+|beta|^2={norm_squared}")

        scale = 1 / math.sqrt(norm_squared)
        alpha_magnitude = min(1.0, abs(alpha) * scale)
        beta_magnitude = min(1.0, abs(beta) * scale)

        if beta_magnitude < 1e-12:
            polar, azimuthal = 0.0, 0.0
        elif alpha_magnitude < 1e-12:
            polar, azimuthal = math.pi, 0.0
        else:
            polar = 2 * math.atan2(beta_magnitude, alpha_magnitude)
            azimuthal = cmath.phase(beta) - cmath.phase(alpha)

        self.set_from_angles(polar, azimuthal)

    def _update_amplitudes(self) -> None:
        self.alpha = complex(math.cos(self.polar_angle / 2), 0.0)
        self.beta = cmath.exp(1j * self.azimuthal_angle) * math.sin(self.polar_angle / 2)

    def step(self, dt: float) -> None:
        """Free precession around Z: only the azimuthal angle moves."""
        if self.rotating_speed == 0:
            return
        if self.polar_angle == 0 or self.polar_angle == math.pi:
            return
        self.azimuthal_angle = (self.azimuthal_angle + self.rotating_speed * dt) % TWO_PI
        self._update_amplitudes()

    def up_probability(self, axis: Union[MeasurementAxis, MeasurementBasis]) -> float:
        """Born-rule probability cos^2(gamma / 2) of the + outcome along an axis."""
        if isinstance(axis, MeasurementBasis):
            axis = axis.axis
        cos_gamma = float(np.clip(np.dot(self.to_vector(), axis.vector), -1.0, 1.0))
        return (1 + cos_gamma) / 2

    def measure(self, axis: Union[MeasurementAxis, MeasurementBasis], random_source: RandomSource) -> bool:
        """
        Project the state onto one of the two eigen-directions of an axis.

        Returns:
            True for the + outcome, False for the - outcome
        """
        if isinstance(axis, MeasurementBasis):
            axis = axis.axis
        is_up = random_source.next_double() < self.up_probability(axis)
        self.set_from_direction(axis.positive_direction if is_up else axis.opposite_direction)
        self.logger.debug(f"Measured along {axis}: {'+' if is_up else '-'}")
        return is_up

    def reset(self) -> None:
        self.rotating_speed = self._default_rotating_speed
        self.set_from_direction(self._default_direction)
