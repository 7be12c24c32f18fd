"""Stern-Gerlach measurement device."""
import logging
import math
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from ..exceptions import InvalidConfigurationError
from ..qrng.random_source import RandomSource
from ..utils.data_structures import MeasurementAxis, StateDirection, angles_to_vector

# Dot products closer than this to +-1 count as exactly (anti)colinear
COLINEAR_TOLERANCE = 1e-12

SpinInput = Union[StateDirection, np.ndarray]


@dataclass
class SternGerlachOutcome:
    """Result of sending one particle through a device."""
    is_up: Optional[bool]       # None when the device is inactive
    direction: np.ndarray       # spin direction leaving the device
    up_probability: float


def spin_vector(spin: SpinInput) -> np.ndarray:
    """Unit vector of a spin given either as an enumerated direction or a vector."""
    if isinstance(spin, StateDirection):
        if spin == StateDirection.CUSTOM:
            raise ValueError("The CUSTOM direction has no fixed vector.")
        return spin.vector
    vector = np.asarray(spin, dtype=float)
    norm = np.linalg.norm(vector)
    if vector.shape != (3,) or norm == 0:
        raise ValueError("Spin vectors must be non-zero 3D vectors.")
    return vector / norm


def up_probability(incoming: np.ndarray, measurement_axis: np.ndarray) -> float:
    """
    Born-rule probability of the + branch: cos^2(theta / 2) = (1 + cos theta) / 2.

    (Anti)colinear inputs return exactly 1 (0).
    """
    cos_theta = float(np.dot(incoming, measurement_axis))
    if cos_theta >= 1 - COLINEAR_TOLERANCE:
        return 1.0
    if cos_theta <= -1 + COLINEAR_TOLERANCE:
        return 0.0
    return (1 + cos_theta) / 2


class SternGerlachDevice:
    """
    One oriented Stern-Gerlach measurement stage.

    A device always outputs one of its own two eigen-directions (+axis or -axis),
    never the incoming direction. An inactive device lets particles pass unmeasured.
    The orientation is fixed at construction.
    """

    def __init__(self,
                 axis: Optional[MeasurementAxis] = None,
                 custom_polar_angle: Optional[float] = None,
                 active: bool = True,
                 name: str = "SG"):
        """
        Args:
            axis: Enumerated measurement axis (X, Y or Z)
            custom_polar_angle: Axis angle from +Z towards +X in radians, instead of `axis`
            active: Whether the device measures particles
            name: Identifier used in logs

        Raises:
            InvalidConfigurationError: unless exactly one orientation is given
        """
        self.name = name
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}_{name}")

        if (axis is None) == (custom_polar_angle is None):
            self.logger.error("Stern-Gerlach device needs exactly one orientation.")
            raise InvalidConfigurationError("A Stern-Gerlach device needs exactly one orientation "
                                            "(an axis or a custom polar angle).")
        if custom_polar_angle is not None and not math.isfinite(custom_polar_angle):
            raise InvalidConfigurationError("Custom polar angle must be finite.")

        self._axis = axis
        self._custom_polar_angle = custom_polar_angle
        if axis is not None:
            self._axis_vector = axis.vector
        else:
            self._axis_vector = angles_to_vector(custom_polar_angle, 0.0)

        self.active = active
        self.up_probability = 0.5
        self.last_outcome: Optional[SternGerlachOutcome] = None

        self.logger.info(f"Stern-Gerlach device {name} initialized along {self.orientation_label}, active={active}")

    @property
    def axis(self) -> Optional[MeasurementAxis]:
        return self._axis

    @property
    def custom_polar_angle(self) -> Optional[float]:
        return self._custom_polar_angle

    @property
    def axis_vector(self) -> np.ndarray:
        return self._axis_vector.copy()

    @property
    def is_z_oriented(self) -> bool:
        return self._axis == MeasurementAxis.Z

    @property
    def orientation_label(self) -> str:
        if self._axis is not None:
            return self._axis.label
        return f"{math.degrees(self._custom_polar_angle):.1f}deg"

    @property
    def down_probability(self) -> float:
        return 1 - self.up_probability

    @property
    def up_direction(self) -> np.ndarray:
        return self._axis_vector.copy()

    @property
    def down_direction(self) -> np.ndarray:
        return -self._axis_vector

    def prepare(self, incoming: SpinInput) -> float:
        """Compute and store the branch probabilities for an incoming spin; returns P(+)."""
        self.up_probability = up_probability(spin_vector(incoming), self._axis_vector)
        return self.up_probability

    def measure(self, incoming: SpinInput, random_source: RandomSource) -> SternGerlachOutcome:
        """
        Send one particle through the device.

        Returns:
            The sampled branch and the collapsed direction; for an inactive device the
            incoming direction unchanged.
        """
        incoming_vector = spin_vector(incoming)
        if not self.active:
            return SternGerlachOutcome(is_up=None, direction=incoming_vector, up_probability=1.0)

        probability = self.prepare(incoming_vector)
        is_up = random_source.next_double() < probability
        outcome = SternGerlachOutcome(
            is_up=is_up,
            direction=self.up_direction if is_up else self.down_direction,
            up_probability=probability,
        )
        self.last_outcome = outcome
        self.logger.debug(f"P(+)={probability:.3f} -> {'up' if is_up else 'down'}")
        return outcome

    def reset(self) -> None:
        self.up_probability = 0.5
        self.last_outcome = None
