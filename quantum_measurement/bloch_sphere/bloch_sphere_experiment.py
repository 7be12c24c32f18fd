"""Bloch sphere preparation, precession and measurement experiment."""
import logging
from typing import List, Optional, Union

from ..qrng.random_source import RandomSource
from ..utils.data_structures import (
    BlochSphereInfo,
    BlochSphereScene,
    MeasurementBasis,
    StateDirection,
    build_info,
)
from .bloch_state import BlochState


class BlochSphereExperiment:
    """
    Prepares a spin state, lets it precess in a magnetic field and measures it.

    A preparation sphere holds the state chosen by the user. Measurement spheres (one
    for single measurement mode, several for multi measurement mode) are re-prepared
    from it and precess at the magnetic field strength while the precession scene is
    selected. Observing measures them along the selected basis and accumulates up/down
    counts.
    """

    def __init__(self,
                 info: Optional[Union[BlochSphereInfo, dict]] = None,
                 random_source: Optional[RandomSource] = None):
        self.info = build_info(BlochSphereInfo, info)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.random_source = random_source if random_source is not None else RandomSource()

        self.preparation_sphere = BlochState(self.info.initial_direction)
        self.single_measurement_sphere = BlochState(self.info.initial_direction)
        self.multi_measurement_spheres: List[BlochState] = [
            BlochState(self.info.initial_direction) for _ in range(self.info.number_of_multi_systems)
        ]

        self.selected_state_direction = self.info.initial_direction
        self.magnetic_field_strength = self.info.magnetic_field_strength
        self.scene = self.info.scene
        self.measurement_basis = self.info.measurement_basis
        self.single_measurement_mode = self.info.single_measurement_mode

        self.ready_to_observe = True
        self.up_measurement_count = 0
        self.down_measurement_count = 0

        self._update_rotating_speeds()
        self.logger.info(f"Bloch sphere experiment initialized at {self.selected_state_direction}")

    @property
    def measurement_spheres(self) -> List[BlochState]:
        return [self.single_measurement_sphere] + self.multi_measurement_spheres

    @property
    def active_measurement_spheres(self) -> List[BlochState]:
        if self.single_measurement_mode:
            return [self.single_measurement_sphere]
        return self.multi_measurement_spheres

    @property
    def up_coefficient(self) -> float:
        return self.preparation_sphere.up_coefficient

    @property
    def down_coefficient(self) -> float:
        return self.preparation_sphere.down_coefficient

    @property
    def phase_factor(self) -> float:
        return self.preparation_sphere.phase_factor

    def set_state_direction(self, direction: StateDirection) -> None:
        """Prepare one of the fixed directions; CUSTOM only marks the selection."""
        self.selected_state_direction = direction
        if direction != StateDirection.CUSTOM:
            self.preparation_sphere.set_from_direction(direction)
            self._copy_preparation_to_measurement_spheres()
        self.logger.info(f"State direction set to {direction}")

    def set_preparation_angles(self, polar_angle: float, azimuthal_angle: float) -> None:
        """Prepare an arbitrary direction; the selection becomes CUSTOM."""
        self.preparation_sphere.set_from_angles(polar_angle, azimuthal_angle)
        self.selected_state_direction = StateDirection.CUSTOM
        self._copy_preparation_to_measurement_spheres()
        self.logger.debug(f"Preparation angles set to polar={polar_angle:.3f}, azimuthal={azimuthal_angle:.3f}")

    def set_magnetic_field_strength(self, strength: float) -> None:
        if not (-1 <= strength <= 1):
            raise ValueError("Magnetic field strength must be between -1 and 1.")
        self.magnetic_field_strength = strength
        self._update_rotating_speeds()
        self.logger.info(f"Magnetic field strength set to {strength}")

    def set_scene(self, scene: BlochSphereScene) -> None:
        self.scene = scene
        self._update_rotating_speeds()
        self.logger.info(f"Scene set to {scene.value}")

    def set_measurement_basis(self, basis: MeasurementBasis) -> None:
        """Switching basis clears the accumulated counts."""
        self.measurement_basis = basis
        self._reset_counts()
        self.logger.info(f"Measurement basis set to {basis.name}")

    def set_single_measurement_mode(self, single: bool) -> None:
        self.single_measurement_mode = single
        self.logger.info(f"Single measurement mode: {single}")

    def _update_rotating_speeds(self) -> None:
        speed = self.magnetic_field_strength if self.scene == BlochSphereScene.PRECESSION else 0.0
        for sphere in self.measurement_spheres:
            sphere.rotating_speed = speed

    def _copy_preparation_to_measurement_spheres(self) -> None:
        polar = self.preparation_sphere.polar_angle
        azimuthal = self.preparation_sphere.azimuthal_angle
        for sphere in self.measurement_spheres:
            sphere.set_from_angles(polar, azimuthal)

    def observe(self) -> List[bool]:
        """
        Measure the active spheres once.

        Returns:
            Outcomes (True for up) of this observation; empty if the spheres have already
            been observed and not re-prepared.
        """
        if not self.ready_to_observe:
            self.logger.debug("Observation ignored: spheres must be re-prepared first")
            return []

        outcomes = [sphere.measure(self.measurement_basis, self.random_source)
                    for sphere in self.active_measurement_spheres]
        ups = sum(outcomes)
        self.up_measurement_count += ups
        self.down_measurement_count += len(outcomes) - ups
        self.ready_to_observe = False
        self.logger.debug1(f"Observed {len(outcomes)} spheres: up={ups}, down={len(outcomes) - ups}")
        return outcomes

    def reprepare(self) -> None:
        self.ready_to_observe = True
        self._copy_preparation_to_measurement_spheres()

    def _reset_counts(self) -> None:
        self.up_measurement_count = 0
        self.down_measurement_count = 0

    def step(self, dt: float) -> None:
        for sphere in self.measurement_spheres:
            sphere.step(dt)

    def reset(self) -> None:
        self._reset_counts()
        self.selected_state_direction = self.info.initial_direction
        self.preparation_sphere.reset()
        self.scene = self.info.scene
        self.ready_to_observe = True
        self.magnetic_field_strength = self.info.magnetic_field_strength
        self.measurement_basis = self.info.measurement_basis
        self.single_measurement_mode = self.info.single_measurement_mode
        self._copy_preparation_to_measurement_spheres()
        self._update_rotating_speeds()
        self.logger.info("Bloch sphere experiment reset")
