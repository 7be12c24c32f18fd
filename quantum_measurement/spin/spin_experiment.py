"""Chained Stern-Gerlach experiment with a particle source."""
import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Union

import numpy as np

from ..exceptions import InvalidConfigurationError
from ..qrng.random_source import RandomSource
from ..utils.data_structures import (
    BlockingMode,
    SourceMode,
    SpinExperimentInfo,
    SpinExperimentPreset,
    StateDirection,
    build_info,
)
from .stern_gerlach import SternGerlachDevice, SternGerlachOutcome

# Particles age TIME_SCALING lifetime units per second
TIME_SCALING = 2
# Lifetime at which a particle enters stage i is 1 + STAGE_SPACING * i
FIRST_STAGE_LIFETIME = 1.0
STAGE_SPACING = 2.0
MAXIMUM_PARTICLE_LIFETIME = 5.0
MAX_SINGLE_PARTICLES = 1
MAX_STAGES = 2


@dataclass
class SpinParticle:
    """A particle travelling from the source through the stages."""
    spin: np.ndarray
    lifetime: float = 0.0
    stage_results: List[Optional[bool]] = field(default_factory=list)
    blocked: bool = False

    @property
    def stages_completed(self) -> int:
        return len(self.stage_results)


@dataclass
class SpinMeasurementRecord:
    """Full path of one particle through the experiment."""
    stage_results: List[Optional[bool]]
    final_direction: np.ndarray
    blocked: bool = False


def stage_lifetime(stage_index: int) -> float:
    return FIRST_STAGE_LIFETIME + STAGE_SPACING * stage_index


class SternGerlachExperiment:
    """
    An ordered sequence of one or two Stern-Gerlach devices fed by a particle source.

    Stage 1 measures the prepared source direction. Stage 2 measures stage 1's sampled
    output, so its probabilities always come from the actual previous outcome. A blocker
    between the stages can stop one branch of stage 1.
    """

    def __init__(self,
                 info: Optional[Union[SpinExperimentInfo, dict]] = None,
                 random_source: Optional[RandomSource] = None,
                 devices: Optional[Sequence[SternGerlachDevice]] = None):
        """
        Initialize the experiment.

        Args:
            info: Experiment configuration
            random_source: Random source for every measurement of this experiment
            devices: Explicit stages; overrides the preset in `info`

        Raises:
            InvalidConfigurationError: on invalid configuration or stage count
        """
        self.info = build_info(SpinExperimentInfo, info)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.random_source = random_source if random_source is not None else RandomSource()

        self.experiment = self.info.experiment
        self.devices: List[SternGerlachDevice] = []
        if devices is not None:
            self._set_devices(list(devices))
        else:
            self._set_devices(self._devices_for_preset(self.experiment))

        self.incoming_direction = self.info.initial_direction
        self.source_mode = self.info.source_mode
        self.emission_rate = self.info.emission_rate_hz
        self.blocking_mode = self.info.blocking_mode

        self.particles: List[SpinParticle] = []
        self.stage_counts: List[Dict[str, int]] = []
        self.blocked_count = 0
        self._emission_accumulator = 0.0
        self._reset_counts()

        self.logger.info(f"Stern-Gerlach experiment initialized: {self.experiment}, "
                         f"{len(self.devices)} stage(s), source {self.incoming_direction}")

    # ----------------------------------------------------------------------------------
    # Configuration
    # ----------------------------------------------------------------------------------

    @staticmethod
    def _devices_for_preset(experiment: SpinExperimentPreset) -> List[SternGerlachDevice]:
        return [SternGerlachDevice(axis=axis, active=active, name=f"SG{i + 1}")
                for i, (axis, active) in enumerate(experiment.settings)]

    def _set_devices(self, devices: List[SternGerlachDevice]) -> None:
        if not (1 <= len(devices) <= MAX_STAGES):
            self.logger.error(f"Invalid number of stages: {len(devices)}")
            raise InvalidConfigurationError(f"An experiment needs 1 to {MAX_STAGES} stages, got {len(devices)}.")
        self.devices = devices

    def set_experiment(self, experiment: SpinExperimentPreset) -> None:
        """Switch preset: the stages are rebuilt and particles and counts cleared."""
        self.experiment = experiment
        self._set_devices(self._devices_for_preset(experiment))
        self.particles.clear()
        self._reset_counts()
        self.logger.info(f"Experiment set to {experiment}")

    def set_custom_stages(self, devices: Sequence[SternGerlachDevice]) -> None:
        """Use explicitly built stages; the preset becomes CUSTOM."""
        self._set_devices(list(devices))
        self.experiment = SpinExperimentPreset.CUSTOM
        self.particles.clear()
        self._reset_counts()
        self.logger.info(f"Custom stages set: {[d.orientation_label for d in self.devices]}")

    def set_incoming_direction(self, direction: StateDirection) -> None:
        if direction == StateDirection.CUSTOM:
            self.logger.error("The particle source cannot emit the CUSTOM direction.")
            raise InvalidConfigurationError("The particle source needs a fixed direction.")
        self.incoming_direction = direction
        self.expected_probabilities()
        self.logger.info(f"Incoming direction set to {direction}")

    def set_blocking_mode(self, mode: BlockingMode) -> None:
        self.blocking_mode = mode
        self.logger.info(f"Blocking mode set to {mode.value}")

    def set_source_mode(self, mode: SourceMode) -> None:
        self.source_mode = mode
        self.particles.clear()
        self._emission_accumulator = 0.0
        self.logger.info(f"Source mode set to {mode.value}")

    def set_emission_rate(self, rate: float) -> None:
        if not (0 <= rate <= 100):
            raise ValueError("Emission rate must be between 0 and 100 particles per second.")
        self.emission_rate = rate

    # ----------------------------------------------------------------------------------
    # Probabilities and measurement
    # ----------------------------------------------------------------------------------

    def _is_blocked(self, first_stage_result: Optional[bool]) -> bool:
        if first_stage_result is None or len(self.devices) < 2:
            return False
        if self.blocking_mode == BlockingMode.BLOCK_UP:
            return first_stage_result
        if self.blocking_mode == BlockingMode.BLOCK_DOWN:
            return not first_stage_result
        return False

    def expected_probabilities(self) -> List[float]:
        """
        Nominal probability of the + branch at each stage for the current source direction.

        Stage 2's value is averaged over the stage 1 branches that pass the blocker,
        weighted by their probability. Inactive stages report 1 (pass-through).
        """
        incoming = self.incoming_direction.vector
        first = self.devices[0]
        if not first.active:
            probabilities = [1.0]
            branches = [(1.0, incoming, None)]
        else:
            p_up = first.prepare(incoming)
            probabilities = [p_up]
            branches = [(p_up, first.up_direction, True), (1 - p_up, first.down_direction, False)]

        if len(self.devices) > 1:
            second = self.devices[1]
            passing = [(weight, direction) for weight, direction, result in branches
                       if weight > 0 and not self._is_blocked(result)]
            total = sum(weight for weight, _ in passing)
            if not second.active or total == 0:
                probabilities.append(1.0 if not second.active else 0.0)
            else:
                p_up = sum(weight * second.prepare(direction) for weight, direction in passing) / total
                second.up_probability = p_up
                probabilities.append(p_up)

        self.logger.debug(f"Expected + probabilities per stage: {probabilities}")
        return probabilities

    def _measure_stage(self, stage_index: int, spin: np.ndarray,
                       counts: List[Dict[str, int]]) -> SternGerlachOutcome:
        outcome = self.devices[stage_index].measure(spin, self.random_source)
        if outcome.is_up is not None:
            counts[stage_index]["up" if outcome.is_up else "down"] += 1
        self.logger.debug2(f"Stage {stage_index + 1} ({self.devices[stage_index].orientation_label}): "
                           f"is_up={outcome.is_up}, P(+)={outcome.up_probability:.3f}")
        return outcome

    def measure_particle(self) -> SpinMeasurementRecord:
        """Send one particle through every stage immediately."""
        spin = self.incoming_direction.vector
        results: List[Optional[bool]] = []
        for stage_index in range(len(self.devices)):
            if stage_index == 1 and self._is_blocked(results[0]):
                self.blocked_count += 1
                return SpinMeasurementRecord(stage_results=results, final_direction=spin, blocked=True)
            outcome = self._measure_stage(stage_index, spin, self.stage_counts)
            results.append(outcome.is_up)
            spin = outcome.direction
        return SpinMeasurementRecord(stage_results=results, final_direction=spin)

    def measure_particles(self, count: int) -> List[SpinMeasurementRecord]:
        return [self.measure_particle() for _ in range(count)]

    # ----------------------------------------------------------------------------------
    # Particle source and time stepping
    # ----------------------------------------------------------------------------------

    def _emit_particle(self) -> bool:
        if len(self.particles) >= self.info.max_particles:
            self.logger.warning("Particle pool exhausted, emission skipped")
            return False
        self.particles.append(SpinParticle(spin=self.incoming_direction.vector))
        return True

    def shoot_single_particle(self) -> bool:
        """Emit one particle in single mode; ignored while the previous one is in flight."""
        if self.source_mode != SourceMode.SINGLE:
            self.logger.debug("shoot_single_particle ignored in continuous mode")
            return False
        if len(self.particles) >= MAX_SINGLE_PARTICLES:
            self.logger.debug("A particle is already in flight")
            return False
        return self._emit_particle()

    def step(self, dt: float) -> None:
        """
        Advance every particle, measuring it when its lifetime crosses a stage.

        Counts for this frame are committed after all particles have been advanced.
        """
        if self.source_mode == SourceMode.CONTINUOUS and self.emission_rate > 0:
            self._emission_accumulator += dt * self.emission_rate
            to_emit = int(math.floor(self._emission_accumulator))
            self._emission_accumulator -= to_emit
            for _ in range(to_emit):
                self._emit_particle()

        new_counts = [dict(counts) for counts in self.stage_counts]
        blocked = 0
        surviving: List[SpinParticle] = []

        for particle in self.particles:
            particle.lifetime += dt * TIME_SCALING
            while (particle.stages_completed < len(self.devices)
                   and particle.lifetime >= stage_lifetime(particle.stages_completed)):
                stage_index = particle.stages_completed
                if stage_index == 1 and self._is_blocked(particle.stage_results[0]):
                    particle.blocked = True
                    blocked += 1
                    break
                outcome = self._measure_stage(stage_index, particle.spin, new_counts)
                particle.stage_results.append(outcome.is_up)
                particle.spin = outcome.direction

            if not particle.blocked and particle.lifetime < MAXIMUM_PARTICLE_LIFETIME:
                surviving.append(particle)

        self.particles = surviving
        self.stage_counts = new_counts
        self.blocked_count += blocked

    # ----------------------------------------------------------------------------------
    # Reset
    # ----------------------------------------------------------------------------------

    def _reset_counts(self) -> None:
        self.stage_counts = [{"up": 0, "down": 0} for _ in self.devices]
        self.blocked_count = 0

    def reset(self) -> None:
        """Restore the source and clear particles and counts; the stages are kept."""
        self.incoming_direction = self.info.initial_direction
        self.source_mode = self.info.source_mode
        self.emission_rate = self.info.emission_rate_hz
        self.blocking_mode = self.info.blocking_mode
        self.particles.clear()
        self._emission_accumulator = 0.0
        for device in self.devices:
            device.reset()
        self._reset_counts()
        self.logger.info("Stern-Gerlach experiment reset")
