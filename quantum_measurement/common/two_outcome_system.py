"""Biased two-outcome systems used for coins and spins."""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Hashable, List, Optional, Sequence, Tuple

from ..exceptions import InvalidConfigurationError, InvalidStateError
from ..qrng.random_source import RandomSource
from ..utils.data_structures import MAX_COINS, UNDETERMINED, MeasurementState

# Seconds between starting a preparation and being ready to measure
MEASUREMENT_PREPARATION_TIME = 1.0


class SharedBias:
    """Probability of outcome A, shared by every system created from the same scene."""

    def __init__(self, value: float = 0.5):
        self._initial_value = value
        self._value = 0.0
        self.value = value

    @property
    def value(self) -> float:
        return self._value

    @value.setter
    def value(self, value: float) -> None:
        if not (0 <= value <= 1):
            raise ValueError("Bias must be between 0 and 1.")
        self._value = float(value)

    def reset(self) -> None:
        self._value = self._initial_value


@dataclass
class MeasurementResult:
    """Outcome of a measurement pass over the active systems."""
    length: int
    measured_values: List[Hashable]
    count_a: int
    count_b: int


DataChangedListener = Callable[["TwoOutcomeEnsemble"], Any]


class TwoOutcomeEnsemble:
    """
    Fixed-capacity ordered collection of independent biased two-outcome systems.

    Each member holds one of the two state values or UNDETERMINED. Members keep their
    order so that they map one to one onto their visual counterparts. Only the first
    `number_of_active_systems` members take part in measurement and in the counts.
    """

    def __init__(self,
                 state_values: Sequence[Hashable],
                 initial_state: Hashable,
                 bias: SharedBias,
                 random_source: RandomSource,
                 max_systems: int = MAX_COINS,
                 number_of_active_systems: Optional[int] = None,
                 allowed_quantities: Optional[Sequence[int]] = None,
                 strict: bool = False):
        """
        Args:
            state_values: Exactly two distinct outcome labels (A, B)
            initial_state: Initial value of every member (a state value or UNDETERMINED)
            bias: Shared probability of outcome A
            random_source: Source of every random draw made by this ensemble
            max_systems: Capacity of the ensemble
            number_of_active_systems: Initially active members (defaults to max_systems)
            allowed_quantities: If given, the only valid numbers of active members
            strict: Raise InvalidStateError when measuring during a timed preparation
                instead of completing the preparation first
        """
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

        if len(state_values) != 2 or state_values[0] == state_values[1]:
            self.logger.error(f"Invalid state values: {state_values}")
            raise InvalidConfigurationError("There must be exactly two distinct state values.")
        if initial_state is not UNDETERMINED and initial_state not in state_values:
            raise InvalidConfigurationError(f"Initial state {initial_state} is not one of {tuple(state_values)}.")
        if max_systems < 1:
            self.logger.error(f"Invalid ensemble size: {max_systems}")
            raise InvalidConfigurationError("Ensemble size must be a positive integer.")

        self.state_values: Tuple[Hashable, Hashable] = (state_values[0], state_values[1])
        self.initial_state = initial_state
        self.bias_source = bias
        self.random_source = random_source
        self.max_systems = max_systems
        self.allowed_quantities = tuple(allowed_quantities) if allowed_quantities else None
        self.strict = strict

        self._initial_number_of_active_systems = max_systems if number_of_active_systems is None \
            else number_of_active_systems
        self._validate_quantity(self._initial_number_of_active_systems)
        self._number_of_active_systems = self._initial_number_of_active_systems

        self.measured_values: List[Hashable] = [initial_state] * max_systems
        self.measurement_state = MeasurementState.READY_TO_BE_MEASURED
        self.count_a = 0
        self.count_b = 0

        self._preparation_time_remaining: Optional[float] = None
        self._measure_when_prepared = False
        self._listeners: List[DataChangedListener] = []

        self._recompute_counts()
        self.logger.info(f"Ensemble initialized: {max_systems} systems, values {self.state_values}")

    # ----------------------------------------------------------------------------------
    # Properties
    # ----------------------------------------------------------------------------------

    @property
    def bias(self) -> float:
        return self.bias_source.value

    @property
    def number_of_active_systems(self) -> int:
        return self._number_of_active_systems

    @number_of_active_systems.setter
    def number_of_active_systems(self, value: int) -> None:
        self._validate_quantity(value)
        self._number_of_active_systems = value
        self._recompute_counts()
        self.logger.info(f"Number of active systems set to {value}")

    @property
    def active_values(self) -> List[Hashable]:
        return self.measured_values[:self._number_of_active_systems]

    @property
    def is_preparing(self) -> bool:
        return self.measurement_state == MeasurementState.PREPARING_TO_BE_MEASURED

    def _validate_quantity(self, value: int) -> None:
        if not (1 <= value <= self.max_systems):
            raise InvalidConfigurationError(f"Number of active systems must be in [1, {self.max_systems}].")
        if self.allowed_quantities is not None and value not in self.allowed_quantities:
            raise InvalidConfigurationError(f"Number of active systems must be one of {self.allowed_quantities}.")

    # ----------------------------------------------------------------------------------
    # Listeners
    # ----------------------------------------------------------------------------------

    def add_data_changed_listener(self, listener: DataChangedListener) -> None:
        """Register a listener called after every completed change of the measured values."""
        self._listeners.append(listener)

    def remove_data_changed_listener(self, listener: DataChangedListener) -> None:
        self._listeners.remove(listener)

    def _notify_data_changed(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # ----------------------------------------------------------------------------------
    # Preparation and measurement
    # ----------------------------------------------------------------------------------

    def prepare(self, forced_value: Optional[Hashable] = None,
                measure_when_prepared: bool = False,
                preparation_time: float = MEASUREMENT_PREPARATION_TIME) -> None:
        """
        Prepare every member for measurement.

        Args:
            forced_value: If given, members are set to this value deterministically
            measure_when_prepared: Measure automatically once the preparation time elapses
            preparation_time: Seconds (of step time) until the ensemble is ready
        """
        if forced_value is not None:
            self.set_measured_values_immediate(forced_value)
            return

        self.measured_values = [UNDETERMINED] * self.max_systems
        self._recompute_counts()

        if preparation_time <= 0:
            self._finish_preparation(measure_when_prepared)
        else:
            self.measurement_state = MeasurementState.PREPARING_TO_BE_MEASURED
            self._preparation_time_remaining = preparation_time
            self._measure_when_prepared = measure_when_prepared
            self.logger.debug(f"Preparing to be measured in {preparation_time:.2f}s")

        self._notify_data_changed()

    def prepare_instantly(self) -> None:
        """Put every member in UNDETERMINED and be ready to measure right away."""
        self.prepare(preparation_time=0.0)

    def _finish_preparation(self, measure_when_prepared: bool) -> None:
        self._preparation_time_remaining = None
        self._measure_when_prepared = False
        self.measurement_state = MeasurementState.READY_TO_BE_MEASURED
        if measure_when_prepared:
            self.measure_all()

    def step(self, dt: float) -> None:
        """Advance a pending timed preparation."""
        if self._preparation_time_remaining is None:
            return
        self._preparation_time_remaining -= dt
        if self._preparation_time_remaining <= 0:
            self._finish_preparation(self._measure_when_prepared)

    def measure_all(self) -> MeasurementResult:
        """
        Measure every active member.

        Members that are UNDETERMINED draw one uniform number u each and become A when
        u < bias, B otherwise. Members that already hold a value keep it.

        Raises:
            InvalidStateError: in strict mode while a timed preparation is pending
        """
        if self.is_preparing:
            if self.strict:
                self.logger.error("Measurement requested while still preparing.")
                raise InvalidStateError("The ensemble is still being prepared.")
            self.logger.warning("Measurement requested while preparing; completing the preparation first.")
            self._preparation_time_remaining = None
            self._measure_when_prepared = False

        bias = self.bias
        new_values = list(self.measured_values)
        for i in range(self._number_of_active_systems):
            if new_values[i] is UNDETERMINED:
                new_values[i] = self.state_values[0] if self.random_source.next_double() < bias \
                    else self.state_values[1]

        self.measured_values = new_values
        self.measurement_state = MeasurementState.MEASURED_AND_REVEALED
        self._recompute_counts()
        self.logger.debug(f"Measured {self._number_of_active_systems} systems: "
                          f"{self.state_values[0]}={self.count_a}, {self.state_values[1]}={self.count_b}")

        self._notify_data_changed()
        return MeasurementResult(
            length=self._number_of_active_systems,
            measured_values=self.active_values,
            count_a=self.count_a,
            count_b=self.count_b,
        )

    def set_measured_values_immediate(self, value: Hashable) -> None:
        """Force every active member to `value`, cancelling any pending preparation."""
        if value not in self.state_values:
            raise ValueError(f"Value {value} is not one of {self.state_values}.")
        self._preparation_time_remaining = None
        self._measure_when_prepared = False
        for i in range(self._number_of_active_systems):
            self.measured_values[i] = value
        self.measurement_state = MeasurementState.READY_TO_BE_MEASURED
        self._recompute_counts()
        self._notify_data_changed()

    def hide(self) -> None:
        """Hide revealed values; the values themselves are kept."""
        self.measurement_state = MeasurementState.READY_TO_BE_MEASURED

    def _recompute_counts(self) -> None:
        active = self.measured_values[:self._number_of_active_systems]
        self.count_a = sum(1 for value in active if value == self.state_values[0])
        self.count_b = sum(1 for value in active if value == self.state_values[1])

    def reset(self) -> None:
        self._preparation_time_remaining = None
        self._measure_when_prepared = False
        self.measurement_state = MeasurementState.READY_TO_BE_MEASURED
        self._number_of_active_systems = self._initial_number_of_active_systems
        self.measured_values = [self.initial_state] * self.max_systems
        self._recompute_counts()
        self._notify_data_changed()
        self.logger.info("Ensemble reset")


class TwoOutcomeSystem(TwoOutcomeEnsemble):
    """A single biased two-outcome system: a coin, or one spin."""

    def __init__(self,
                 state_values: Sequence[Hashable],
                 initial_state: Hashable,
                 bias: SharedBias,
                 random_source: RandomSource,
                 strict: bool = False):
        if initial_state not in state_values:
            raise InvalidConfigurationError(f"Initial state {initial_state} is not one of {tuple(state_values)}.")
        super().__init__(state_values, initial_state, bias, random_source,
                         max_systems=1, number_of_active_systems=1, strict=strict)

        # Last concrete outcome; never UNDETERMINED
        self.measured_value: Hashable = initial_state
        self.add_data_changed_listener(self._update_measured_value)

    def prepare(self, forced_value: Optional[Hashable] = None,
                measure_when_prepared: bool = False,
                preparation_time: float = 0.0) -> None:
        """Prepare the system; ready to measure immediately unless a preparation time is given."""
        super().prepare(forced_value, measure_when_prepared, preparation_time)

    def _update_measured_value(self, _ensemble: TwoOutcomeEnsemble) -> None:
        if self.measured_values[0] is not UNDETERMINED:
            self.measured_value = self.measured_values[0]

    @property
    def current_state(self) -> Hashable:
        """A state value, or UNDETERMINED while prepared but not yet measured."""
        return self.measured_values[0]

    def measure(self) -> Hashable:
        """Collapse the system if needed and return its value; idempotent until re-prepared."""
        self.measure_all()
        return self.measured_values[0]

    def set_measurement_value_immediate(self, value: Hashable) -> None:
        self.set_measured_values_immediate(value)
