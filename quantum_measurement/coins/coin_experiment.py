"""Coin experiment scene: one coin and a set of coins sharing a bias."""
import logging
from typing import Optional, Union

from ..common.two_outcome_system import SharedBias, TwoOutcomeEnsemble, TwoOutcomeSystem
from ..exceptions import InvalidConfigurationError
from ..qrng.random_source import RandomSource
from ..utils.data_structures import (
    CLASSICAL_COIN_STATES,
    MAX_COINS,
    MULTI_COIN_EXPERIMENT_QUANTITIES,
    QUANTUM_COIN_STATES,
    CoinExperimentInfo,
    CoinFaceState,
    SystemType,
    build_info,
)


class CoinExperimentScene:
    """
    Classical or quantum coin experiment.

    The scene owns the bias and hands it to both the single coin and the coin set, so
    changing it affects the next measurement of either. For quantum coins the bias and
    the initial face state are kept consistent with each other:
    - bias 1 <-> UP, bias 0 <-> DOWN, anything in between <-> SUPERPOSED.
    """

    def __init__(self,
                 info: Optional[Union[CoinExperimentInfo, dict]] = None,
                 random_source: Optional[RandomSource] = None):
        """
        Initialize the coin scene.

        Args:
            info: Scene configuration (defaults to a classical fair coin)
            random_source: Random source for this scene (a fresh unseeded one if None)
        """
        self.info = build_info(CoinExperimentInfo, info)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.random_source = random_source if random_source is not None else RandomSource()

        self.system_type = self.info.system_type
        self.bias = SharedBias(self.info.initial_bias)

        if self.system_type == SystemType.CLASSICAL:
            state_values = CLASSICAL_COIN_STATES
            self._default_face_state = CoinFaceState.HEADS
        else:
            state_values = QUANTUM_COIN_STATES
            self._default_face_state = self._face_state_for_bias(self.info.initial_bias)

        self.initial_face_state = self._default_face_state
        initial_value = self._concrete_face(self.initial_face_state)

        self.single_coin = TwoOutcomeSystem(
            state_values, initial_value, self.bias, self.random_source,
            strict=self.info.strict_measurement,
        )
        self.coin_set = TwoOutcomeEnsemble(
            state_values, initial_value, self.bias, self.random_source,
            max_systems=MAX_COINS,
            number_of_active_systems=self.info.number_of_coins,
            allowed_quantities=MULTI_COIN_EXPERIMENT_QUANTITIES,
            strict=self.info.strict_measurement,
        )

        self.preparing_experiment = True

        self.logger.info(f"{self.system_type.value.capitalize()} coin scene initialized")
        self.logger.info(f"Bias: {self.bias.value}, coins in set: {self.coin_set.number_of_active_systems}")

    @staticmethod
    def _face_state_for_bias(bias: float) -> CoinFaceState:
        if bias == 1:
            return CoinFaceState.UP
        if bias == 0:
            return CoinFaceState.DOWN
        return CoinFaceState.SUPERPOSED

    @staticmethod
    def _concrete_face(face_state: CoinFaceState) -> CoinFaceState:
        """Superposed coins are shown up until they are measured."""
        return CoinFaceState.UP if face_state == CoinFaceState.SUPERPOSED else face_state

    @property
    def valid_face_states(self):
        if self.system_type == SystemType.CLASSICAL:
            return CLASSICAL_COIN_STATES
        return QUANTUM_COIN_STATES + (CoinFaceState.SUPERPOSED,)

    def set_bias(self, bias: float) -> None:
        """Set the probability of the first outcome (heads / up)."""
        self.bias.value = bias
        if self.system_type == SystemType.QUANTUM:
            self.initial_face_state = self._face_state_for_bias(bias)
        self.logger.info(f"Bias set to {bias}")

    def set_initial_face_state(self, face_state: CoinFaceState) -> None:
        """
        Select the state the coins start the experiment in.

        For quantum coins a basis state also pins the bias to 1 (UP) or 0 (DOWN).
        """
        if face_state not in self.valid_face_states:
            self.logger.error(f"Invalid face state {face_state} for {self.system_type.value} coins")
            raise InvalidConfigurationError(f"{face_state} is not a valid initial state for "
                                            f"{self.system_type.value} coins.")
        self.initial_face_state = face_state
        if self.system_type == SystemType.QUANTUM and face_state != CoinFaceState.SUPERPOSED:
            self.bias.value = 1.0 if face_state == CoinFaceState.UP else 0.0
        self.logger.info(f"Initial face state set to {face_state}")

    def start_experiment(self) -> None:
        """Leave the preparation phase: coins show their initial face."""
        self.preparing_experiment = False
        initial_value = self._concrete_face(self.initial_face_state)
        self.single_coin.set_measurement_value_immediate(initial_value)
        self.coin_set.set_measured_values_immediate(initial_value)
        self.logger.info(f"Experiment started with coins showing {initial_value}")

    def return_to_preparation(self) -> None:
        self.preparing_experiment = True
        self.single_coin.prepare_instantly()
        self.coin_set.prepare_instantly()
        self.logger.info("Returned to preparation")

    def step(self, dt: float) -> None:
        self.single_coin.step(dt)
        self.coin_set.step(dt)

    def reset(self) -> None:
        self.preparing_experiment = True
        self.bias.reset()
        self.initial_face_state = self._default_face_state
        self.single_coin.reset()
        self.coin_set.reset()
        self.logger.info("Coin scene reset")
