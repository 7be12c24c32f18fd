"""Data structures for the simulation."""
import math
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Type, TypeVar

import numpy as np
from pydantic import BaseModel, Field, ValidationError, field_validator

from ..exceptions import InvalidConfigurationError


class Indeterminate(Enum):
    """Placeholder state of a two-outcome system that has been prepared but not measured."""
    UNDETERMINED = "undetermined"

    def __str__(self):
        return self.value


UNDETERMINED = Indeterminate.UNDETERMINED


class SystemType(Enum):
    """Kind of two-outcome system shown in a coin scene."""
    CLASSICAL = "classical"
    QUANTUM = "quantum"


class CoinFaceState(Enum):
    """Face values of classical and quantum coins."""
    HEADS = "heads"
    TAILS = "tails"
    UP = "up"
    DOWN = "down"
    SUPERPOSED = "superposed"  # preparation value only, never measured

    def __str__(self):
        return self.value


CLASSICAL_COIN_STATES: Tuple[CoinFaceState, CoinFaceState] = (CoinFaceState.HEADS, CoinFaceState.TAILS)
QUANTUM_COIN_STATES: Tuple[CoinFaceState, CoinFaceState] = (CoinFaceState.UP, CoinFaceState.DOWN)

# Allowed sizes of the multi-coin experiment
MULTI_COIN_EXPERIMENT_QUANTITIES = (10, 100, 10000)
MAX_COINS = max(MULTI_COIN_EXPERIMENT_QUANTITIES)


class MeasurementState(Enum):
    """Measurement phase of an experiment."""
    READY_TO_BE_MEASURED = "readyToBeMeasured"
    PREPARING_TO_BE_MEASURED = "preparingToBeMeasured"
    MEASURED_AND_REVEALED = "measuredAndRevealed"


def angles_to_vector(polar_angle: float, azimuthal_angle: float) -> np.ndarray:
    """
    Convert spherical angles to a Cartesian unit vector.

    Components within 1e-15 of zero are snapped to zero so that the cardinal axes
    come out exact.
    """
    sin_polar = math.sin(polar_angle)
    vector = np.array([
        sin_polar * math.cos(azimuthal_angle),
        sin_polar * math.sin(azimuthal_angle),
        math.cos(polar_angle),
    ])
    vector[np.abs(vector) < 1e-15] = 0.0
    return vector


class StateDirection(Enum):
    """Fixed preparation directions on the Bloch sphere."""
    X_PLUS = ("+X", math.pi / 2, 0.0)
    X_MINUS = ("-X", math.pi / 2, math.pi)
    Y_PLUS = ("+Y", math.pi / 2, math.pi / 2)
    Y_MINUS = ("-Y", math.pi / 2, 3 * math.pi / 2)
    Z_PLUS = ("+Z", 0.0, 0.0)
    Z_MINUS = ("-Z", math.pi, 0.0)
    CUSTOM = ("Custom", 0.0, 0.0)

    def __init__(self, description: str, polar_angle: float, azimuthal_angle: float):
        self.description = description
        self.polar_angle = polar_angle
        self.azimuthal_angle = azimuthal_angle

    def __str__(self):
        return self.description

    @property
    def short_name(self) -> str:
        return self.description.replace("+", "")

    @property
    def vector(self) -> np.ndarray:
        """Cartesian unit vector of this direction."""
        return angles_to_vector(self.polar_angle, self.azimuthal_angle)


class MeasurementAxis(Enum):
    """Measurement axes with their two eigen-directions."""
    X = ("X", math.pi / 2, 0.0)
    Y = ("Y", math.pi / 2, math.pi / 2)
    Z = ("Z", 0.0, 0.0)

    def __init__(self, label: str, polar_angle: float, azimuthal_angle: float):
        self.label = label
        self.polar_angle = polar_angle
        self.azimuthal_angle = azimuthal_angle

    def __str__(self):
        return self.label

    @property
    def positive_direction(self) -> StateDirection:
        return {
            MeasurementAxis.X: StateDirection.X_PLUS,
            MeasurementAxis.Y: StateDirection.Y_PLUS,
            MeasurementAxis.Z: StateDirection.Z_PLUS,
        }[self]

    @property
    def opposite_direction(self) -> StateDirection:
        return {
            MeasurementAxis.X: StateDirection.X_MINUS,
            MeasurementAxis.Y: StateDirection.Y_MINUS,
            MeasurementAxis.Z: StateDirection.Z_MINUS,
        }[self]

    @property
    def vector(self) -> np.ndarray:
        return angles_to_vector(self.polar_angle, self.azimuthal_angle)


class MeasurementBasis(Enum):
    """Spin component measured in the Bloch sphere experiment."""
    S_SUB_X = MeasurementAxis.X
    S_SUB_Y = MeasurementAxis.Y
    S_SUB_Z = MeasurementAxis.Z

    @property
    def axis(self) -> MeasurementAxis:
        return self.value


class BlochSphereScene(Enum):
    """Scenes of the Bloch sphere experiment."""
    MEASUREMENT = "measurement"
    PRECESSION = "precession"


class BlockingMode(Enum):
    """Which branch of the first Stern-Gerlach stage is blocked before the second stage."""
    NO_BLOCKER = "noBlocker"
    BLOCK_UP = "blockingUp"
    BLOCK_DOWN = "blockingDown"


class SourceMode(Enum):
    """Particle source modes of the spin experiment."""
    SINGLE = "singleParticle"
    CONTINUOUS = "continuous"


class SpinExperimentPreset(Enum):
    """Preset Stern-Gerlach experiments: ordered (axis, active) stage settings."""
    EXPERIMENT_1 = ("Experiment 1 [SGz]", ((MeasurementAxis.Z, True),))
    EXPERIMENT_2 = ("Experiment 2 [SGx]", ((MeasurementAxis.X, True),))
    EXPERIMENT_3 = ("Experiment 3 [SGz, SGx]", ((MeasurementAxis.Z, True), (MeasurementAxis.X, True)))
    EXPERIMENT_4 = ("Experiment 4 [SGz, SGz]", ((MeasurementAxis.Z, True), (MeasurementAxis.Z, True)))
    EXPERIMENT_5 = ("Experiment 5 [SGx, SGz]", ((MeasurementAxis.X, True), (MeasurementAxis.Z, True)))
    EXPERIMENT_6 = ("Experiment 6 [SGx, SGx]", ((MeasurementAxis.X, True), (MeasurementAxis.X, True)))
    CUSTOM = ("Custom", ((MeasurementAxis.X, False), (MeasurementAxis.X, False)))

    def __init__(self, experiment_name: str, settings: Tuple[Tuple[MeasurementAxis, bool], ...]):
        self.experiment_name = experiment_name
        self.settings = settings

    def __str__(self):
        return self.experiment_name

    @property
    def is_short_experiment(self) -> bool:
        return len(self.settings) == 1


class PhotonEmissionMode(Enum):
    """Laser emission modes."""
    SINGLE_PHOTON = "singlePhoton"
    MANY_PHOTONS = "manyPhotons"


class PresetPolarizationDirection(Enum):
    """Preset polarization directions of the laser."""
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    FORTY_FIVE_DEGREES = "fortyFiveDegrees"
    CUSTOM = "custom"

    @property
    def angle_degrees(self) -> Optional[float]:
        """Polarization angle in degrees, None for CUSTOM."""
        angle_map = {
            PresetPolarizationDirection.HORIZONTAL: 0.0,
            PresetPolarizationDirection.VERTICAL: 90.0,
            PresetPolarizationDirection.FORTY_FIVE_DEGREES: 45.0,
            PresetPolarizationDirection.CUSTOM: None,
        }
        return angle_map[self]


class DetectionDirection(Enum):
    """Side from which a detector accepts photons."""
    UP = "up"
    DOWN = "down"


class DisplayMode(Enum):
    """Observable a detector exposes to the renderer."""
    COUNT = "count"
    RATE = "rate"


# --------------------------------------------------------------------------------------
# Construction-time configuration
# --------------------------------------------------------------------------------------

class CoinExperimentInfo(BaseModel):
    """Configuration for a coin experiment scene."""
    system_type: SystemType = SystemType.CLASSICAL
    initial_bias: float = Field(0.5, ge=0, le=1)
    number_of_coins: int = Field(MULTI_COIN_EXPERIMENT_QUANTITIES[1], ge=1, le=MAX_COINS)
    strict_measurement: bool = False

    @field_validator('number_of_coins')
    def validate_number_of_coins(cls, v):
        if v not in MULTI_COIN_EXPERIMENT_QUANTITIES:
            raise ValueError(f"Number of coins must be one of {MULTI_COIN_EXPERIMENT_QUANTITIES}.")
        return v


class SpinExperimentInfo(BaseModel):
    """Configuration for the Stern-Gerlach experiment."""
    experiment: SpinExperimentPreset = SpinExperimentPreset.EXPERIMENT_1
    initial_direction: StateDirection = StateDirection.Z_PLUS
    source_mode: SourceMode = SourceMode.SINGLE
    emission_rate_hz: float = Field(10.0, ge=0, le=100)
    blocking_mode: BlockingMode = BlockingMode.NO_BLOCKER
    max_particles: int = Field(500, ge=1, le=10000)

    @field_validator('initial_direction')
    def validate_initial_direction(cls, v):
        if v == StateDirection.CUSTOM:
            raise ValueError("The particle source needs a fixed initial direction.")
        return v


class BlochSphereInfo(BaseModel):
    """Configuration for the Bloch sphere measurement experiment."""
    initial_direction: StateDirection = StateDirection.Z_PLUS
    measurement_basis: MeasurementBasis = MeasurementBasis.S_SUB_Z
    magnetic_field_strength: float = Field(1.0, ge=-1, le=1)
    scene: BlochSphereScene = BlochSphereScene.MEASUREMENT
    single_measurement_mode: bool = True
    number_of_multi_systems: int = Field(10, ge=1, le=100)

    @field_validator('initial_direction')
    def validate_initial_direction(cls, v):
        if v == StateDirection.CUSTOM:
            raise ValueError("Initial direction must be one of the fixed axes.")
        return v


class PhotonExperimentInfo(BaseModel):
    """Configuration for the photon polarization experiment."""
    emission_mode: PhotonEmissionMode = PhotonEmissionMode.SINGLE_PHOTON
    emission_rate_hz: float = Field(0.0, ge=0, le=200)
    polarization_direction: PresetPolarizationDirection = PresetPolarizationDirection.FORTY_FIVE_DEGREES
    custom_polarization_angle_deg: float = Field(45.0, ge=0, le=180)
    splitter_axis_deg: float = Field(0.0, ge=-90, le=90)
    max_photons: int = Field(800, ge=1, le=10000)


InfoModel = TypeVar("InfoModel", bound=BaseModel)


def build_info(model_cls: Type[InfoModel], info: Optional[Any] = None, **overrides: Any) -> InfoModel:
    """
    Validate configuration into an Info model.

    Args:
        model_cls: Info model class
        info: An existing model instance, a dict, or None for defaults
        **overrides: Field values applied on top

    Returns:
        The validated model

    Raises:
        InvalidConfigurationError: if any field fails validation
    """
    if isinstance(info, model_cls):
        data: Dict[str, Any] = dict(info)
    elif info is None:
        data = {}
    elif isinstance(info, dict):
        data = dict(info)
    else:
        raise InvalidConfigurationError(f"Unsupported configuration type {type(info).__name__}.")
    data.update(overrides)
    try:
        return model_cls(**data)
    except ValidationError as e:
        raise InvalidConfigurationError(f"Invalid {model_cls.__name__}: {e}") from e

