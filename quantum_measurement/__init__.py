"""Simulation engine for coin, spin and photon measurement experiments."""
from .bloch_sphere import BlochSphereExperiment, BlochState
from .coins import CoinExperimentScene
from .common import SharedBias, TwoOutcomeEnsemble, TwoOutcomeSystem
from .exceptions import (
    InvalidAmplitudeError,
    InvalidConfigurationError,
    InvalidStateError,
    QuantumMeasurementError,
)
from .photons import PhotonsExperiment
from .qrng import RandomSource
from .spin import SternGerlachDevice, SternGerlachExperiment

__version__ = "0.1.0"

__all__ = [
    "BlochSphereExperiment",
    "BlochState",
    "CoinExperimentScene",
    "SharedBias",
    "TwoOutcomeEnsemble",
    "TwoOutcomeSystem",
    "InvalidAmplitudeError",
    "InvalidConfigurationError",
    "InvalidStateError",
    "QuantumMeasurementError",
    "PhotonsExperiment",
    "RandomSource",
    "SternGerlachDevice",
    "SternGerlachExperiment",
]
