"""Stern-Gerlach devices and chained spin experiments."""
from .stern_gerlach import SternGerlachDevice, SternGerlachOutcome, up_probability
from .spin_experiment import SpinMeasurementRecord, SpinParticle, SternGerlachExperiment

__all__ = [
    "SternGerlachDevice",
    "SternGerlachOutcome",
    "SternGerlachExperiment",
    "SpinMeasurementRecord",
    "SpinParticle",
    "up_probability",
]
