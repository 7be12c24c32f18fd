"""Bloch sphere state and measurement experiment."""
from .bloch_state import AMPLITUDE_TOLERANCE, BlochState
from .bloch_sphere_experiment import BlochSphereExperiment

__all__ = [
    "AMPLITUDE_TOLERANCE",
    "BlochState",
    "BlochSphereExperiment",
]
