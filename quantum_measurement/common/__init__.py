"""Two-outcome systems shared by the coin and spin experiments."""
from .two_outcome_system import (
    MEASUREMENT_PREPARATION_TIME,
    MeasurementResult,
    SharedBias,
    TwoOutcomeEnsemble,
    TwoOutcomeSystem,
)

__all__ = [
    "MEASUREMENT_PREPARATION_TIME",
    "MeasurementResult",
    "SharedBias",
    "TwoOutcomeEnsemble",
    "TwoOutcomeSystem",
]
