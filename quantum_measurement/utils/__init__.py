"""Shared data structures, statistics and logging helpers."""
from .data_structures import (
    UNDETERMINED,
    BlochSphereInfo,
    BlochSphereScene,
    BlockingMode,
    CoinExperimentInfo,
    CoinFaceState,
    DetectionDirection,
    DisplayMode,
    MeasurementAxis,
    MeasurementBasis,
    MeasurementState,
    PhotonEmissionMode,
    PhotonExperimentInfo,
    PresetPolarizationDirection,
    SourceMode,
    SpinExperimentInfo,
    SpinExperimentPreset,
    StateDirection,
    SystemType,
    angles_to_vector,
    build_info,
)
from .logging_setup import DEBUG_L1, DEBUG_L2, DEBUG_L3, setup_logger
from .statistics import AveragingCounter, normalized_outcome_value, outcome_fraction

__all__ = [
    "UNDETERMINED",
    "BlochSphereInfo",
    "BlochSphereScene",
    "BlockingMode",
    "CoinExperimentInfo",
    "CoinFaceState",
    "DetectionDirection",
    "DisplayMode",
    "MeasurementAxis",
    "MeasurementBasis",
    "MeasurementState",
    "PhotonEmissionMode",
    "PhotonExperimentInfo",
    "PresetPolarizationDirection",
    "SourceMode",
    "SpinExperimentInfo",
    "SpinExperimentPreset",
    "StateDirection",
    "SystemType",
    "angles_to_vector",
    "build_info",
    "DEBUG_L1",
    "DEBUG_L2",
    "DEBUG_L3",
    "setup_logger",
    "AveragingCounter",
    "normalized_outcome_value",
    "outcome_fraction",
]
