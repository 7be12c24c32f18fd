"""Photon polarization experiment."""
from .geometry import DOWN, LEFT, RIGHT, UP, segment_intersection
from .laser import Laser
from .optical_elements import (
    InteractionResult,
    InteractionType,
    Mirror,
    OpticalElement,
    PhotonDetector,
    PolarizingBeamSplitter,
)
from .photon import PHOTON_SPEED, Photon, PhotonMotionState
from .photon_experiment import PhotonsExperiment

__all__ = [
    "DOWN",
    "LEFT",
    "RIGHT",
    "UP",
    "segment_intersection",
    "Laser",
    "InteractionResult",
    "InteractionType",
    "Mirror",
    "OpticalElement",
    "PhotonDetector",
    "PolarizingBeamSplitter",
    "PHOTON_SPEED",
    "Photon",
    "PhotonMotionState",
    "PhotonsExperiment",
]
