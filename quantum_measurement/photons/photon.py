"""Photons with superposed candidate trajectories."""
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np

from .geometry import RIGHT, segment_intersection

PHOTON_SPEED = 0.3  # meters per second
EMITTED_LABEL = "emitted"
# Sum-of-weights tolerance for the probability conservation check
WEIGHT_TOLERANCE = 1e-9


@dataclass
class PhotonMotionState:
    """One candidate trajectory: where the photon may be, where it goes and how likely it is."""
    position: np.ndarray
    direction: np.ndarray
    probability: float
    # Element this trajectory last interacted with; it is not re-tested until another one is hit
    last_element: Optional[object] = None

    def travel_path_end(self, dt: float) -> np.ndarray:
        return self.position + self.direction * (PHOTON_SPEED * dt)

    def travel_path_intersection(self, line_start: np.ndarray, line_end: np.ndarray,
                                 dt: float) -> Optional[Tuple[np.ndarray, float]]:
        """Where this trajectory would cross a line segment during `dt`, with the path parameter t."""
        return segment_intersection(self.position, self.travel_path_end(dt), line_start, line_end)

    def step(self, dt: float) -> None:
        self.position = self.travel_path_end(dt)


class Photon:
    """
    A photon with one or more co-existing candidate trajectories.

    While the photon is active, the in-flight probabilities plus the weight already
    detected always sum to 1.
    """

    def __init__(self, polarization_angle: float, position: np.ndarray, direction: np.ndarray = RIGHT):
        """
        Args:
            polarization_angle: Polarization angle in degrees
            position: Emission point
            direction: Unit propagation direction
        """
        self.polarization_angle = float(polarization_angle)
        self.possible_states: Dict[str, PhotonMotionState] = {
            EMITTED_LABEL: PhotonMotionState(np.array(position, dtype=float), np.array(direction, dtype=float), 1.0)
        }
        self.detected_weight = 0.0
        self.active = True

    @property
    def in_flight_weight(self) -> float:
        return sum(state.probability for state in self.possible_states.values())

    @property
    def total_weight(self) -> float:
        return self.in_flight_weight + self.detected_weight

    def is_conserved(self) -> bool:
        return abs(self.total_weight - 1) <= WEIGHT_TOLERANCE

    def step(self, dt: float) -> None:
        for state in self.possible_states.values():
            state.step(dt)

    def split(self, label: str, children: Dict[str, PhotonMotionState]) -> None:
        """Replace one trajectory by weighted children; zero-weight children are not kept."""
        self.possible_states.pop(label)
        for child_label, child in children.items():
            if child.probability <= 0:
                continue
            key = child_label if label == EMITTED_LABEL else f"{label}.{child_label}"
            self.possible_states[key] = child

    def drop_state(self, label: str) -> None:
        """Remove one trajectory and renormalize the others to total 1."""
        self.possible_states.pop(label)
        self.renormalize()

    def renormalize(self) -> None:
        total = self.in_flight_weight
        if total <= 0:
            self.possible_states.clear()
            self.active = False
            return
        for state in self.possible_states.values():
            state.probability /= total

    def mark_detected(self) -> None:
        """Collapse onto a detector: all weight becomes detected and the photon leaves the active set."""
        self.possible_states.clear()
        self.detected_weight = 1.0
        self.active = False

    def retire(self) -> None:
        self.possible_states.clear()
        self.active = False
