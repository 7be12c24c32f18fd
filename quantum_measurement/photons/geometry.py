"""2D vectors and segment intersection for the photon experiment."""
from typing import Optional, Tuple

import numpy as np

UP = np.array([0.0, 1.0])
DOWN = np.array([0.0, -1.0])
LEFT = np.array([-1.0, 0.0])
RIGHT = np.array([1.0, 0.0])

# Cross products below this are treated as parallel segments
PARALLEL_TOLERANCE = 1e-15


def vector2(x: float, y: float) -> np.ndarray:
    return np.array([float(x), float(y)])


def rotated(vector: np.ndarray, angle: float) -> np.ndarray:
    """Rotate a 2D vector counterclockwise by `angle` radians."""
    c, s = np.cos(angle), np.sin(angle)
    return np.array([c * vector[0] - s * vector[1], s * vector[0] + c * vector[1]])


def cross2(a: np.ndarray, b: np.ndarray) -> float:
    return float(a[0] * b[1] - a[1] * b[0])


def segment_intersection(p0: np.ndarray, p1: np.ndarray,
                         q0: np.ndarray, q1: np.ndarray) -> Optional[Tuple[np.ndarray, float]]:
    """
    Intersection of segment p0-p1 with segment q0-q1.

    Both parameters t (along p) and s (along q) must lie in [0, 1]. Parallel,
    collinear and zero-length segments do not intersect.

    Returns:
        (intersection point, t) or None
    """
    r = p1 - p0
    s = q1 - q0
    denominator = cross2(r, s)
    if abs(denominator) < PARALLEL_TOLERANCE:
        return None

    offset = q0 - p0
    t = cross2(offset, s) / denominator
    u = cross2(offset, r) / denominator
    if not (0 <= t <= 1 and 0 <= u <= 1):
        return None
    return p0 + t * r, t
