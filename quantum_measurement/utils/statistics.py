"""Utility functions for statistics."""
import logging
from typing import Sequence

# Detector displays saturate at this count
MAX_DISPLAYED_COUNT = 999


def normalized_outcome_value(horizontal_value: float, vertical_value: float) -> float:
    """
    Normalized difference between the two detector readings.

    Returns:
        (h - v) / (h + v) in [-1, 1], or 0 when nothing has been recorded.
    """
    total = horizontal_value + vertical_value
    if total == 0:
        return 0.0
    return (horizontal_value - vertical_value) / total


def outcome_fraction(count_a: int, count_b: int) -> float:
    """Fraction of A outcomes, 0 when there are no outcomes."""
    total = count_a + count_b
    if total == 0:
        return 0.0
    return count_a / total


def estimate_bias(counts_a: Sequence[int], system_count: int) -> float:
    """
    Estimates the bias from repeated measurement passes over an ensemble.

    Args:
        counts_a: Number of A outcomes in each pass.
        system_count: Number of systems measured in each pass.

    Returns:
        The mean fraction of A outcomes over all passes.
    """
    if system_count <= 0:
        raise ValueError("System count must be positive.")
    if len(counts_a) == 0:
        return 0.0

    estimate = sum(counts_a) / (len(counts_a) * system_count)
    logging.debug(f"Bias estimated from {len(counts_a)} passes: {estimate:.4f}")
    return estimate


class AveragingCounter:
    """
    Event counter exposing an averaged event rate.

    Events are accumulated for `count_sample_period` seconds; at the end of each sample
    period the instantaneous rate of that sample is folded into an exponential moving
    average whose smoothing factor is sample_duration / total_averaging_period.
    """

    def __init__(self, total_averaging_period: float = 2.0, count_sample_period: float = 0.5):
        if total_averaging_period <= 0:
            raise ValueError("Total averaging period must be greater than zero.")
        if count_sample_period <= 0:
            raise ValueError("Count sample period must be greater than zero.")
        if total_averaging_period < count_sample_period:
            raise ValueError("Total averaging period must not be shorter than the sample period.")

        self.total_averaging_period = total_averaging_period
        self.count_sample_period = count_sample_period

        self.value = 0.0
        self._current_count = 0
        self._time_since_last_sample = 0.0
        self._has_samples = False

    def count_event(self) -> None:
        self._current_count += 1

    def step(self, dt: float) -> None:
        self._time_since_last_sample += dt
        if self._time_since_last_sample < self.count_sample_period:
            return

        duration = self._time_since_last_sample
        sample_rate = self._current_count / duration
        if not self._has_samples:
            self.value = sample_rate
            self._has_samples = True
        else:
            alpha = min(1.0, duration / self.total_averaging_period)
            self.value += alpha * (sample_rate - self.value)
        self.value = round(self.value, 12)

        self._current_count = 0
        self._time_since_last_sample = 0.0

    def reset(self) -> None:
        self.value = 0.0
        self._current_count = 0
        self._time_since_last_sample = 0.0
        self._has_samples = False
