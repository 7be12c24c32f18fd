"""Exceptions raised by the measurement simulation."""


class QuantumMeasurementError(Exception):
    pass


class InvalidConfigurationError(QuantumMeasurementError):
    """Malformed setup detected at construction time."""
    pass


class InvalidStateError(QuantumMeasurementError):
    """Operation requested in a measurement phase that forbids it."""
    pass


class InvalidAmplitudeError(QuantumMeasurementError):
    """Amplitude pair is not normalized within tolerance."""
    pass
