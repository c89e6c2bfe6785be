class MeasurementError(Exception):
    """Base class for errors raised by the measurement pipeline."""


class ValidationError(MeasurementError):
    """Raw triple is missing a channel, is not an integer, or is out of range."""


class NotFoundError(MeasurementError):
    def __init__(self, measurement_id: int):
        super().__init__(f"Measurement {measurement_id} not found")
        self.measurement_id = measurement_id


class StoreError(MeasurementError):
    """Durable storage failed or is unavailable."""
