"""Exceptions raised by the award engine."""
from datetime import date


class LabourEngineError(Exception):
    """Base class for every engine error."""


class RateConfigError(LabourEngineError):
    """The rate configuration is invalid and must be fixed before any calculation runs."""


class RateNotFoundError(LabourEngineError):
    """No award rate is effective for a classification on a date."""

    def __init__(self, classification: str, on_date: date, message: str | None = None):
        self.classification = classification
        self.on_date = on_date
        super().__init__(
            message
            or f"No award rate effective for classification {classification!r} on {on_date.isoformat()}"
        )


class UnknownClassificationError(RateNotFoundError):
    """The classification is not present in the loaded rate table at all."""

    def __init__(self, classification: str, on_date: date):
        super().__init__(
            classification,
            on_date,
            f"Classification {classification!r} is not defined in the rate table",
        )
