# core/exceptions.py
from typing import Any, Optional


class BillingEngineError(Exception):
    """Base class for typed failures raised by the billing engine."""

    kind: str = "billing_error"


class InvalidDateError(BillingEngineError):
    """A date field could not be read as a calendar date."""

    kind = "invalid_date"

    def __init__(self, field: str, value: Any, message: Optional[str] = None):
        self.field = field
        self.value = value
        super().__init__(message or f"Invalid calendar date for {field}: {value!r}")


class MissingReferenceDateError(BillingEngineError):
    """The caller did not supply the reference date ("today")."""

    kind = "missing_reference_date"

    def __init__(self, message: str = "A reference date is required"):
        super().__init__(message)
