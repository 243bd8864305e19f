"""Error types raised by the optimizer core."""

from __future__ import annotations


class FleetOptError(Exception):
    """Base exception for the route optimizer."""

    def __init__(self, message: str | None = None):
        self.message = message
        super().__init__(self.message)


class InputValidationError(FleetOptError, ValueError):
    """Raised when solver input records fail boundary validation."""

    def __init__(self, message: str | None = None, errors: list[str] | None = None):
        self.errors = errors or []
        if message is None:
            message = "Input validation failed"
            if self.errors:
                message = f"{message}: " + "; ".join(self.errors)
        super().__init__(message)
