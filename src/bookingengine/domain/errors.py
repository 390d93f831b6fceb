"""Exception types raised by the booking engine.

Configuration problems and bad call inputs are reported as distinct types so
callers can tell a misconfigured venue apart from a request that simply
cannot be served.
"""

from typing import Optional


class BookingEngineError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(BookingEngineError, ValueError):
    """A ScheduleConfig or FeeConfig violates one of its invariants.

    Attributes:
        issues: Human-readable descriptions of every violated rule.
    """

    def __init__(self, message: str, issues: Optional[list[str]] = None):
        super().__init__(message)
        self.issues = issues or [message]


class InputValidationError(BookingEngineError, ValueError):
    """A call received an argument outside its accepted domain."""


class SlotUnavailableError(InputValidationError):
    """The requested slot does not exist or cannot hold the party."""
