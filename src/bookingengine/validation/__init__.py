"""Validation of schedule and fee configurations."""

from bookingengine.validation.validator import (
    ConfigValidator,
    ValidationError,
    ValidationErrorType,
    ensure_valid_fee_config,
    ensure_valid_schedule,
)

__all__ = [
    "ConfigValidator",
    "ValidationError",
    "ValidationErrorType",
    "ensure_valid_fee_config",
    "ensure_valid_schedule",
]
