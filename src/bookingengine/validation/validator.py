"""Validation of schedule and fee configurations.

This module is the single source of truth for configuration invariants.
The resolver and the fee calculator run it on entry so a malformed venue
fails loudly instead of producing empty slot lists or negative totals.
"""

from dataclasses import dataclass, field
from datetime import time
from decimal import Decimal
from enum import Enum
from typing import Optional

from bookingengine.domain.errors import ConfigurationError, InputValidationError
from bookingengine.domain.models import (
    DayHours,
    FeeConfig,
    FeeMode,
    ScheduleConfig,
    Weekday,
    to_decimal,
)

HUNDRED = Decimal("100")


class ValidationErrorType(Enum):
    """Types of configuration errors."""

    WINDOW_INVERTED = "window_inverted"
    NON_POSITIVE_INTERVAL = "non_positive_interval"
    NON_POSITIVE_DURATION = "non_positive_duration"
    NEGATIVE_LEAD_TIME = "negative_lead_time"
    NON_POSITIVE_CAPACITY = "non_positive_capacity"
    NEGATIVE_HORIZON = "negative_horizon"
    INVALID_OPERATING_DAY = "invalid_operating_day"
    INVALID_TYPE = "invalid_type"
    PERCENT_OUT_OF_RANGE = "percent_out_of_range"
    PROCESSOR_PERCENT_TOO_HIGH = "processor_percent_too_high"
    NEGATIVE_FIXED_FEE = "negative_fixed_fee"
    INVALID_MODE = "invalid_mode"
    MISSING_LABEL = "missing_label"
    INVALID_CURRENCY = "invalid_currency"


@dataclass
class ValidationError:
    """A single configuration problem."""

    error_type: ValidationErrorType
    message: str
    field_name: Optional[str] = None

    def __str__(self) -> str:
        parts = [f"[{self.error_type.value}]"]
        if self.field_name:
            parts.append(f"{self.field_name}:")
        parts.append(self.message)
        return " ".join(parts)


@dataclass
class ValidationResult:
    """Result of validating a configuration."""

    is_valid: bool = True
    errors: list[ValidationError] = field(default_factory=list)

    def add_error(self, error: ValidationError) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False

    def has_error(self, error_type: ValidationErrorType) -> bool:
        return any(e.error_type == error_type for e in self.errors)

    def raise_for_errors(self, subject: str) -> None:
        """Raise ConfigurationError listing every problem, if any."""
        if self.is_valid:
            return
        issues = [str(e) for e in self.errors]
        raise ConfigurationError(
            f"Invalid {subject}: " + "; ".join(issues),
            issues=issues,
        )


class ConfigValidator:
    """Validates ScheduleConfig and FeeConfig invariants.

    Example:
        >>> validator = ConfigValidator()
        >>> result = validator.validate_schedule(config)
        >>> result.raise_for_errors("schedule configuration")
    """

    def validate_schedule(self, config: ScheduleConfig) -> ValidationResult:
        """Check a schedule configuration.

        Args:
            config: The schedule to validate.

        Returns:
            ValidationResult with every violated rule.
        """
        result = ValidationResult()

        self._validate_window(
            DayHours(config.start_time, config.end_time), "start_time/end_time", result
        )
        for weekday, hours in config.custom_hours.items():
            day_name = weekday.name if isinstance(weekday, Weekday) else str(weekday)
            self._validate_window(hours, f"custom_hours[{day_name.lower()}]", result)

        for day in config.operating_days:
            if not isinstance(day, Weekday):
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.INVALID_OPERATING_DAY,
                        message=f"Not a Weekday: {day!r}",
                        field_name="operating_days",
                    )
                )

        interval = self._integer_field(config, "slot_interval_minutes", result)
        if interval is not None and interval <= 0:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.NON_POSITIVE_INTERVAL,
                    message=f"Must be positive, got {interval}",
                    field_name="slot_interval_minutes",
                )
            )

        duration = self._integer_field(config, "duration_minutes", result)
        if duration is not None and duration <= 0:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.NON_POSITIVE_DURATION,
                    message=f"Must be positive, got {duration}",
                    field_name="duration_minutes",
                )
            )

        lead_time = self._integer_field(config, "advance_booking_minutes", result)
        if lead_time is not None and lead_time < 0:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.NEGATIVE_LEAD_TIME,
                    message=f"Must not be negative, got {lead_time}",
                    field_name="advance_booking_minutes",
                )
            )

        capacity = self._integer_field(config, "capacity_per_slot", result, optional=True)
        if capacity is not None and capacity <= 0:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.NON_POSITIVE_CAPACITY,
                    message=f"Must be positive, got {capacity}",
                    field_name="capacity_per_slot",
                )
            )

        horizon = self._integer_field(config, "max_advance_days", result, optional=True)
        if horizon is not None and horizon < 0:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.NEGATIVE_HORIZON,
                    message=f"Must not be negative, got {horizon}",
                    field_name="max_advance_days",
                )
            )

        return result

    def validate_fee_config(self, config: FeeConfig) -> ValidationResult:
        """Check a fee configuration.

        A processor percentage of 100 or more would make the pass-to-customer
        total divide by zero or go negative, so it is rejected in both modes.
        """
        result = ValidationResult()

        if not isinstance(config.mode, FeeMode):
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.INVALID_MODE,
                    message=f"Not a FeeMode: {config.mode!r}",
                    field_name="mode",
                )
            )

        percents = {}
        for name in ("platform_fee_percent", "processor_fee_percent"):
            value = self._decimal_field(
                config, name, ValidationErrorType.PERCENT_OUT_OF_RANGE, result
            )
            if value is None:
                continue
            percents[name] = value
            if value < 0 or value > HUNDRED:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.PERCENT_OUT_OF_RANGE,
                        message=f"Must be within [0, 100], got {value}",
                        field_name=name,
                    )
                )

        processor_percent = percents.get("processor_fee_percent")
        if processor_percent is not None and processor_percent >= HUNDRED:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.PROCESSOR_PERCENT_TOO_HIGH,
                    message="Must be below 100 for the total to be solvable",
                    field_name="processor_fee_percent",
                )
            )

        fixed = self._decimal_field(
            config, "processor_fee_fixed", ValidationErrorType.NEGATIVE_FIXED_FEE, result
        )
        if fixed is not None and fixed < 0:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.NEGATIVE_FIXED_FEE,
                    message=f"Must not be negative, got {fixed}",
                    field_name="processor_fee_fixed",
                )
            )

        if not isinstance(config.fee_label, str) or not config.fee_label.strip():
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.MISSING_LABEL,
                    message="Fee label must not be empty",
                    field_name="fee_label",
                )
            )

        if not isinstance(config.currency, str) or len(config.currency.strip()) != 3:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.INVALID_CURRENCY,
                    message=f"Expected a 3-letter currency code, got {config.currency!r}",
                    field_name="currency",
                )
            )

        return result

    def _integer_field(
        self,
        config: ScheduleConfig,
        name: str,
        result: ValidationResult,
        optional: bool = False,
    ) -> Optional[int]:
        """Return an integer field, or None when it is unset or mistyped."""
        value = getattr(config, name)
        if value is None and optional:
            return None
        # bool is an int subclass but never a valid count
        if isinstance(value, bool) or not isinstance(value, int):
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.INVALID_TYPE,
                    message=f"Must be an integer, got {value!r}",
                    field_name=name,
                )
            )
            return None
        return value

    def _decimal_field(
        self,
        config: FeeConfig,
        name: str,
        error_type: ValidationErrorType,
        result: ValidationResult,
    ) -> Optional[Decimal]:
        """Return a fee field as a finite Decimal, or None when malformed."""
        value = getattr(config, name)
        try:
            return to_decimal(value, name)
        except InputValidationError as e:
            result.add_error(
                ValidationError(error_type=error_type, message=str(e), field_name=name)
            )
            return None

    def _validate_window(
        self,
        hours: DayHours,
        field_name: str,
        result: ValidationResult,
    ) -> None:
        if not isinstance(hours, DayHours) or not (
            isinstance(hours.start_time, time) and isinstance(hours.end_time, time)
        ):
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.INVALID_TYPE,
                    message=f"Expected start and end times of day, got {hours!r}",
                    field_name=field_name,
                )
            )
            return
        if hours.end_time <= hours.start_time:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.WINDOW_INVERTED,
                    message=(
                        f"End {hours.end_time.strftime('%H:%M')} must be after "
                        f"start {hours.start_time.strftime('%H:%M')}"
                    ),
                    field_name=field_name,
                )
            )


def ensure_valid_schedule(config: ScheduleConfig) -> None:
    """Raise ConfigurationError if the schedule configuration is invalid."""
    ConfigValidator().validate_schedule(config).raise_for_errors("schedule configuration")


def ensure_valid_fee_config(config: FeeConfig) -> None:
    """Raise ConfigurationError if the fee configuration is invalid."""
    ConfigValidator().validate_fee_config(config).raise_for_errors("fee configuration")
