"""Venue files: JSON snapshots of one bookable item's configuration.

A venue file bundles what the engine consumes from its collaborators
(schedule, blocked dates, reservations, fees, ticket prices) so the CLI can
be driven without a database.
"""

import json
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Optional, Union

from bookingengine.domain.errors import ConfigurationError, InputValidationError
from bookingengine.domain.models import (
    BlockedDate,
    DayHours,
    ExistingReservation,
    FeeConfig,
    FeeMode,
    ScheduleConfig,
    Weekday,
    parse_time_of_day,
    to_decimal,
)
from bookingengine.pricing.tiers import CustomTier, TicketPricing


@dataclass
class Venue:
    """Everything needed to resolve availability and quote one item."""

    name: str
    item_name: str
    schedule: ScheduleConfig
    pricing: TicketPricing
    fees: Optional[FeeConfig] = None
    blocked_dates: list[BlockedDate] = field(default_factory=list)
    reservations: list[ExistingReservation] = field(default_factory=list)

    def fee_config(self, mode: Optional[FeeMode] = None) -> FeeConfig:
        """The venue's fee configuration, optionally forcing a mode.

        Falls back to environment defaults when the file has no fees.
        """
        if self.fees is None:
            return FeeConfig.from_settings(mode or FeeMode.PASS_TO_CUSTOMER)
        if mode is None or mode is self.fees.mode:
            return self.fees
        return FeeConfig(
            mode=mode,
            platform_fee_percent=self.fees.platform_fee_percent,
            processor_fee_percent=self.fees.processor_fee_percent,
            processor_fee_fixed=self.fees.processor_fee_fixed,
            fee_label=self.fees.fee_label,
            show_fee_breakdown=self.fees.show_fee_breakdown,
            currency=self.fees.currency,
        )


def load_venue(path: Union[str, Path]) -> Venue:
    """Load a venue from a JSON file.

    Raises:
        ConfigurationError: If the file is missing required keys or holds
            malformed values.
    """
    try:
        data = json.loads(Path(path).read_text())
    except OSError as e:
        raise ConfigurationError(f"Cannot read venue file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"{path} is not valid JSON: {e}") from e
    return venue_from_dict(data)


def venue_from_dict(data: dict[str, Any]) -> Venue:
    """Build a Venue from parsed JSON."""
    try:
        return Venue(
            name=data.get("name", ""),
            item_name=data.get("item", ""),
            schedule=_parse_schedule(data["schedule"]),
            pricing=_parse_pricing(data["pricing"]),
            fees=_parse_fees(data["fees"]) if data.get("fees") else None,
            blocked_dates=[_parse_blocked(b) for b in data.get("blocked_dates", [])],
            reservations=[_parse_reservation(r) for r in data.get("reservations", [])],
        )
    except ConfigurationError:
        raise
    except KeyError as e:
        raise ConfigurationError(f"Venue is missing required key {e}") from e
    except (InputValidationError, TypeError, ValueError) as e:
        raise ConfigurationError(f"Venue has a malformed value: {e}") from e


def _parse_schedule(data: dict[str, Any]) -> ScheduleConfig:
    custom_hours = {
        Weekday.parse(name): DayHours(
            start_time=parse_time_of_day(hours["start_time"]),
            end_time=parse_time_of_day(hours["end_time"]),
        )
        for name, hours in data.get("custom_hours", {}).items()
    }
    return ScheduleConfig(
        operating_days=frozenset(Weekday.parse(d) for d in data["operating_days"]),
        start_time=parse_time_of_day(data["start_time"]),
        end_time=parse_time_of_day(data["end_time"]),
        slot_interval_minutes=int(data["slot_interval_minutes"]),
        duration_minutes=int(data["duration_minutes"]),
        advance_booking_minutes=int(data.get("advance_booking_minutes", 0)),
        capacity_per_slot=_optional_int(data.get("capacity_per_slot")),
        max_advance_days=_optional_int(data.get("max_advance_days")),
        custom_hours=custom_hours,
    )


def _optional_int(value: Any) -> Optional[int]:
    return int(value) if value is not None else None


def _parse_fees(data: dict[str, Any]) -> FeeConfig:
    return FeeConfig(
        mode=FeeMode(data["mode"]),
        platform_fee_percent=to_decimal(data.get("platform_fee_percent", 0)),
        processor_fee_percent=to_decimal(data.get("processor_fee_percent", 0)),
        processor_fee_fixed=to_decimal(data.get("processor_fee_fixed", 0)),
        fee_label=data.get("fee_label", "Service Fee"),
        show_fee_breakdown=bool(data.get("show_fee_breakdown", True)),
        currency=data.get("currency", "usd"),
    )


def _parse_pricing(data: dict[str, Any]) -> TicketPricing:
    tiers = tuple(
        CustomTier(
            id=t["id"],
            name=t.get("name", t["id"]),
            price=to_decimal(t["price"]),
            min_qty=int(t.get("min_qty", 0)),
            max_qty=int(t.get("max_qty", 10)),
        )
        for t in data.get("custom_tiers", [])
    )
    return TicketPricing(
        adult_price=to_decimal(data["adult_price"]),
        child_price=to_decimal(data.get("child_price", 0)),
        custom_tiers=tiers,
    )


def _parse_blocked(data: dict[str, Any]) -> BlockedDate:
    start_time = data.get("start_time")
    end_time = data.get("end_time")
    return BlockedDate(
        start=date.fromisoformat(data["date"]),
        end=date.fromisoformat(data["end_date"]) if data.get("end_date") else None,
        start_time=parse_time_of_day(start_time) if start_time else None,
        end_time=parse_time_of_day(end_time) if end_time else None,
        reason=data.get("reason", ""),
    )


def _parse_reservation(data: dict[str, Any]) -> ExistingReservation:
    return ExistingReservation(
        day=date.fromisoformat(data["date"]),
        start_time=parse_time_of_day(data["time"]),
        party_size=int(data.get("party_size", 1)),
    )
