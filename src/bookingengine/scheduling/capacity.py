"""Commit-time capacity ledger.

The resolver reports capacity from a reservation snapshot, so two customers
can both see the last spot as free. Whoever commits a booking must re-check
capacity atomically at commit time. ``SlotCapacityLedger`` is an in-memory,
thread-safe reference for that decrement-if-positive step; a persistent
store would implement the same contract with a conditional update.
"""

import logging
import threading
from collections.abc import Iterable
from datetime import date, time
from typing import Optional

from bookingengine.domain.errors import InputValidationError
from bookingengine.domain.models import ExistingReservation

logger = logging.getLogger(__name__)


class SlotCapacityLedger:
    """Tracks booked units per (date, start time) with atomic reservation.

    Example:
        >>> ledger = SlotCapacityLedger(capacity_per_slot=8)
        >>> ledger.seed(existing_reservations)
        >>> if not ledger.try_reserve(day, start, units=4):
        ...     raise SlotUnavailableError("Slot filled up")
    """

    def __init__(self, capacity_per_slot: Optional[int]):
        """Create a ledger.

        Args:
            capacity_per_slot: Units each slot can hold (None = unbounded).
        """
        if capacity_per_slot is not None and capacity_per_slot <= 0:
            raise InputValidationError(
                f"capacity_per_slot must be positive, got {capacity_per_slot}"
            )
        self.capacity_per_slot = capacity_per_slot
        self._booked: dict[tuple[date, time], int] = {}
        self._lock = threading.Lock()

    def seed(self, reservations: Iterable[ExistingReservation]) -> None:
        """Load already-committed reservations."""
        with self._lock:
            for r in reservations:
                key = (r.day, r.start_time)
                self._booked[key] = self._booked.get(key, 0) + r.party_size

    def booked(self, day: date, start: time) -> int:
        with self._lock:
            return self._booked.get((day, start), 0)

    def remaining(self, day: date, start: time) -> Optional[int]:
        """Units still free in a slot (None when unbounded)."""
        if self.capacity_per_slot is None:
            return None
        return max(0, self.capacity_per_slot - self.booked(day, start))

    def try_reserve(self, day: date, start: time, units: int = 1) -> bool:
        """Atomically claim ``units`` in a slot if they are all still free.

        Returns:
            True if the units were claimed, False if the slot lacks room.
        """
        if units <= 0:
            raise InputValidationError(f"units must be positive, got {units}")

        key = (day, start)
        with self._lock:
            current = self._booked.get(key, 0)
            if self.capacity_per_slot is not None and current + units > self.capacity_per_slot:
                logger.warning(
                    "Capacity check failed for %s %s: %d booked, %d requested, capacity %d",
                    day, start.strftime("%H:%M"), current, units, self.capacity_per_slot,
                )
                return False
            self._booked[key] = current + units
        return True

    def release(self, day: date, start: time, units: int = 1) -> None:
        """Return previously reserved units, e.g. after a failed payment."""
        key = (day, start)
        with self._lock:
            current = self._booked.get(key, 0)
            if units <= 0 or units > current:
                raise InputValidationError(
                    f"Cannot release {units} units from a slot holding {current}"
                )
            self._booked[key] = current - units
