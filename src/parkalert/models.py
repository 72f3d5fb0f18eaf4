"""Public data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"


class ParkingStatus(str, Enum):
    PARKED = "parked"
    UNPARKED = "unparked"


class LifecycleState(str, Enum):
    """Derived state of a booking at a given instant."""

    PENDING_CONFIRMATION = "pending_confirmation"
    SCHEDULED = "scheduled"
    UPCOMING = "upcoming"
    ACTIVE = "active"
    IN_GRACE_PERIOD = "in_grace_period"
    OVERSTAYED = "overstayed"
    EXPIRED = "expired"
    CHECKED_OUT = "checked_out"


class AlertKind(str, Enum):
    CONFIRMED = "confirmed"
    UPCOMING = "upcoming"
    ARRIVED = "arrived"
    COMPLETED = "completed"
    EXPIRED = "expired"


@dataclass(frozen=True, slots=True)
class Booking:
    booking_id: str
    station_name: str
    parking_space_ref: str
    vehicle_type: str
    booking_date: date
    start_time: str
    end_time: str | None
    booking_status: BookingStatus
    parking_status: ParkingStatus | None = None
    total_amount: float = 0.0
    user_id: str | None = None


@dataclass(frozen=True, slots=True)
class TimeWindow:
    start: datetime
    end: datetime | None
    grace_end: datetime | None


@dataclass(frozen=True, slots=True)
class OvertimeAssessment:
    minutes: int
    hours: int
    rate: float
    charge: float


@dataclass(frozen=True, slots=True)
class BookingEvaluation:
    booking: Booking
    window: TimeWindow
    state: LifecycleState
    overtime_charge: float


@dataclass(frozen=True, slots=True)
class Notification:
    kind: AlertKind
    booking_id: str
    station_name: str
    title: str
    message: str
    scheduled_at: datetime | None = None
    overtime_charge: float = 0.0


@dataclass(slots=True)
class ScanReport:
    """Outcome of one sweep over a booking snapshot."""

    scanned_at: datetime
    evaluated: list[BookingEvaluation] = field(default_factory=list)
    dispatched: list[Notification] = field(default_factory=list)
    failed: list[Notification] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
