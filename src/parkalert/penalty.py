"""Overstay penalty calculation."""

from __future__ import annotations

import math
from collections.abc import Iterator, Mapping
from datetime import datetime, timedelta

from .classifier import classify
from .const import DEFAULT_VEHICLE_TYPE, PENALTY_RATES
from .exceptions import ValidationError
from .models import Booking, LifecycleState, OvertimeAssessment, TimeWindow
from .util import normalize_vehicle_type
from .window import compute_window

_MINUTE = timedelta(minutes=1)


class PenaltyRates(Mapping[str, float]):
    """Hourly penalty rates keyed by vehicle type.

    Lookups are case-insensitive; unknown vehicle types are charged the rate of
    the default vehicle type.
    """

    def __init__(
        self,
        rates: Mapping[str, float] | None = None,
        *,
        default_vehicle_type: str = DEFAULT_VEHICLE_TYPE,
    ) -> None:
        source = PENALTY_RATES if rates is None else rates
        self._rates: dict[str, float] = {}
        for vehicle_type, rate in source.items():
            if isinstance(rate, bool) or not isinstance(rate, int | float) or rate < 0:
                raise ValidationError(f"Penalty rate for {vehicle_type!r} must be a non-negative number.")
            self._rates[normalize_vehicle_type(vehicle_type)] = rate
        default_key = normalize_vehicle_type(default_vehicle_type)
        if default_key not in self._rates:
            raise ValidationError(f"No penalty rate defined for default vehicle type {default_key!r}.")
        self._default_key = default_key

    def __getitem__(self, vehicle_type: str) -> float:
        return self._rates[normalize_vehicle_type(vehicle_type)]

    def __iter__(self) -> Iterator[str]:
        return iter(self._rates)

    def __len__(self) -> int:
        return len(self._rates)

    def rate_for(self, vehicle_type: str | None) -> float:
        return self._rates.get(normalize_vehicle_type(vehicle_type), self._rates[self._default_key])


DEFAULT_PENALTY_RATES = PenaltyRates()


def overtime_minutes(window: TimeWindow, now: datetime) -> int:
    """Whole minutes past the grace period, rounded up."""
    if window.grace_end is None or now <= window.grace_end:
        return 0
    return math.ceil((now - window.grace_end) / _MINUTE)


def overtime_hours(minutes: int) -> int:
    return math.ceil(minutes / 60) if minutes > 0 else 0


def assess_overtime(
    booking: Booking,
    now: datetime,
    *,
    window: TimeWindow | None = None,
    rates: PenaltyRates | None = None,
) -> OvertimeAssessment:
    """Compute the chargeable overstay for ``booking`` at ``now``.

    Nothing is charged unless the booking is overstayed; partial hours are
    billed as full hours.
    """
    if window is None:
        window = compute_window(booking, tz=now.tzinfo)
    rate_table = rates if rates is not None else DEFAULT_PENALTY_RATES
    rate = rate_table.rate_for(booking.vehicle_type)
    if classify(booking, now, window) != LifecycleState.OVERSTAYED:
        return OvertimeAssessment(minutes=0, hours=0, rate=rate, charge=0)
    minutes = overtime_minutes(window, now)
    hours = overtime_hours(minutes)
    return OvertimeAssessment(minutes=minutes, hours=hours, rate=rate, charge=hours * rate)


def overtime_charge(
    booking: Booking,
    now: datetime,
    *,
    window: TimeWindow | None = None,
    rates: PenaltyRates | None = None,
) -> float:
    return assess_overtime(booking, now, window=window, rates=rates).charge
