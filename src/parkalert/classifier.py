"""Lifecycle state classification."""

from __future__ import annotations

from datetime import datetime

from .const import UPCOMING_LEAD
from .models import Booking, BookingStatus, LifecycleState, ParkingStatus, TimeWindow
from .window import compute_window


def classify(
    booking: Booking,
    now: datetime,
    window: TimeWindow | None = None,
) -> LifecycleState:
    """Return the lifecycle state of ``booking`` at ``now``.

    Rules are evaluated in order and the first match wins. A physical
    check-out overrides every time-based state.
    """
    if window is None:
        window = compute_window(booking, tz=now.tzinfo)

    if booking.parking_status == ParkingStatus.UNPARKED:
        return LifecycleState.CHECKED_OUT
    if window.end is not None and now > window.end and booking.parking_status is None:
        return LifecycleState.EXPIRED
    if window.grace_end is not None and now > window.grace_end:
        return LifecycleState.OVERSTAYED
    if window.end is not None and now > window.end:
        return LifecycleState.IN_GRACE_PERIOD
    if now >= window.start:
        return LifecycleState.ACTIVE
    if window.start - now <= UPCOMING_LEAD:
        return LifecycleState.UPCOMING
    if booking.booking_status == BookingStatus.PENDING:
        return LifecycleState.PENDING_CONFIRMATION
    return LifecycleState.SCHEDULED
