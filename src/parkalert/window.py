"""Time-window calculation for bookings."""

from __future__ import annotations

from datetime import datetime, tzinfo

from .const import END_OF_DAY, GRACE_PERIOD
from .exceptions import MalformedBookingWindow
from .models import Booking, TimeWindow
from .util import parse_booking_date, parse_time_of_day


def compute_window(booking: Booking, *, tz: tzinfo | None = None) -> TimeWindow:
    """Derive the start, end and grace-end instants of a booking.

    An end time at or before the start time is treated as running to the last
    instant of the booking date rather than into the next day.

    Raises:
        MalformedBookingWindow: If the date or a time field cannot be parsed.
    """
    try:
        booking_date = parse_booking_date(booking.booking_date)
        start = datetime.combine(booking_date, parse_time_of_day(booking.start_time), tzinfo=tz)
        end = None
        if booking.end_time:
            end = datetime.combine(booking_date, parse_time_of_day(booking.end_time), tzinfo=tz)
            if end <= start:
                end = datetime.combine(booking_date, END_OF_DAY, tzinfo=tz)
    except MalformedBookingWindow as exc:
        raise MalformedBookingWindow(str(exc), booking_id=booking.booking_id) from exc
    grace_end = end + GRACE_PERIOD if end is not None else None
    return TimeWindow(start=start, end=end, grace_end=grace_end)
