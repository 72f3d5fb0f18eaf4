from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from parkalert.exceptions import MalformedBookingWindow
from parkalert.models import Booking, BookingStatus, ParkingStatus
from parkalert.window import compute_window

DAY = date(2026, 3, 14)


def _booking(start: str = "14:00", end: str | None = "15:00") -> Booking:
    return Booking(
        booking_id="b1",
        station_name="Central Plaza",
        parking_space_ref="space-1",
        vehicle_type="car",
        booking_date=DAY,
        start_time=start,
        end_time=end,
        booking_status=BookingStatus.CONFIRMED,
        parking_status=ParkingStatus.PARKED,
    )


def test_window_combines_date_and_times() -> None:
    window = compute_window(_booking())
    assert window.start == datetime(2026, 3, 14, 14, 0)
    assert window.end == datetime(2026, 3, 14, 15, 0)
    assert window.grace_end == datetime(2026, 3, 14, 15, 15)


def test_open_ended_booking_has_no_end() -> None:
    window = compute_window(_booking(end=None))
    assert window.end is None
    assert window.grace_end is None


@pytest.mark.parametrize(("start", "end"), [("22:00", "01:30"), ("10:00", "10:00"), ("23:30", "00:00")])
def test_end_before_start_is_clamped_to_end_of_day(start: str, end: str) -> None:
    window = compute_window(_booking(start, end))
    assert window.end == datetime(2026, 3, 14, 23, 59, 59, 999000)
    assert window.grace_end == window.end + timedelta(minutes=15)


def test_window_attaches_timezone() -> None:
    tz = ZoneInfo("Asia/Kolkata")
    window = compute_window(_booking(), tz=tz)
    assert window.start.tzinfo is tz
    assert window.start == datetime(2026, 3, 14, 14, 0, tzinfo=tz)


def test_malformed_time_reports_booking() -> None:
    with pytest.raises(MalformedBookingWindow) as excinfo:
        compute_window(_booking(start="2pm"))
    assert excinfo.value.booking_id == "b1"


def test_missing_date_is_malformed() -> None:
    booking = replace(_booking(), booking_date=None)  # type: ignore[arg-type]
    with pytest.raises(MalformedBookingWindow):
        compute_window(booking)
