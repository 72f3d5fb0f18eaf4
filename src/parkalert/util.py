"""Shared utilities for parsing and normalizing booking fields."""

from __future__ import annotations

import re
from datetime import date, datetime, time

from .const import DEFAULT_VEHICLE_TYPE
from .exceptions import MalformedBookingWindow, ValidationError

_TIME_OF_DAY_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")
_VEHICLE_TYPE_RE = re.compile(r"[^a-z]")


def parse_time_of_day(value: str) -> time:
    """Parse a 24-hour ``HH:MM`` string, dropping seconds entirely."""
    if not isinstance(value, str) or not value:
        raise MalformedBookingWindow("Time of day must be a non-empty HH:MM string.")
    match = _TIME_OF_DAY_RE.match(value)
    if match is None:
        raise MalformedBookingWindow(f"Time of day {value!r} is not in HH:MM format.")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise MalformedBookingWindow(f"Time of day {value!r} is out of range.")
    return time(hours, minutes)


def parse_booking_date(value: date | str | None) -> date:
    # Backend dates arrive as ISO dates or full ISO timestamps.
    if value is None:
        raise MalformedBookingWindow("Booking date is required.")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise MalformedBookingWindow("Booking date must be a non-empty string.")
    raw = value.strip()
    if raw.endswith("Z"):
        raw = f"{raw[:-1]}+00:00"
    try:
        if "T" in raw or " " in raw:
            return datetime.fromisoformat(raw).date()
        return date.fromisoformat(raw)
    except ValueError as exc:
        raise MalformedBookingWindow(f"Booking date {value!r} is not a valid ISO date.") from exc


def normalize_vehicle_type(value: str | None) -> str:
    if value is None:
        return DEFAULT_VEHICLE_TYPE
    if not isinstance(value, str):
        raise ValidationError("Vehicle type must be a string.")
    normalized = _VEHICLE_TYPE_RE.sub("", value.lower())
    return normalized or DEFAULT_VEHICLE_TYPE


def format_money(amount: float) -> str:
    if float(amount).is_integer():
        return str(int(amount))
    return f"{amount:.2f}"
