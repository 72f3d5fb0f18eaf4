"""Booking data sources."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from importlib import resources
from typing import Any

import aiohttp

from .const import ACTIVE_BOOKINGS_ENDPOINT, DEFAULT_HEADERS
from .exceptions import AuthError, DataSourceError, NetworkError, ValidationError
from .models import Booking, BookingStatus, ParkingStatus
from .util import normalize_vehicle_type, parse_booking_date, parse_time_of_day

_LOGGER = logging.getLogger(__name__)
_DEFAULT_TIMEOUT = aiohttp.ClientTimeout(total=30)
SCHEMA_FILENAME = "booking.schema.json"


class BaseBookingSource(ABC):
    """Supplies the bookings the lifecycle engine evaluates."""

    @abstractmethod
    async def fetch_active_bookings(self, user_id: str) -> list[Booking]:
        """Return the user's active bookings."""

    async def aclose(self) -> None:
        return None


class StaticBookingSource(BaseBookingSource):
    """Serves a fixed, replaceable list of bookings."""

    def __init__(self, bookings: Iterable[Booking] = ()) -> None:
        self._bookings = list(bookings)

    def replace(self, bookings: Iterable[Booking]) -> None:
        self._bookings = list(bookings)

    async def fetch_active_bookings(self, user_id: str) -> list[Booking]:
        return [b for b in self._bookings if b.user_id in (None, user_id)]


def load_booking_schema() -> dict:
    """Return the JSON schema describing a backend booking record."""
    schema_path = resources.files("parkalert") / SCHEMA_FILENAME
    return json.loads(schema_path.read_text(encoding="utf-8"))


def booking_from_payload(data: Any) -> Booking:
    """Map a backend booking record onto a ``Booking``.

    Raises:
        DataSourceError: If required fields are missing or invalid.
    """
    if not isinstance(data, dict):
        raise DataSourceError("Booking record must be a JSON object.")
    booking_id = _coerce_id(data.get("bookingId") or data.get("_id"), "booking id")
    start_time = data.get("startTime")
    if not isinstance(start_time, str):
        raise DataSourceError(f"Booking {booking_id} is missing startTime.")
    end_time = data.get("endTime") or None
    if end_time is not None and not isinstance(end_time, str):
        raise DataSourceError(f"Booking {booking_id} has an invalid endTime.")
    try:
        parse_time_of_day(start_time)
        if end_time is not None:
            parse_time_of_day(end_time)
        booking_date = parse_booking_date(data.get("bookingDate") or data.get("selectedDate"))
        vehicle_type = normalize_vehicle_type(data.get("vehicleType"))
    except ValidationError as exc:
        raise DataSourceError(f"Booking {booking_id} has invalid fields: {exc}") from exc

    return Booking(
        booking_id=booking_id,
        station_name=_station_name(data),
        parking_space_ref=_space_ref(data),
        vehicle_type=vehicle_type,
        booking_date=booking_date,
        start_time=start_time,
        end_time=end_time,
        booking_status=_booking_status(data.get("bookingStatus"), booking_id),
        parking_status=_parking_status(data.get("parkingStatus"), booking_id),
        total_amount=_parse_amount(data.get("totalAmount")),
        user_id=_optional_str(data.get("userId")),
    )


class HttpBookingSource(BaseBookingSource):
    """Fetches active bookings from the parking backend."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        *,
        base_url: str,
        token: str | None = None,
        timeout: aiohttp.ClientTimeout | None = None,
        retry_count: int = 0,
    ) -> None:
        if session is None:
            raise ValidationError("Session is required.")
        if not isinstance(base_url, str) or not base_url.strip():
            raise ValidationError("base_url must be a non-empty string.")
        self._session = session
        self._base_url = base_url.strip().rstrip("/")
        self._token = token or None
        self._timeout = timeout or _DEFAULT_TIMEOUT
        self._retry_count = max(0, retry_count)

    async def fetch_active_bookings(self, user_id: str) -> list[Booking]:
        if not isinstance(user_id, str) or not user_id.strip():
            raise ValidationError("user_id is required.")
        _LOGGER.debug("Fetching active bookings for user %s", user_id)
        data = await self._get_bookings_payload(user_id.strip())
        bookings = self._map_booking_list(data)
        _LOGGER.debug("Fetched %s booking(s) for user %s", len(bookings), user_id)
        return bookings

    def _map_booking_list(self, data: Any) -> list[Booking]:
        if isinstance(data, dict) and "data" in data:
            data = data["data"]
        if data is None:
            return []
        if not isinstance(data, list):
            raise DataSourceError("Backend response did not contain a booking list.")
        bookings: list[Booking] = []
        for item in data:
            try:
                bookings.append(booking_from_payload(item))
            except DataSourceError as exc:
                _LOGGER.warning("Skipping invalid booking record: %s", exc)
        return bookings

    def _headers(self) -> dict[str, str]:
        headers = dict(DEFAULT_HEADERS)
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def _get_bookings_payload(self, user_id: str) -> Any:
        url = f"{self._base_url}{ACTIVE_BOOKINGS_ENDPOINT}/{user_id}"
        attempts = self._retry_count + 1
        for attempt in range(1, attempts + 1):
            try:
                async with self._session.get(url, headers=self._headers(), timeout=self._timeout) as response:
                    if response.status in (401, 403):
                        raise AuthError("Backend rejected the booking token.")
                    if not 200 <= response.status < 300:
                        raise DataSourceError(
                            f"Active bookings request failed with status {response.status}."
                        )
                    try:
                        return await response.json()
                    except (aiohttp.ContentTypeError, ValueError) as exc:
                        raise DataSourceError("Active bookings response was not valid JSON.") from exc
            except (aiohttp.ClientError, TimeoutError) as exc:
                if attempt == attempts:
                    raise NetworkError(f"Could not reach the bookings backend: {exc}") from exc
                _LOGGER.debug("Bookings fetch for %s failed (attempt %s/%s)", user_id, attempt, attempts)
        raise DataSourceError("Active bookings request failed.")


def _coerce_id(value: Any, field: str) -> str:
    if value is None:
        raise DataSourceError(f"Booking record missing {field}.")
    text = str(value).strip()
    if not text:
        raise DataSourceError(f"Booking record missing {field}.")
    return text


def _station_name(data: dict) -> str:
    name = data.get("stationName")
    if not name and isinstance(data.get("parkingSpace"), dict):
        name = data["parkingSpace"].get("name")
    return str(name) if name else ""


def _space_ref(data: dict) -> str:
    ref = data.get("parkingSpaceId") or data.get("parkingSpace")
    if isinstance(ref, dict):
        ref = ref.get("_id") or ref.get("id")
    return str(ref) if ref else ""


def _booking_status(value: Any, booking_id: str) -> BookingStatus:
    if value is None:
        # Unconfirmed bookings get no time-based alerts.
        _LOGGER.warning("Booking %s has no bookingStatus; treating it as pending", booking_id)
        return BookingStatus.PENDING
    try:
        return BookingStatus(str(value).strip().lower())
    except ValueError as exc:
        raise DataSourceError(f"Booking {booking_id} has unknown bookingStatus {value!r}.") from exc


def _parking_status(value: Any, booking_id: str) -> ParkingStatus | None:
    if value is None or value == "":
        return None
    try:
        return ParkingStatus(str(value).strip().lower())
    except ValueError as exc:
        raise DataSourceError(f"Booking {booking_id} has unknown parkingStatus {value!r}.") from exc


def _parse_amount(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return 0.0
    return 0.0


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
