"""Notifier implementations that deliver booking alerts."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

import aiohttp

from .const import ALERT_TITLES, ANDROID_CHANNEL_ID, EXPO_PUSH_ENDPOINT
from .exceptions import NotifierError, ValidationError
from .models import AlertKind, Notification

_LOGGER = logging.getLogger(__name__)
_DEFAULT_TIMEOUT = aiohttp.ClientTimeout(total=15)


class BaseNotifier(ABC):
    """Base class for alert delivery backends."""

    @abstractmethod
    async def notify(
        self,
        kind: AlertKind,
        booking_id: str,
        station_name: str,
        message: str,
        scheduled_at: datetime | None = None,
        *,
        title: str | None = None,
        data: Mapping[str, Any] | None = None,
    ) -> None:
        """Deliver an alert now, or at ``scheduled_at`` when given."""

    async def send(self, notification: Notification) -> None:
        await self.notify(
            notification.kind,
            notification.booking_id,
            notification.station_name,
            notification.message,
            notification.scheduled_at,
            title=notification.title,
            data={"overtime_charge": notification.overtime_charge}
            if notification.overtime_charge
            else None,
        )

    async def aclose(self) -> None:
        return None

    def _title(self, kind: AlertKind, title: str | None) -> str:
        return title or ALERT_TITLES[AlertKind(kind).value]


class LoggingNotifier(BaseNotifier):
    """Writes alerts to the log instead of a device."""

    def __init__(self, level: int = logging.INFO) -> None:
        self._level = level

    async def notify(
        self,
        kind: AlertKind,
        booking_id: str,
        station_name: str,
        message: str,
        scheduled_at: datetime | None = None,
        *,
        title: str | None = None,
        data: Mapping[str, Any] | None = None,
    ) -> None:
        when = scheduled_at.isoformat() if scheduled_at else "now"
        _LOGGER.log(
            self._level,
            "[%s] %s (booking %s at %s, deliver %s): %s",
            AlertKind(kind).value,
            self._title(kind, title),
            booking_id,
            station_name,
            when,
            message,
        )


class RecordingNotifier(BaseNotifier):
    """Keeps delivered alerts in memory; optionally fails on demand."""

    def __init__(self, *, fail_with: Exception | None = None) -> None:
        self.notifications: list[Notification] = []
        self.fail_with = fail_with
        self.attempts = 0

    async def notify(
        self,
        kind: AlertKind,
        booking_id: str,
        station_name: str,
        message: str,
        scheduled_at: datetime | None = None,
        *,
        title: str | None = None,
        data: Mapping[str, Any] | None = None,
    ) -> None:
        self.attempts += 1
        if self.fail_with is not None:
            raise self.fail_with
        overtime = (data or {}).get("overtime_charge", 0.0)
        self.notifications.append(
            Notification(
                kind=AlertKind(kind),
                booking_id=booking_id,
                station_name=station_name,
                title=self._title(kind, title),
                message=message,
                scheduled_at=scheduled_at,
                overtime_charge=overtime,
            )
        )


class ExpoPushNotifier(BaseNotifier):
    """Delivers alerts through the Expo push service.

    Alerts scheduled for the future are held in an asyncio task until due.
    Delivery of a deferred alert is best-effort: it is lost if the process
    stops first.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        push_token: str,
        *,
        endpoint: str = EXPO_PUSH_ENDPOINT,
        timeout: aiohttp.ClientTimeout | None = None,
    ) -> None:
        if session is None:
            raise ValidationError("Session is required.")
        if not isinstance(push_token, str) or not push_token.strip():
            raise ValidationError("push_token must be a non-empty string.")
        self._session = session
        self._push_token = push_token.strip()
        self._endpoint = endpoint
        self._timeout = timeout or _DEFAULT_TIMEOUT
        self._deferred: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._deferred)

    async def notify(
        self,
        kind: AlertKind,
        booking_id: str,
        station_name: str,
        message: str,
        scheduled_at: datetime | None = None,
        *,
        title: str | None = None,
        data: Mapping[str, Any] | None = None,
    ) -> None:
        payload = self._build_payload(kind, booking_id, station_name, message, title, data)
        delay = self._delay_seconds(scheduled_at)
        if delay <= 0:
            await self._post(payload)
            return
        task = asyncio.create_task(self._deliver_later(delay, payload))
        self._deferred.add(task)
        task.add_done_callback(self._deferred.discard)
        _LOGGER.debug("Deferred %s alert for booking %s by %.0fs", kind, booking_id, delay)

    async def aclose(self) -> None:
        tasks = list(self._deferred)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._deferred.clear()

    def _build_payload(
        self,
        kind: AlertKind,
        booking_id: str,
        station_name: str,
        message: str,
        title: str | None,
        data: Mapping[str, Any] | None,
    ) -> dict[str, Any]:
        kind_value = AlertKind(kind).value
        extra = dict(data or {})
        extra.update(
            {
                "bookingId": booking_id,
                "type": kind_value.upper(),
                "location": station_name,
                "timestamp": datetime.now(UTC).isoformat(),
            }
        )
        return {
            "to": self._push_token,
            "title": self._title(kind, title),
            "body": message,
            "data": extra,
            "sound": "default",
            "priority": "high",
            "channelId": ANDROID_CHANNEL_ID,
        }

    def _delay_seconds(self, scheduled_at: datetime | None) -> float:
        if scheduled_at is None:
            return 0.0
        now = datetime.now(scheduled_at.tzinfo) if scheduled_at.tzinfo else datetime.now()
        return (scheduled_at - now).total_seconds()

    async def _deliver_later(self, delay: float, payload: dict[str, Any]) -> None:
        await asyncio.sleep(delay)
        try:
            await self._post(payload)
        except NotifierError as exc:
            _LOGGER.warning("Deferred push for booking %s failed: %s", payload["data"]["bookingId"], exc)

    async def _post(self, payload: dict[str, Any]) -> None:
        try:
            async with self._session.post(
                self._endpoint,
                json=payload,
                timeout=self._timeout,
                headers={"Accept": "application/json"},
            ) as response:
                if not 200 <= response.status < 300:
                    raise NotifierError(f"Push service responded with status {response.status}.")
                try:
                    body = await response.json()
                except (aiohttp.ContentTypeError, ValueError) as exc:
                    raise NotifierError("Push service did not return valid JSON.") from exc
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise NotifierError("Push request failed.") from exc
        ticket = body.get("data") if isinstance(body, dict) else None
        if isinstance(ticket, dict) and ticket.get("status") == "error":
            raise NotifierError(
                ticket.get("message") or "Push service rejected the notification.",
                detail=str(ticket.get("details") or ""),
            )
        _LOGGER.debug("Push delivered for booking %s", payload["data"]["bookingId"])
