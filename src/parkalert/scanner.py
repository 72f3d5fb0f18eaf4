"""Lifecycle scanner that turns booking snapshots into alerts."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime, tzinfo

from .classifier import classify
from .const import ALERT_MESSAGES, ALERT_TITLES, OVERSTAY_SUFFIX
from .exceptions import ValidationError
from .ledger import AlertLedger
from .models import (
    AlertKind,
    Booking,
    BookingEvaluation,
    BookingStatus,
    LifecycleState,
    Notification,
    ScanReport,
)
from .notifier import BaseNotifier
from .penalty import PenaltyRates, overtime_charge
from .source import BaseBookingSource
from .util import format_money
from .window import compute_window

_LOGGER = logging.getLogger(__name__)

# The single place where lifecycle states map onto alert kinds.
STATE_ALERTS: dict[LifecycleState, AlertKind] = {
    LifecycleState.UPCOMING: AlertKind.UPCOMING,
    LifecycleState.ACTIVE: AlertKind.ARRIVED,
    LifecycleState.IN_GRACE_PERIOD: AlertKind.COMPLETED,
    LifecycleState.OVERSTAYED: AlertKind.COMPLETED,
    LifecycleState.EXPIRED: AlertKind.EXPIRED,
}


class LifecycleScanner:
    """Evaluates bookings and dispatches each alert kind at most once.

    A scan is a sequence of independent per-booking evaluations. The ledger
    claim taken before each dispatch is the only guard against duplicate
    delivery, so overlapping scans (timer tick plus a manual refresh) are
    safe. A failed delivery releases its claim and is retried on the next scan.
    """

    def __init__(
        self,
        notifier: BaseNotifier,
        *,
        ledger: AlertLedger | None = None,
        rates: PenaltyRates | None = None,
        tz: tzinfo | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._notifier = notifier
        self._ledger = ledger if ledger is not None else AlertLedger()
        self._rates = rates
        self._tz = tz
        self._clock = clock or (lambda: datetime.now(self._tz))
        self._awaiting_confirmation: set[str] = set()

    @property
    def ledger(self) -> AlertLedger:
        return self._ledger

    def now(self) -> datetime:
        return self._localize(self._clock())

    def evaluate(self, booking: Booking, now: datetime | None = None) -> BookingEvaluation:
        """Classify a single booking without dispatching anything."""
        now = self._localize(now) if now is not None else self.now()
        window = compute_window(booking, tz=self._tz if self._tz is not None else now.tzinfo)
        state = classify(booking, now, window)
        charge = 0
        if state == LifecycleState.OVERSTAYED:
            charge = overtime_charge(booking, now, window=window, rates=self._rates)
        return BookingEvaluation(booking=booking, window=window, state=state, overtime_charge=charge)

    async def scan(self, bookings: Iterable[Booking], now: datetime | None = None) -> ScanReport:
        now = self._localize(now) if now is not None else self.now()
        report = ScanReport(scanned_at=now)
        for booking in bookings:
            try:
                evaluation = self.evaluate(booking, now)
            except ValidationError as exc:
                _LOGGER.warning("Skipping booking %s: %s", booking.booking_id, exc)
                report.skipped.append(booking.booking_id)
                continue
            report.evaluated.append(evaluation)
            _LOGGER.debug("Booking %s is %s", booking.booking_id, evaluation.state.value)
            for kind in self._due_alerts(evaluation):
                await self._dispatch(self._build_notification(kind, evaluation), report)
        return report

    async def run(
        self,
        source: BaseBookingSource,
        user_id: str,
        now: datetime | None = None,
    ) -> ScanReport:
        """Fetch the user's bookings and scan them.

        Errors from the data source propagate to the caller; nothing is
        recorded in the ledger in that case.
        """
        bookings = await source.fetch_active_bookings(user_id)
        return await self.scan(bookings, now)

    def _due_alerts(self, evaluation: BookingEvaluation) -> list[AlertKind]:
        booking = evaluation.booking
        if booking.booking_status == BookingStatus.PENDING:
            self._awaiting_confirmation.add(booking.booking_id)
            return []
        kinds: list[AlertKind] = []
        if booking.booking_id in self._awaiting_confirmation:
            kinds.append(AlertKind.CONFIRMED)
        kind = STATE_ALERTS.get(evaluation.state)
        if kind is not None:
            kinds.append(kind)
        return [k for k in kinds if not self._ledger.has_fired(booking.booking_id, k)]

    def _build_notification(self, kind: AlertKind, evaluation: BookingEvaluation) -> Notification:
        booking = evaluation.booking
        station = booking.station_name or booking.parking_space_ref or "your parking space"
        message = ALERT_MESSAGES[kind.value].format(station=station)
        charge = evaluation.overtime_charge if kind == AlertKind.COMPLETED else 0
        if charge:
            message += OVERSTAY_SUFFIX.format(charge=format_money(charge))
        return Notification(
            kind=kind,
            booking_id=booking.booking_id,
            station_name=booking.station_name,
            title=ALERT_TITLES[kind.value],
            message=message,
            overtime_charge=charge,
        )

    async def _dispatch(self, notification: Notification, report: ScanReport) -> None:
        booking_id, kind = notification.booking_id, notification.kind
        if not self._ledger.claim(booking_id, kind):
            return
        delivered = False
        try:
            await self._notifier.send(notification)
            delivered = True
        except Exception as exc:
            _LOGGER.warning(
                "Failed to deliver %s alert for booking %s: %s", kind.value, booking_id, exc
            )
            report.failed.append(notification)
        finally:
            if delivered:
                self._ledger.mark_fired(booking_id, kind)
            else:
                self._ledger.release(booking_id, kind)
        if delivered:
            if kind == AlertKind.CONFIRMED:
                self._awaiting_confirmation.discard(booking_id)
            report.dispatched.append(notification)
            _LOGGER.info("Sent %s alert for booking %s", kind.value, booking_id)

    def _localize(self, now: datetime) -> datetime:
        if self._tz is not None and now.tzinfo is None:
            return now.replace(tzinfo=self._tz)
        return now
