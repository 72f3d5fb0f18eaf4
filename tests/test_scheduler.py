from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import date, datetime

import pytest

from parkalert.exceptions import DataSourceError, ValidationError
from parkalert.models import AlertKind, Booking, BookingStatus, LifecycleState, ParkingStatus
from parkalert.notifier import RecordingNotifier
from parkalert.scanner import LifecycleScanner
from parkalert.scheduler import LifecycleScheduler
from parkalert.source import BaseBookingSource, StaticBookingSource

NOW = datetime(2026, 3, 14, 14, 5)


def _booking() -> Booking:
    return Booking(
        booking_id="b1",
        station_name="Central Plaza",
        parking_space_ref="space-1",
        vehicle_type="car",
        booking_date=date(2026, 3, 14),
        start_time="14:00",
        end_time="15:00",
        booking_status=BookingStatus.CONFIRMED,
        parking_status=ParkingStatus.PARKED,
    )


class _FlakySource(BaseBookingSource):
    def __init__(self) -> None:
        self.calls = 0

    async def fetch_active_bookings(self, user_id: str) -> list[Booking]:
        self.calls += 1
        if self.calls == 1:
            raise DataSourceError("backend down")
        return [_booking()]


def _scanner(notifier: RecordingNotifier) -> LifecycleScanner:
    return LifecycleScanner(notifier, clock=lambda: NOW)


@pytest.mark.asyncio
async def test_trigger_runs_a_scan() -> None:
    notifier = RecordingNotifier()
    scheduler = LifecycleScheduler(_scanner(notifier), StaticBookingSource([_booking()]), "u1")

    report = await scheduler.trigger()

    assert scheduler.last_report is report
    assert [n.kind for n in notifier.notifications] == [AlertKind.ARRIVED]


@pytest.mark.asyncio
async def test_loop_and_trigger_share_dedupe() -> None:
    notifier = RecordingNotifier()
    scheduler = LifecycleScheduler(
        _scanner(notifier),
        StaticBookingSource([_booking()]),
        "u1",
        interval_seconds=0.01,
    )

    async with scheduler:
        assert scheduler.running
        await asyncio.sleep(0.05)
        await scheduler.trigger()

    assert not scheduler.running
    assert scheduler.ticks >= 2
    assert [n.kind for n in notifier.notifications] == [AlertKind.ARRIVED]


@pytest.mark.asyncio
async def test_trigger_sees_replaced_bookings() -> None:
    notifier = RecordingNotifier()
    source = StaticBookingSource([_booking()])
    scheduler = LifecycleScheduler(_scanner(notifier), source, "u1")

    await scheduler.trigger()
    source.replace([replace(_booking(), parking_status=ParkingStatus.UNPARKED)])
    report = await scheduler.trigger()

    assert report.evaluated[0].state == LifecycleState.CHECKED_OUT
    assert [n.kind for n in notifier.notifications] == [AlertKind.ARRIVED]


@pytest.mark.asyncio
async def test_failed_tick_does_not_stop_loop() -> None:
    notifier = RecordingNotifier()
    source = _FlakySource()
    scheduler = LifecycleScheduler(_scanner(notifier), source, "u1", interval_seconds=0.01)

    scheduler.start()
    await asyncio.sleep(0.05)
    await scheduler.stop()

    assert source.calls >= 2
    assert [n.kind for n in notifier.notifications] == [AlertKind.ARRIVED]


@pytest.mark.asyncio
async def test_trigger_propagates_source_errors() -> None:
    scheduler = LifecycleScheduler(_scanner(RecordingNotifier()), _FlakySource(), "u1")
    with pytest.raises(DataSourceError):
        await scheduler.trigger()


@pytest.mark.asyncio
async def test_stop_without_start_is_noop() -> None:
    scheduler = LifecycleScheduler(_scanner(RecordingNotifier()), StaticBookingSource(), "u1")
    await scheduler.stop()
    assert not scheduler.running


def test_scheduler_validates_arguments() -> None:
    scanner = _scanner(RecordingNotifier())
    with pytest.raises(ValidationError):
        LifecycleScheduler(scanner, StaticBookingSource(), "")
    with pytest.raises(ValidationError):
        LifecycleScheduler(scanner, StaticBookingSource(), "u1", interval_seconds=0)
