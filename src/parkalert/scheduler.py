"""Periodic and on-demand driving of the lifecycle scanner."""

from __future__ import annotations

import asyncio
import contextlib
import logging

from .const import DEFAULT_SCAN_INTERVAL_SECONDS
from .exceptions import ValidationError
from .models import ScanReport
from .scanner import LifecycleScanner
from .source import BaseBookingSource

_LOGGER = logging.getLogger(__name__)


class LifecycleScheduler:
    """Runs the scanner on a fixed interval and whenever ``trigger`` is called.

    Both paths feed the same scanner, so alerts stay deduplicated no matter
    how ticks and manual refreshes interleave.
    """

    def __init__(
        self,
        scanner: LifecycleScanner,
        source: BaseBookingSource,
        user_id: str,
        *,
        interval_seconds: float = DEFAULT_SCAN_INTERVAL_SECONDS,
    ) -> None:
        if not user_id:
            raise ValidationError("user_id is required.")
        if interval_seconds <= 0:
            raise ValidationError("interval_seconds must be positive.")
        self._scanner = scanner
        self._source = source
        self._user_id = user_id
        self._interval = interval_seconds
        self._task: asyncio.Task | None = None
        self._last_report: ScanReport | None = None
        self._ticks = 0

    async def __aenter__(self) -> LifecycleScheduler:
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def last_report(self) -> ScanReport | None:
        return self._last_report

    @property
    def ticks(self) -> int:
        return self._ticks

    def start(self) -> None:
        if self.running:
            return
        _LOGGER.info("Starting lifecycle scan loop (interval: %ss)", self._interval)
        self._task = asyncio.create_task(self._loop())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        _LOGGER.info("Lifecycle scan loop stopped")

    async def trigger(self) -> ScanReport:
        """Scan immediately. Errors from the data source propagate."""
        report = await self._scanner.run(self._source, self._user_id)
        self._last_report = report
        return report

    async def _loop(self) -> None:
        while True:
            try:
                await self.trigger()
            except Exception as exc:
                _LOGGER.error("Lifecycle scan failed: %s", exc)
            self._ticks += 1
            await asyncio.sleep(self._interval)
