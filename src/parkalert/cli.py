"""Command line entry point that watches a user's bookings.

Run once to print the current lifecycle state of every active booking, or keep
running to send alerts on a fixed interval:

    parkalert-watch --config config/parkalert.yaml --once
    parkalert-watch --config config/parkalert.yaml --log-level DEBUG
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys

import aiohttp

from .config import AppConfig, load_config
from .exceptions import ConfigError, ParkAlertError
from .models import ScanReport
from .notifier import BaseNotifier, ExpoPushNotifier, LoggingNotifier
from .scanner import LifecycleScanner
from .scheduler import LifecycleScheduler
from .source import HttpBookingSource
from .util import format_money

_LOGGER = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Watch parking bookings and send lifecycle alerts.")
    parser.add_argument(
        "--config",
        default=os.getenv("PARKALERT_CONFIG", "config/parkalert.yaml"),
        help="Path to the YAML configuration file.",
    )
    parser.add_argument("--user-id", help="Override scan.user_id from the configuration.")
    parser.add_argument("--once", action="store_true", help="Run a single scan and exit.")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO).")
    return parser.parse_args(argv)


def _build_notifier(config: AppConfig, session: aiohttp.ClientSession) -> BaseNotifier:
    if config.notifier.kind == "expo":
        if not config.notifier.push_token:
            raise ConfigError("notifier.push_token is required for the expo notifier.")
        return ExpoPushNotifier(
            session,
            config.notifier.push_token,
            endpoint=config.notifier.endpoint,
        )
    return LoggingNotifier()


def format_report(report: ScanReport) -> str:
    lines = [f"Scan at {report.scanned_at.isoformat(timespec='minutes')}"]
    for evaluation in report.evaluated:
        booking = evaluation.booking
        end = evaluation.window.end.strftime("%H:%M") if evaluation.window.end else "open"
        line = (
            f"- {booking.booking_id} {booking.station_name or '-'} "
            f"{evaluation.window.start.strftime('%Y-%m-%d %H:%M')}-{end} "
            f"{evaluation.state.value}"
        )
        if evaluation.overtime_charge:
            line += f" penalty=₹{format_money(evaluation.overtime_charge)}"
        lines.append(line)
    for booking_id in report.skipped:
        lines.append(f"- {booking_id} skipped (malformed)")
    lines.append(
        f"Alerts sent: {len(report.dispatched)}, failed: {len(report.failed)}"
    )
    return "\n".join(lines)


async def _run(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    user_id = args.user_id or config.scan.user_id
    timeout = aiohttp.ClientTimeout(total=config.backend.timeout_seconds)

    async with aiohttp.ClientSession(timeout=timeout) as session:
        source = HttpBookingSource(
            session,
            base_url=config.backend.base_url,
            token=config.backend.token,
            timeout=timeout,
            retry_count=config.backend.retry_count,
        )
        notifier = _build_notifier(config, session)
        scanner = LifecycleScanner(notifier, tz=config.scan.tzinfo())
        try:
            if args.once:
                report = await scanner.run(source, user_id)
                print(format_report(report))
                return 0
            async with LifecycleScheduler(
                scanner,
                source,
                user_id,
                interval_seconds=config.scan.interval_seconds,
            ):
                await asyncio.Event().wait()
        finally:
            await notifier.aclose()
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    try:
        return asyncio.run(_run(args))
    except ParkAlertError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        _LOGGER.info("Interrupted")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
