"""parkalert package."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from .classifier import classify
from .exceptions import (
    AuthError,
    ConfigError,
    DataSourceError,
    MalformedBookingWindow,
    NetworkError,
    NotifierError,
    ParkAlertError,
    ValidationError,
)
from .ledger import AlertLedger
from .models import (
    AlertKind,
    Booking,
    BookingEvaluation,
    BookingStatus,
    LifecycleState,
    Notification,
    OvertimeAssessment,
    ParkingStatus,
    ScanReport,
    TimeWindow,
)
from .penalty import PenaltyRates, assess_overtime, overtime_charge
from .scanner import LifecycleScanner
from .scheduler import LifecycleScheduler
from .window import compute_window

try:
    __version__ = version("parkalert")
except PackageNotFoundError:  # pragma: no cover - not installed
    __version__ = "0.0.0"

__all__ = [
    "AlertKind",
    "AlertLedger",
    "AuthError",
    "Booking",
    "BookingEvaluation",
    "BookingStatus",
    "ConfigError",
    "DataSourceError",
    "LifecycleScanner",
    "LifecycleScheduler",
    "LifecycleState",
    "MalformedBookingWindow",
    "NetworkError",
    "Notification",
    "NotifierError",
    "OvertimeAssessment",
    "ParkAlertError",
    "ParkingStatus",
    "PenaltyRates",
    "ScanReport",
    "TimeWindow",
    "ValidationError",
    "__version__",
    "assess_overtime",
    "classify",
    "compute_window",
    "overtime_charge",
]
