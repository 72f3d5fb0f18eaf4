"""Library exceptions."""

from __future__ import annotations


class ParkAlertError(Exception):
    """Base exception for the library."""

    error_type = "unknown"
    default_error_code: str | None = None

    def __init__(
        self,
        message: str | None = None,
        *,
        error_code: str | None = None,
        detail: str | None = None,
        user_message: str | None = None,
    ) -> None:
        text = message if message is not None else detail
        super().__init__(text or "")
        self.error_code = error_code if error_code is not None else self.default_error_code
        self.detail = detail if detail is not None else text
        self.user_message = user_message


class ValidationError(ParkAlertError):
    """Raised when inputs fail validation."""

    error_type = "validation"
    default_error_code = "validation_error"


class MalformedBookingWindow(ValidationError):
    """Raised when a booking's date or time fields cannot form a window."""

    default_error_code = "malformed_booking_window"

    def __init__(self, message: str | None = None, *, booking_id: str | None = None, **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.booking_id = booking_id


class DataSourceError(ParkAlertError):
    """Raised when the booking data source returns an error or bad data."""

    error_type = "data_source"
    default_error_code = "data_source_error"


class AuthError(DataSourceError):
    """Raised when the backend rejects our credentials."""

    error_type = "auth"
    default_error_code = "auth_error"


class NetworkError(DataSourceError):
    """Raised when network communication fails."""

    error_type = "network"
    default_error_code = "network_error"


class NotifierError(ParkAlertError):
    """Raised when a notification cannot be delivered."""

    error_type = "notifier"
    default_error_code = "notifier_error"


class ConfigError(ParkAlertError):
    """Raised when configuration is missing or invalid."""

    error_type = "config"
    default_error_code = "config_error"
