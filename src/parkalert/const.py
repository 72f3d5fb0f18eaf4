"""Policy constants for the booking lifecycle engine."""

from datetime import time, timedelta

UPCOMING_LEAD = timedelta(minutes=10)
GRACE_PERIOD = timedelta(minutes=15)

# Effective end of a booking whose end time rolls past midnight.
END_OF_DAY = time(23, 59, 59, 999000)

DEFAULT_VEHICLE_TYPE = "car"

# Hourly overstay penalty, in rupees.
PENALTY_RATES = {
    "car": 25,
    "motorcycle": 15,
    "bus": 50,
    "truck": 45,
    "bicycle": 10,
    "van": 35,
}

ACTIVE_BOOKINGS_ENDPOINT = "/active-bookings"

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "User-Agent": "parkalert",
}

EXPO_PUSH_ENDPOINT = "https://exp.host/--/api/v2/push/send"
ANDROID_CHANNEL_ID = "booking-alerts"

DEFAULT_SCAN_INTERVAL_SECONDS = 60

ALERT_TITLES = {
    "confirmed": "Booking Confirmed",
    "upcoming": "Upcoming Booking",
    "arrived": "Booking Started",
    "completed": "Booking Completed",
    "expired": "Booking Expired",
}

ALERT_MESSAGES = {
    "confirmed": "Your booking at {station} has been confirmed.",
    "upcoming": "Your booking at {station} starts in less than 10 minutes!",
    "arrived": "Welcome to {station}! Your parking session has started.",
    "completed": "Your booking at {station} has ended. Thank you for using our service!",
    "expired": "Your booking at {station} has expired.",
}

OVERSTAY_SUFFIX = " Overstay charges so far: ₹{charge}."
