import jsonschema
import pytest

from parkalert.source import booking_from_payload, load_booking_schema

_RECORDS = [
    {
        "bookingId": "BK-1001",
        "userId": "u1",
        "stationName": "Central Plaza",
        "parkingSpaceId": "space-7",
        "vehicleType": "car",
        "bookingDate": "2026-03-14",
        "startTime": "14:00",
        "endTime": "15:00",
        "bookingStatus": "confirmed",
        "parkingStatus": "parked",
        "totalAmount": 120,
    },
    {
        "_id": "65a1",
        "parkingSpace": {"name": "Riverside"},
        "bookingDate": "2026-03-14T00:00:00.000Z",
        "startTime": "22:30",
        "endTime": None,
        "bookingStatus": "pending",
        "parkingStatus": None,
    },
]


@pytest.mark.parametrize("record", _RECORDS)
def test_sample_records_match_schema_and_map(record: dict) -> None:
    jsonschema.validate(instance=record, schema=load_booking_schema())
    booking = booking_from_payload(record)
    assert booking.start_time == record["startTime"]


def test_schema_rejects_record_without_id() -> None:
    record = dict(_RECORDS[0])
    del record["bookingId"]
    with pytest.raises(jsonschema.ValidationError):
        jsonschema.validate(instance=record, schema=load_booking_schema())
