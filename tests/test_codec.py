import json
from datetime import date, datetime, timedelta, timezone

import pytest
from openproject_client.models import WorkPackage
from pydantic import ValidationError


def test_time_round_trip():
    created = datetime(2020, 3, 1, 8, 30, 0, tzinfo=timezone.utc)
    wp = WorkPackage(id=1, created_at=created)

    wire = json.loads(wp.model_dump_json(by_alias=True, exclude_none=True))
    assert wire["createdAt"] == "2020-03-01T08:30:00Z"

    decoded = WorkPackage.model_validate(wire)
    assert decoded.created_at == created


def test_date_round_trip():
    wp = WorkPackage(id=1, start_date=date(2020, 3, 2))

    wire = json.loads(wp.model_dump_json(by_alias=True, exclude_none=True))
    assert wire["startDate"] == "2020-03-02"

    decoded = WorkPackage.model_validate(wire)
    assert decoded.start_date == date(2020, 3, 2)


def test_null_leaves_fields_unset():
    wp = WorkPackage.model_validate_json(
        '{"id": 1, "createdAt": null, "updatedAt": null, "startDate": null, "dueDate": null}'
    )

    assert wp.created_at is None
    assert wp.updated_at is None
    assert wp.start_date is None
    assert wp.due_date is None


def test_aware_time_is_written_as_utc():
    cest = timezone(timedelta(hours=2))
    wp = WorkPackage(id=1, updated_at=datetime(2020, 3, 5, 19, 12, 45, tzinfo=cest))

    wire = wp.to_payload()
    assert wire["updatedAt"] == "2020-03-05T17:12:45Z"


@pytest.mark.parametrize(
    "field,value",
    [
        ("createdAt", "01/03/2020 08:30"),
        ("startDate", "2020-3-2x"),
    ],
)
def test_malformed_scalars_fail_validation(field, value):
    with pytest.raises(ValidationError):
        WorkPackage.model_validate({"id": 1, field: value})


def test_fractional_seconds_are_read_and_written_whole():
    wp = WorkPackage.model_validate({"id": 1, "updatedAt": "2024-03-04T13:51:50.960Z"})

    assert wp.updated_at == datetime(2024, 3, 4, 13, 51, 50, 960000, tzinfo=timezone.utc)
    assert wp.to_payload()["updatedAt"] == "2024-03-04T13:51:50Z"
