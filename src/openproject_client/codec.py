"""
Wire encodings for the two date-like scalars used by OpenProject.

- Timestamps travel as ``"YYYY-MM-DDTHH:MM:SSZ"`` (UTC). Newer servers add
  fractional seconds (``"...:50.960Z"``); those are read too, but values
  are always written back in the whole-second form.
- Calendar dates travel as ``"YYYY-MM-DD"``.

Model fields declare them as ``Optional[OpenProjectTime]`` /
``Optional[OpenProjectDate]`` with a ``None`` default, so a JSON ``null``
leaves the field unset instead of failing validation.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Annotated, Any

from pydantic import BeforeValidator, PlainSerializer

TIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
TIME_FORMAT_FRACTIONAL = "%Y-%m-%dT%H:%M:%S.%fZ"
DATE_FORMAT = "%Y-%m-%d"


def parse_time(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    fmt = TIME_FORMAT_FRACTIONAL if "." in value else TIME_FORMAT
    return datetime.strptime(value, fmt).replace(tzinfo=timezone.utc)


def format_time(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(TIME_FORMAT)


def parse_date(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    return datetime.strptime(value, DATE_FORMAT).date()


def format_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)


OpenProjectTime = Annotated[
    datetime,
    BeforeValidator(parse_time),
    PlainSerializer(format_time, return_type=str),
]

OpenProjectDate = Annotated[
    date,
    BeforeValidator(parse_date),
    PlainSerializer(format_date, return_type=str),
]


__all__ = [
    "TIME_FORMAT",
    "DATE_FORMAT",
    "OpenProjectTime",
    "OpenProjectDate",
    "parse_time",
    "format_time",
    "parse_date",
    "format_date",
]
