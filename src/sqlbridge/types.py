"""
Type handling for row scanning.

This module provides:
- NullTime: a temporal value that may be NULL
- Temporal correction helpers: every instant leaving the scanner is UTC
- parse_text_timestamp: prioritized text formats for drivers without native
  temporal binding
- TypeConverter: database value -> record field type conversion
"""
import datetime
import logging
import re
import types
import typing
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from dateutil import parser, tz

logger = logging.getLogger(__name__)

UTC = tz.UTC

# Zero instant, the value of an unset or unparseable temporal field
ZERO_TIME = datetime.datetime.min.replace(tzinfo=UTC)

# Full date prefix; anything else is parsed as a time of day
_DATE_FORM = re.compile(r'\d{4}-\d{2}-\d{2}')

# Time-only values are converted to UTC on this date, then moved to 0001-01-01
_TIME_ANCHOR = datetime.date(2000, 1, 1)

_time_parser = parser.isoparser()

_TRUE_STRINGS = {'1', 't', 'true', 'y', 'yes'}
_FALSE_STRINGS = {'0', 'f', 'false', 'n', 'no'}


@dataclass
class NullTime:
    """A UTC instant that may be NULL.

    `valid` is False for SQL NULL, in which case `time` is the zero instant.
    """
    time: datetime.datetime = ZERO_TIME
    valid: bool = False

    def set_value(self, value: datetime.datetime | None) -> None:
        if value is None:
            self.time, self.valid = ZERO_TIME, False
        else:
            self.time, self.valid = value, True

    def value(self) -> datetime.datetime | None:
        """Database value: the instant, or None when not valid."""
        return self.time if self.valid else None

    @classmethod
    def of(cls, value: datetime.datetime | None) -> 'NullTime':
        nt = cls()
        nt.set_value(value)
        return nt


# Temporal correction

def to_utc(value: datetime.datetime) -> datetime.datetime:
    """Normalize an instant to UTC; naive values are taken as UTC already.

    An instant whose UTC equivalent falls outside the datetime range (an
    offset applied on 0001-01-01 or 9999-12-31) keeps its wall clock and is
    relabelled as UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    try:
        return value.astimezone(UTC)
    except OverflowError:
        return value.replace(tzinfo=UTC)


def reinterpret_utc(value: datetime.datetime) -> datetime.datetime:
    """Keep the wall-clock fields and relabel them as UTC.

    For drivers that tag UTC instants with the session's local offset.
    """
    return value.replace(tzinfo=UTC)


def parse_text_timestamp(text: str | bytes) -> datetime.datetime | None:
    """Parse loosely formatted temporal text.

    Text starting with a full `YYYY-MM-DD` date is parsed as an ISO 8601
    date or timestamp (any number of fractional digits, truncated to
    microseconds, optional offset). Anything else is parsed as a time of
    day, returned on 0001-01-01 with its UTC time of day.

    Returns
        The UTC instant, or None when the text is empty or not a timestamp
    """
    if isinstance(text, bytes):
        text = text.decode()
    text = text.replace('T', ' ', 1).replace('Z', '', 1).strip()
    if not text:
        return None

    try:
        if _DATE_FORM.match(text):
            return to_utc(parser.isoparse(text))
        return _time_of_day(_time_parser.parse_isotime(text))
    except (ValueError, OverflowError) as err:
        logger.debug(f'No matching temporal format for {text!r}: {err}')
        return None


def _time_of_day(value: datetime.time) -> datetime.datetime:
    anchored = to_utc(datetime.datetime.combine(_TIME_ANCHOR, value))
    return datetime.datetime.combine(datetime.date.min, anchored.timetz())


# Field type resolution

def unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    """Split `X | None` / `Optional[X]` into `(X, True)`.
    """
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        nullable = len(args) < len(typing.get_args(annotation))
        if len(args) == 1:
            return args[0], nullable
        return Any, nullable
    return annotation, annotation is Any


def is_temporal(target: Any) -> bool:
    return target is datetime.datetime or target is NullTime


class TypeConverter:
    """Database value -> record field type conversion.

    Raises TypeError or ValueError when the value cannot represent the target
    type; the scanner turns those into ColumnBindFailure.
    """

    @staticmethod
    def convert_value(value: Any, target: Any) -> Any:
        """Convert a single non-NULL value to `target`."""
        if target is Any or target is object or not isinstance(target, type):
            return value
        if typing.get_origin(target) is not None:
            return value

        if target is bool:
            return TypeConverter._to_bool(value)

        if target is int:
            return TypeConverter._to_int(value)

        if target is datetime.date:
            return TypeConverter._to_date(value)

        if isinstance(value, target):
            return value

        if target is float:
            return float(value)

        if target is Decimal:
            try:
                return Decimal(str(value))
            except InvalidOperation as err:
                raise ValueError(f'{value!r} is not a decimal') from err

        if target is str:
            if isinstance(value, bytes | bytearray | memoryview):
                return bytes(value).decode()
            return str(value)

        if target is bytes:
            if isinstance(value, str):
                return value.encode()
            if isinstance(value, bytearray | memoryview):
                return bytes(value)

        raise TypeError(f'unsupported conversion from {type(value).__name__} to {target.__name__}')

    @staticmethod
    def _to_bool(value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, int | Decimal | float):
            return bool(value)
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_STRINGS:
                return True
            if lowered in _FALSE_STRINGS:
                return False
        raise ValueError(f'{value!r} is not a boolean')

    @staticmethod
    def _to_int(value: Any) -> int:
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, int):
            return value
        if isinstance(value, float | Decimal):
            if value != int(value):
                raise ValueError(f'{value!r} is not integral')
            return int(value)
        if isinstance(value, str | bytes):
            return int(value)
        raise TypeError(f'unsupported conversion from {type(value).__name__} to int')

    @staticmethod
    def _to_date(value: Any) -> datetime.date:
        if isinstance(value, datetime.datetime):
            return value.date()
        if isinstance(value, datetime.date):
            return value
        if isinstance(value, str | bytes):
            parsed = parse_text_timestamp(value)
            if parsed is None:
                raise ValueError(f'{value!r} is not a date')
            return parsed.date()
        raise TypeError(f'unsupported conversion from {type(value).__name__} to date')
