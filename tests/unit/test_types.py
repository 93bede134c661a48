"""Unit tests for temporal values and type conversion.
"""
import datetime
from decimal import Decimal
from typing import Any

import pytest
from sqlbridge.types import ZERO_TIME, NullTime, TypeConverter
from sqlbridge.types import parse_text_timestamp, reinterpret_utc, to_utc
from sqlbridge.types import unwrap_optional

UTC = datetime.timezone.utc


def utc(*args):
    return datetime.datetime(*args, tzinfo=UTC)


class TestParseTextTimestamp:

    @pytest.mark.parametrize(('text', 'expected'), [
        ('2024-01-15 09:30:00', utc(2024, 1, 15, 9, 30)),
        ('2024-01-15T09:30:00Z', utc(2024, 1, 15, 9, 30)),
        ('2024-01-15 09:30:00.123456', utc(2024, 1, 15, 9, 30, 0, 123456)),
        ('2024-01-15 09:30:00.5+00:00', utc(2024, 1, 15, 9, 30, 0, 500000)),
        ('2024-01-15 09:30:00.123456789', utc(2024, 1, 15, 9, 30, 0, 123456)),
        ('2024-01-15T09:30:00.987654321Z', utc(2024, 1, 15, 9, 30, 0, 987654)),
        ('2024-01-15 09:30:00+02:00', utc(2024, 1, 15, 7, 30)),
        ('2024-01-15 09:30', utc(2024, 1, 15, 9, 30)),
        ('2024-01-15', utc(2024, 1, 15)),
        ('09:30:15', utc(1, 1, 1, 9, 30, 15)),
        ('09:30', utc(1, 1, 1, 9, 30)),
        ('09:30:15.25', utc(1, 1, 1, 9, 30, 15, 250000)),
        ('01:00:00+02:00', utc(1, 1, 1, 23, 0)),
        (b'2024-01-15', utc(2024, 1, 15)),
    ], ids=[
        'seconds', 'iso_z', 'fraction', 'fraction_offset', 'nanoseconds', 'nanoseconds_z',
        'offset', 'minutes', 'date_only', 'time_only', 'time_minutes', 'time_fraction',
        'time_offset_wraps', 'bytes',
    ])
    def test_formats(self, text, expected):
        result = parse_text_timestamp(text)

        assert result == expected
        assert result.utcoffset() == datetime.timedelta(0)

    @pytest.mark.parametrize('text', ['', '   ', 'not a date', '2024-13-45'])
    def test_no_match(self, text):
        assert parse_text_timestamp(text) is None


class TestTemporalCorrection:

    def test_to_utc_naive(self):
        result = to_utc(datetime.datetime(2024, 1, 1, 12, 0))
        assert result == utc(2024, 1, 1, 12, 0)

    def test_to_utc_aware(self):
        plus5 = datetime.timezone(datetime.timedelta(hours=5))
        result = to_utc(datetime.datetime(2024, 1, 1, 12, 0, tzinfo=plus5))

        assert result == utc(2024, 1, 1, 7, 0)
        assert result.hour == 7

    def test_to_utc_out_of_range_relabelled(self):
        plus2 = datetime.timezone(datetime.timedelta(hours=2))
        result = to_utc(datetime.datetime(1, 1, 1, 1, 0, tzinfo=plus2))

        assert result == utc(1, 1, 1, 1, 0)

    def test_reinterpret_keeps_wall_clock(self):
        plus5 = datetime.timezone(datetime.timedelta(hours=5))
        result = reinterpret_utc(datetime.datetime(2024, 1, 1, 12, 0, tzinfo=plus5))

        assert result == utc(2024, 1, 1, 12, 0)
        assert result.hour == 12


class TestNullTime:

    def test_default_is_null(self):
        nt = NullTime()

        assert not nt.valid
        assert nt.time == ZERO_TIME
        assert nt.value() is None

    def test_set_value(self):
        nt = NullTime()
        nt.set_value(utc(2024, 1, 1))

        assert nt.valid
        assert nt.value() == utc(2024, 1, 1)

    def test_set_none_resets(self):
        nt = NullTime.of(utc(2024, 1, 1))
        nt.set_value(None)

        assert not nt.valid
        assert nt.time == ZERO_TIME

    def test_zero_time(self):
        assert ZERO_TIME == utc(1, 1, 1)


class TestUnwrapOptional:

    @pytest.mark.parametrize(('annotation', 'expected'), [
        (int, (int, False)),
        (int | None, (int, True)),
        (None | str, (str, True)),
        (int | str, (Any, False)),
    ], ids=['plain', 'optional', 'optional_first', 'union'])
    def test_unwrap(self, annotation, expected):
        target, nullable = unwrap_optional(annotation)
        assert target is expected[0]
        assert nullable is expected[1]


class TestTypeConverter:

    @pytest.mark.parametrize(('value', 'target', 'expected'), [
        (5, int, 5),
        (Decimal('5'), int, 5),
        (5.0, int, 5),
        ('42', int, 42),
        (True, int, 1),
        (1, bool, True),
        (0, bool, False),
        ('yes', bool, True),
        ('F', bool, False),
        (3, float, 3.0),
        (Decimal('1.5'), float, 1.5),
        (1.5, Decimal, Decimal('1.5')),
        (7, Decimal, Decimal('7')),
        (b'abc', str, 'abc'),
        (5, str, '5'),
        ('abc', bytes, b'abc'),
        (memoryview(b'abc'), bytes, b'abc'),
        (datetime.datetime(2024, 1, 15, 9, 30), datetime.date, datetime.date(2024, 1, 15)),
        ('2024-01-15', datetime.date, datetime.date(2024, 1, 15)),
        (datetime.date(2024, 1, 15), datetime.date, datetime.date(2024, 1, 15)),
    ])
    def test_convert(self, value, target, expected):
        result = TypeConverter.convert_value(value, target)

        assert result == expected
        assert type(result) is type(expected)

    @pytest.mark.parametrize(('value', 'target'), [
        (5.5, int),
        ('abc', int),
        ('maybe', bool),
        ('abc', float),
        ('abc', Decimal),
        ('abc', datetime.date),
        (5, bytes),
        ([1], int),
    ])
    def test_convert_fails(self, value, target):
        with pytest.raises((TypeError, ValueError)):
            TypeConverter.convert_value(value, target)

    def test_untyped_passthrough(self):
        value = object()
        assert TypeConverter.convert_value(value, object) is value

    def test_generic_passthrough(self):
        assert TypeConverter.convert_value([1, 2], list[int]) == [1, 2]


if __name__ == '__main__':
    __import__('pytest').main([__file__])
