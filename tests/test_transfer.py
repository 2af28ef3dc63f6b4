import pytest
from datetime import datetime, timedelta, timezone

from routeconv.transfer import (
    CompactCalendar,
    format_double,
    format_int,
    is_empty,
    parse_double,
    parse_int,
    trim,
)


class TestTrim:
    def test_strips_whitespace(self):
        assert trim("  a b  ") == "a b"

    def test_blank_is_none(self):
        assert trim("   ") is None
        assert trim("") is None
        assert trim(None) is None


class TestParseDouble:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("52.4135141", 52.4135141),
            ("  -13.5 ", -13.5),
            ("+1.0", 1.0),
            ("40", 40.0),
            (".5", 0.5),
            ("1e3", 1000.0),
        ],
    )
    def test_valid_numbers(self, text, expected):
        assert parse_double(text) == expected

    @pytest.mark.parametrize(
        "text", [None, "", "  ", "abc", "1,5", "nan", "inf", "1.2.3"]
    )
    def test_invalid_numbers_are_absent(self, text):
        """Malformed input yields None instead of raising."""
        assert parse_double(text) is None


class TestParseInt:
    def test_valid(self):
        assert parse_int(" -1331155 ") == -1331155

    def test_invalid(self):
        assert parse_int("1.5") is None
        assert parse_int("") is None


class TestFormatDouble:
    def test_fixed_fraction_digits(self):
        assert format_double(40.8, 7) == "40.8000000"
        assert format_double(13.3115464, 7) == "13.3115464"

    def test_negative_zero_loses_sign(self):
        assert format_double(-0.00000001, 7) == "0.0000000"

    def test_none_is_empty(self):
        assert format_double(None, 3) == ""

    def test_independent_of_locale(self):
        import locale

        saved = locale.setlocale(locale.LC_ALL)
        try:
            locale.setlocale(locale.LC_ALL, "de_DE.UTF-8")
        except locale.Error:
            pytest.skip("German locale not installed")
        try:
            assert format_double(1.5, 1) == "1.5"
            assert parse_double("1.5") == 1.5
        finally:
            locale.setlocale(locale.LC_ALL, saved)


class TestFormatInt:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (0.5, "1"),
            (-0.5, "-1"),
            (1.4999, "1"),
            (-2.5, "-3"),
            (1331155.0, "1331155"),
        ],
    )
    def test_rounds_half_away_from_zero(self, value, expected):
        assert format_int(value) == expected


def test_is_empty():
    assert is_empty(None)
    assert is_empty(0.0)
    assert not is_empty(0.1)


class TestCompactCalendar:
    def test_equality_ignores_representation(self):
        """Datetimes with and without microseconds at the same instant are equal."""
        a = CompactCalendar.from_datetime(datetime(2009, 5, 31, 7, 5, 58))
        b = CompactCalendar.from_datetime(
            datetime(2009, 5, 31, 7, 5, 58, 0, tzinfo=timezone.utc)
        )
        c = CompactCalendar.from_datetime(
            datetime(2009, 5, 31, 9, 5, 58, 400, tzinfo=timezone(timedelta(hours=2)))
        )
        assert a == b == c
        assert hash(a) == hash(c)

    def test_normalized_to_utc(self):
        calendar = CompactCalendar.from_datetime(
            datetime(2009, 5, 31, 9, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        )
        assert calendar.datetime == datetime(2009, 5, 31, 7, 0, 0, tzinfo=timezone.utc)

    def test_parse_and_format(self):
        calendar = CompactCalendar.parse("31.05.09 07:05:58", "%d.%m.%y %H:%M:%S")
        assert calendar.format("%Y-%m-%dT%H:%M:%S") == "2009-05-31T07:05:58"

    def test_parse_failure_raises_value_error(self):
        with pytest.raises(ValueError):
            CompactCalendar.parse("00.00.00 00:00:00", "%d.%m.%y %H:%M:%S")

    def test_ordering_and_arithmetic(self):
        start = CompactCalendar.from_millis(1000)
        later = start.add_millis(500)
        assert start < later
        assert later.millis == 1500
        assert sorted([later, start]) == [start, later]
