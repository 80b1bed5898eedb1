# ABOUTME: Contract tests for forecast normalization and window selection.
# ABOUTME: Validates column-to-row zipping, defensive parsing, and hourly/daily/3-hour windows.

from datetime import date, datetime, timedelta

import pytest

from conftest import NOW, build_payload
from waybar_weather.forecast import (
    MalformedResponseError,
    astro_by_date,
    describe_condition,
    extract_current,
    next_days,
    next_hours,
    normalize_forecast,
    parse_daily,
    parse_float,
    parse_hourly,
    parse_int,
    sun_times,
    three_hour_rows,
)
from waybar_weather.models import HourlyEntry


class TestNumericParsing:
    @pytest.mark.parametrize(
        "value, expected",
        [(1.5, 1.5), (3, 3.0), ("2.25", 2.25), ("-4", -4.0), (None, 0.0), ("", 0.0), ("abc", 0.0), ([1], 0.0)],
    )
    def test_parse_float(self, value, expected):
        assert parse_float(value) == expected

    def test_parse_float_rejects_nan(self):
        assert parse_float(float("nan")) == 0.0

    @pytest.mark.parametrize("value, expected", [(7, 7), ("12", 12), ("12.9", 12), (None, 0), ("x", 0), (True, 1)])
    def test_parse_int(self, value, expected):
        assert parse_int(value) == expected

    def test_custom_default(self):
        assert parse_int(None, 1) == 1

    @pytest.mark.parametrize("value", [10**400, -(10**400), "9" * 400, "-" + "9" * 400, float("inf")])
    def test_out_of_range_values_default(self, value):
        """Numbers beyond float range fall back to the default instead of raising.

        Implementation: Feeds huge JSON integers and overlong digit strings.
        Passing implies: One absurd cell cannot abort normalization with OverflowError.
        """
        assert parse_float(value) == 0.0
        assert parse_int(value) == 0


class TestDescribeCondition:
    def test_known_code(self):
        assert describe_condition(61) == "Slight rain"

    def test_unknown_code(self):
        assert describe_condition(42) == "Unknown"
        assert describe_condition(None) == "Unknown"


class TestExtractCurrent:
    def test_reads_current_block(self, payload):
        """extract_current maps the current block into CurrentConditions.

        Implementation: Uses the shared payload (15°C, feels 13°C, code 61).
        Passing implies: Current conditions, timezone and name come through intact.
        """
        cur = extract_current(payload, "Berlin, Land Berlin, Germany")
        assert cur.time == NOW
        assert cur.timezone == "Europe/Berlin"
        assert cur.location_name == "Berlin, Land Berlin, Germany"
        assert cur.condition == "Slight rain"
        assert cur.code == 61
        assert cur.temperature == 15.0
        assert cur.feels_like == 13.0
        assert cur.precipitation == 0.4
        assert cur.is_day == 1

    def test_reads_first_element_of_array_values(self, payload):
        payload["current"]["temperature_2m"] = [21.5, 30.0]
        assert extract_current(payload).temperature == 21.5

    def test_bad_numeric_fields_default(self, payload):
        payload["current"]["temperature_2m"] = "warm"
        payload["current"]["is_day"] = None
        cur = extract_current(payload)
        assert cur.temperature == 0.0
        assert cur.is_day == 1

    def test_missing_block_raises(self, payload):
        del payload["current"]
        with pytest.raises(MalformedResponseError):
            extract_current(payload)

    def test_unparseable_time_raises(self, payload):
        payload["current"]["time"] = "yesterday"
        with pytest.raises(MalformedResponseError):
            extract_current(payload)


class TestParseHourly:
    def test_zips_columns_into_rows(self):
        """parse_hourly converts Open-Meteo hourly columns into HourlyEntry rows.

        Implementation: Provides a column-oriented dict with two hours.
        Passing implies: Each column value at index i maps to the matching field.
        """
        raw = {
            "time": ["2025-01-15T12:00", "2025-01-15T13:00"],
            "temperature_2m": [3.5, 4.0],
            "precipitation_probability": [20, 65],
            "precipitation": [0.0, 0.3],
            "weather_code": [1, 63],
            "is_day": [1, 0],
        }
        result = parse_hourly(raw)

        assert len(result) == 2
        assert result[0].time == datetime(2025, 1, 15, 12, 0)
        assert result[0].temperature == 3.5
        assert result[1].pop == 65
        assert result[1].condition == "Moderate rain"
        assert result[1].is_day == 0

    def test_short_columns_default(self):
        raw = {"time": ["2025-01-15T12:00", "2025-01-15T13:00"], "temperature_2m": [3.5]}
        result = parse_hourly(raw)
        assert result[1].temperature == 0.0
        assert result[1].pop == 0
        assert result[1].is_day == 1

    def test_bad_time_rows_are_skipped(self):
        raw = {"time": ["garbage", "2025-01-15T13:00"], "temperature_2m": [1.0, 2.0]}
        result = parse_hourly(raw)
        assert len(result) == 1
        assert result[0].temperature == 2.0

    def test_empty_time_returns_empty_list(self):
        assert parse_hourly({}) == []
        assert parse_hourly({"time": []}) == []


class TestParseDaily:
    def test_zips_columns_into_rows(self, payload):
        result = parse_daily(payload["daily"])

        assert len(result) == 10
        assert result[0].date == date(2025, 7, 14)
        assert result[0].temperature_max == 20.0
        assert result[0].temperature_min == 10.0
        assert result[1].pop_max == 10
        assert result[0].sunrise == datetime(2025, 7, 14, 5, 10)
        assert result[0].sunset == datetime(2025, 7, 14, 21, 30)

    def test_missing_sun_times_are_none(self):
        result = parse_daily({"time": ["2025-07-14"], "sunrise": [None]})
        assert result[0].sunrise is None
        assert result[0].sunset is None


class TestNormalizeForecast:
    def test_builds_forecast_data(self, payload):
        data = normalize_forecast(payload, "Berlin")
        assert data.timezone == "Europe/Berlin"
        assert data.current.location_name == "Berlin"
        assert len(data.hourly) == 240
        assert len(data.daily) == 10

    @pytest.mark.parametrize("bad", [[], "nope", None])
    def test_non_object_raises(self, bad):
        with pytest.raises(MalformedResponseError):
            normalize_forecast(bad)

    @pytest.mark.parametrize("block", ["current", "hourly", "daily"])
    def test_missing_block_raises(self, payload, block):
        del payload[block]
        with pytest.raises(MalformedResponseError):
            normalize_forecast(payload)

    def test_out_of_range_cell_defaults(self, payload):
        payload["hourly"]["precipitation_probability"][0] = "9" * 400
        payload["hourly"]["temperature_2m"][1] = 10**400
        data = normalize_forecast(payload, "Berlin")
        assert data.hourly[0].pop == 0
        assert data.hourly[1].temperature == 0.0
        assert len(data.hourly) == 240


class TestNextHours:
    def test_starts_at_now(self, payload):
        hourly = parse_hourly(payload["hourly"])
        result = next_hours(hourly, NOW, 24)
        assert len(result) == 24
        assert result[0].time == NOW
        assert result[-1].time == NOW + timedelta(hours=23)

    def test_all_past_falls_back_to_first_entries(self, payload):
        """When every hour is before now, the first N hours are shown instead.

        Implementation: Asks for hours after a time far beyond the data.
        Passing implies: A non-empty forecast never renders an empty hourly table.
        """
        hourly = parse_hourly(payload["hourly"])
        result = next_hours(hourly, datetime(2030, 1, 1), 5)
        assert result == hourly[:5]

    def test_empty_source_stays_empty(self):
        assert next_hours([], NOW, 5) == []

    def test_zero_limit(self, payload):
        hourly = parse_hourly(payload["hourly"])
        assert next_hours(hourly, NOW, 0) == []


class TestNextDays:
    def test_takes_first_n(self, payload):
        daily = parse_daily(payload["daily"])
        assert [d.date for d in next_days(daily, 3)] == [date(2025, 7, 14), date(2025, 7, 15), date(2025, 7, 16)]


class TestThreeHourRows:
    def test_ten_days_of_hourly_data(self, payload):
        """Only future dates, 3-hour boundaries, at most 3 dates, sorted.

        Implementation: Runs the 3-day selection over 10 days of 1-hour data.
        Passing implies: The week view shows the next three days in 3-hour steps.
        """
        rows = three_hour_rows(parse_hourly(payload["hourly"]), NOW, 3)

        assert {r.time.hour for r in rows} <= {0, 3, 6, 9, 12, 15, 18, 21}
        assert all(r.date > NOW.date() for r in rows)
        assert sorted({r.date for r in rows}) == [date(2025, 7, 15), date(2025, 7, 16), date(2025, 7, 17)]
        assert len(rows) == 24
        assert rows == sorted(rows, key=lambda r: (r.date, r.time))

    def test_out_of_order_source_is_sorted(self):
        hourly = [
            HourlyEntry(time=datetime(2025, 7, 16, 3, 0)),
            HourlyEntry(time=datetime(2025, 7, 15, 6, 0)),
            HourlyEntry(time=datetime(2025, 7, 15, 0, 0)),
        ]
        rows = three_hour_rows(hourly, NOW, 3)
        assert [r.time for r in rows] == [
            datetime(2025, 7, 15, 0, 0),
            datetime(2025, 7, 15, 6, 0),
            datetime(2025, 7, 16, 3, 0),
        ]

    def test_only_today_yields_nothing(self):
        hourly = parse_hourly(build_payload(days=1)["hourly"])
        assert three_hour_rows(hourly, NOW, 3) == []


class TestSunTimes:
    def test_astro_by_date(self, payload):
        astro = astro_by_date(parse_daily(payload["daily"]))
        assert astro[date(2025, 7, 15)] == ("05:11", "21:29")

    def test_today(self, payload):
        assert sun_times(parse_daily(payload["daily"]), NOW) == ("05:10", "21:30")

    def test_no_matching_day(self, payload):
        assert sun_times(parse_daily(payload["daily"]), datetime(2031, 1, 1)) == ("", "")
