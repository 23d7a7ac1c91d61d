import logging
from datetime import datetime, timezone

import pytest

from parcel_status.utils.dates import (
    anchor_calendar_date,
    calendar_day_label,
    day_number,
    format_long_date,
    format_medium,
    format_short_date,
    format_time,
    is_leap_year,
    parse_instant,
    relative_day_label,
    resolve_zone,
)


def _utc(text: str) -> datetime:
    return datetime.fromisoformat(text).replace(tzinfo=timezone.utc)


def test_parse_instant_accepts_z_and_offsets():
    assert parse_instant("2023-01-08T10:00:00Z") == _utc("2023-01-08T10:00:00")
    assert parse_instant("2023-01-08T11:00:00+01:00") == _utc("2023-01-08T10:00:00")


def test_parse_instant_naive_and_bare_date_are_utc():
    assert parse_instant("2023-01-08T10:00:00") == _utc("2023-01-08T10:00:00")
    assert parse_instant("2023-01-25") == _utc("2023-01-25T00:00:00")


@pytest.mark.parametrize("bad", [None, "", "   ", "not a date", "2023-13-40", 42])
def test_parse_instant_garbage_returns_none(bad):
    assert parse_instant(bad) is None


def test_anchor_calendar_date_pins_noon_utc():
    assert anchor_calendar_date("2023-01-25") == _utc("2023-01-25T12:00:00")
    assert anchor_calendar_date("2023-01-25T03:00:00Z") == _utc("2023-01-25T03:00:00")
    assert anchor_calendar_date(None) is None


def test_leap_years():
    assert is_leap_year(2024)
    assert is_leap_year(2000)
    assert not is_leap_year(1900)
    assert not is_leap_year(2023)


def test_day_number_is_consecutive_across_month_and_year_ends():
    assert day_number(1, 1, 1) == 0
    assert day_number(2023, 3, 1) - day_number(2023, 2, 28) == 1
    assert day_number(2024, 3, 1) - day_number(2024, 2, 28) == 2
    assert day_number(2024, 1, 1) - day_number(2023, 12, 31) == 1
    # matches the stdlib ordinal (1-based)
    assert day_number(2023, 1, 25) == datetime(2023, 1, 25).toordinal() - 1


def test_relative_day_label_today_yesterday_tomorrow():
    now = _utc("2023-01-08T12:00:00")
    assert relative_day_label("2023-01-08T10:00:00Z", "America/Chicago", now) == "today"
    assert relative_day_label("2023-01-07T18:00:00Z", "America/Chicago", now) == "yesterday"
    assert relative_day_label("2023-01-09T18:00:00Z", "America/Chicago", now) == "tomorrow"


def test_relative_day_label_uses_zone_local_calendar_not_elapsed_hours():
    # 23:30 local on the 7th vs 00:30 local on the 8th: one hour apart, different days
    now = _utc("2023-01-08T06:30:00")          # 00:30 Chicago, Jan 8
    event = "2023-01-08T05:30:00Z"              # 23:30 Chicago, Jan 7
    assert relative_day_label(event, "America/Chicago", now) == "yesterday"
    # the same pair read in UTC is the same day
    assert relative_day_label(event, "UTC", now) == "today"


def test_relative_day_label_across_dst_start():
    # US DST began 2023-03-12; the local day is 23 hours long
    now = _utc("2023-03-13T05:30:00")          # 00:30 CDT, Mar 13
    event = "2023-03-12T05:30:00Z"              # 23:30 CST, Mar 11
    assert relative_day_label(event, "America/Chicago", now) == "Mar 11, 2023, 11:30 PM"


def test_relative_day_label_time_of_day_does_not_matter():
    now = _utc("2023-01-08T23:59:00")
    assert relative_day_label("2023-01-08T00:00:00Z", "UTC", now) == "today"
    assert relative_day_label("2023-01-07T00:00:01Z", "UTC", now) == "yesterday"


def test_relative_day_label_falls_back_to_medium_format():
    now = _utc("2023-01-08T12:00:00")
    assert relative_day_label("2023-01-10T12:00:00Z", "America/Chicago", now) == "Jan 10, 2023, 6:00 AM"


def test_relative_day_label_invalid_input_is_empty():
    assert relative_day_label("garbage", "UTC", _utc("2023-01-08T00:00:00")) == ""
    assert relative_day_label(None, "UTC") == ""


def test_unknown_zone_falls_back_to_utc(caplog):
    resolve_zone.cache_clear()
    # the package logger may not propagate once the CLI has configured it
    log = logging.getLogger("parcel_status.utils.dates")
    log.addHandler(caplog.handler)
    try:
        with caplog.at_level("WARNING", logger="parcel_status.utils.dates"):
            tz = resolve_zone("Mars/Olympus_Mons")
            region = resolve_zone("America")
    finally:
        log.removeHandler(caplog.handler)
    assert tz is timezone.utc
    assert region is timezone.utc
    assert "Mars/Olympus_Mons" in caplog.text
    assert "'America'" in caplog.text


def test_zone_directory_name_renders_in_utc():
    now = _utc("2023-01-08T12:00:00")
    assert relative_day_label("2023-01-08T10:00:00Z", "Europe", now) == "today"
    assert format_time("2023-01-08T10:00:00Z", "America") == "10:00 AM"


def test_calendar_day_label_for_delivery_dates():
    now = _utc("2023-01-22T10:00:00")
    assert calendar_day_label("2023-01-22", "America/Chicago", now) == "today"
    assert calendar_day_label("2023-01-23", "America/Chicago", now) == "tomorrow"
    assert calendar_day_label("2023-01-25", "America/Chicago", now) == "Jan 25, 2023, 6:00 AM"
    # noon UTC keeps the calendar day in Tokyo (+9) too
    assert calendar_day_label("2023-01-23", "Asia/Tokyo", now) == "tomorrow"
    assert calendar_day_label(None, "UTC", now) == ""


def test_format_time_pads_hour_and_uses_zone():
    assert format_time("2023-01-08T08:12:00Z", "America/Chicago") == "02:12 AM"
    assert format_time("2023-01-08T20:05:00Z", "UTC") == "08:05 PM"
    assert format_time("2023-01-08T12:00:00Z", None) == "12:00 PM"
    assert format_time("garbage", "UTC") == ""


def test_format_medium_does_not_pad_hour():
    assert format_medium(_utc("2023-01-10T06:00:00")) == "Jan 10, 2023, 6:00 AM"
    assert format_medium(_utc("2023-01-10T00:07:00")) == "Jan 10, 2023, 12:07 AM"


def test_short_and_long_dates():
    assert format_short_date("2023-01-07", "Europe/Berlin") == "Sat, Jan 7, 2023"
    assert format_long_date("2023-01-25", "America/Chicago") == "Wednesday, January 25, 2023"
    # a timestamp is read in the zone
    assert format_short_date("2023-01-08T03:00:00Z", "America/Chicago") == "Sat, Jan 7, 2023"
    assert format_short_date(None) == ""
    assert format_long_date("nope") == ""



def test_compact_offsets_and_short_fractions_parse():
    assert parse_instant("2023-01-08T11:00:00+0100") == _utc("2023-01-08T10:00:00")
    assert parse_instant("2023-01-08T10:00:00.5Z") == _utc("2023-01-08T10:00:00.500000")


def test_instants_at_the_range_edge_render_empty():
    edge = "9999-12-31T23:30:00-05:00"
    now = _utc("2023-01-08T12:00:00")
    assert parse_instant(edge) is not None
    assert format_time(edge, "UTC") == ""
    assert relative_day_label(edge, "UTC", now) == ""
    assert format_short_date(edge, "UTC") == ""
