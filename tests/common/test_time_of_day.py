from datetime import time, timedelta

import pytest

from src.hrms_attendance.hrms_attendance.common.time_of_day import ShiftWindow, TimeOfDay


def test_parse_and_format():
    assert TimeOfDay.parse("09:30").seconds == 9 * 3600 + 30 * 60
    assert str(TimeOfDay.parse("07:05:09")) == "07:05:09"


@pytest.mark.parametrize("raw", ["25:00", "12:60", "abc", "1"])
def test_parse_rejects_garbage(raw):
    with pytest.raises(ValueError):
        TimeOfDay.parse(raw)


def test_coerce_accepts_mysql_shapes():
    assert TimeOfDay.coerce(time(9, 0)) == TimeOfDay.of(9)
    assert TimeOfDay.coerce(timedelta(hours=9)) == TimeOfDay.of(9)
    assert TimeOfDay.coerce("09:00:00") == TimeOfDay.of(9)


def test_minute_arithmetic_wraps_midnight():
    assert TimeOfDay.of(23, 30).plus_minutes(45) == TimeOfDay.of(0, 15)
    assert TimeOfDay.of(0, 30).minus_minutes(60) == TimeOfDay.of(23, 30)
    assert TimeOfDay.of(9).minus_minutes(120) == TimeOfDay.of(7)


def test_is_within_handles_overnight_range():
    start, end = TimeOfDay.of(22), TimeOfDay.of(6)
    assert TimeOfDay.of(23, 30).is_within(start, end)
    assert TimeOfDay.of(5, 30).is_within(start, end)
    assert not TimeOfDay.of(12).is_within(start, end)
    # bounds are inclusive
    assert TimeOfDay.of(22).is_within(start, end)
    assert TimeOfDay.of(6).is_within(start, end)


def test_is_within_same_day_range():
    assert TimeOfDay.of(12).is_within(TimeOfDay.of(9), TimeOfDay.of(18))
    assert not TimeOfDay.of(8, 59).is_within(TimeOfDay.of(9), TimeOfDay.of(18))


def test_overnight_window_offsets():
    window = ShiftWindow.of("22:00", "06:00")
    assert window.is_overnight
    assert window.length_seconds == 8 * 3600
    assert window.offset_from_start(TimeOfDay.of(21)) == -3600
    assert window.offset_from_start(TimeOfDay.of(5)) == 7 * 3600
    assert window.offset_from_start(TimeOfDay.of(15)) == -7 * 3600
    assert window.contains(TimeOfDay.of(1))
    assert not window.contains(TimeOfDay.of(12))


def test_day_window_offsets():
    window = ShiftWindow.of(time(9), time(18))
    assert not window.is_overnight
    assert window.offset_from_start(TimeOfDay.of(6, 59)) == -(2 * 3600 + 60)
    assert window.offset_from_start(TimeOfDay.of(18, 30)) == 9 * 3600 + 1800
