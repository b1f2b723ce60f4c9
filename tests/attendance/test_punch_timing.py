from datetime import datetime, time

import pytest
import pytz

from src.hrms_attendance.hrms_attendance.attendance.factory import TimingStrategyFactory
from src.hrms_attendance.hrms_attendance.attendance.strategies.checkin_strategy import CheckInStrategy
from src.hrms_attendance.hrms_attendance.attendance.strategies.checkout_strategy import CheckOutStrategy
from src.hrms_attendance.hrms_attendance.attendance.timing import validate_punch_timing
from src.hrms_attendance.hrms_attendance.core.enums import PunchDirection
from tests.fakes import day_shift, ist, night_shift

TZ = "Asia/Kolkata"


def test_factory_picks_strategy_by_direction():
    factory = TimingStrategyFactory()
    assert isinstance(factory.for_direction(PunchDirection.IN), CheckInStrategy)
    assert isinstance(factory.for_direction(PunchDirection.OUT), CheckOutStrategy)


@pytest.mark.parametrize(
    "hour, minute, late",
    [(9, 0, False), (9, 9, False), (9, 10, False), (9, 11, True), (8, 30, False)],
)
def test_late_detection_uses_grace(hour, minute, late):
    decision = validate_punch_timing(ist(2026, 3, 2, hour, minute), PunchDirection.IN, day_shift(), TZ)
    assert decision.allowed
    assert decision.is_late is late


def test_check_in_window_opens_before_shift():
    rejected = validate_punch_timing(ist(2026, 3, 2, 6, 59), PunchDirection.IN, day_shift(), TZ)
    assert not rejected.allowed
    assert "07:00:00" in rejected.reason

    accepted = validate_punch_timing(ist(2026, 3, 2, 7, 0), PunchDirection.IN, day_shift(), TZ)
    assert accepted.allowed
    assert not accepted.is_late


def test_check_out_is_flagged_early_but_never_refused():
    early = validate_punch_timing(ist(2026, 3, 2, 17, 59), PunchDirection.OUT, day_shift(), TZ)
    assert early.allowed and early.is_early

    on_time = validate_punch_timing(ist(2026, 3, 2, 18, 0), PunchDirection.OUT, day_shift(), TZ)
    assert on_time.allowed and not on_time.is_early

    overtime = validate_punch_timing(ist(2026, 3, 2, 20, 30), PunchDirection.OUT, day_shift(), TZ)
    assert not overtime.is_early


def test_early_grace_moves_the_threshold():
    shift = day_shift(grace_time_early_minutes=15)
    assert not validate_punch_timing(ist(2026, 3, 2, 17, 50), PunchDirection.OUT, shift, TZ).is_early
    assert validate_punch_timing(ist(2026, 3, 2, 17, 40), PunchDirection.OUT, shift, TZ).is_early


def test_overnight_shift_check_in():
    shift = night_shift()
    assert validate_punch_timing(ist(2026, 3, 2, 21, 0), PunchDirection.IN, shift, TZ).allowed
    assert not validate_punch_timing(ist(2026, 3, 2, 20, 59), PunchDirection.IN, shift, TZ).allowed
    assert not validate_punch_timing(ist(2026, 3, 2, 22, 10), PunchDirection.IN, shift, TZ).is_late
    assert validate_punch_timing(ist(2026, 3, 2, 22, 20), PunchDirection.IN, shift, TZ).is_late
    # after midnight still belongs to the running shift
    after_midnight = validate_punch_timing(ist(2026, 3, 3, 0, 30), PunchDirection.IN, shift, TZ)
    assert after_midnight.allowed and after_midnight.is_late


def test_overnight_shift_check_out():
    shift = night_shift()
    assert not validate_punch_timing(ist(2026, 3, 3, 5, 50), PunchDirection.OUT, shift, TZ).is_early
    assert validate_punch_timing(ist(2026, 3, 3, 5, 30), PunchDirection.OUT, shift, TZ).is_early
    assert validate_punch_timing(ist(2026, 3, 2, 23, 30), PunchDirection.OUT, shift, TZ).is_early
    assert not validate_punch_timing(ist(2026, 3, 3, 7, 0), PunchDirection.OUT, shift, TZ).is_early


def test_instant_is_judged_in_employee_zone():
    utc_punch = pytz.utc.localize(datetime(2026, 3, 2, 3, 41))
    decision = validate_punch_timing(utc_punch, PunchDirection.IN, day_shift(), TZ)
    assert decision.is_late


@pytest.mark.parametrize("hour, minute", [(0, 30), (1, 0), (3, 0)])
def test_day_shift_rejects_small_hours_check_in(hour, minute):
    decision = validate_punch_timing(ist(2026, 3, 2, hour, minute), PunchDirection.IN, day_shift(), TZ)
    assert not decision.allowed
    assert "07:00:00" in decision.reason


def test_day_shift_evening_check_in_is_late_not_rejected():
    decision = validate_punch_timing(ist(2026, 3, 2, 20, 0), PunchDirection.IN, day_shift(), TZ)
    assert decision.allowed and decision.is_late


def test_day_shift_check_out_after_midnight_is_early():
    decision = validate_punch_timing(ist(2026, 3, 3, 1, 0), PunchDirection.OUT, day_shift(), TZ)
    assert decision.is_early


def test_check_in_window_crossing_midnight_wraps():
    shift = day_shift(start_time=time(1, 0), end_time=time(9, 0), checkin_allowed_before_minutes=120)
    assert validate_punch_timing(ist(2026, 3, 1, 23, 30), PunchDirection.IN, shift, TZ).allowed
    assert not validate_punch_timing(ist(2026, 3, 1, 22, 59), PunchDirection.IN, shift, TZ).allowed
