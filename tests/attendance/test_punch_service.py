from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from src.hrms_attendance.hrms_attendance.core.enums import (
    AttendanceStatus,
    PunchDirection,
    PunchSource,
    PunchTimingStatus,
    ShiftSource,
)
from src.hrms_attendance.hrms_attendance.core.exceptions import (
    DuplicatePunch,
    EmployeeNotFound,
    LocationRequired,
    NoShiftAssigned,
    PunchRejected,
    ValidationError,
)
from src.hrms_attendance.hrms_attendance.punches.model import BiometricPunch, Location, PunchRequest
from tests.fakes import build_world, employee, ist

DAY = date(2026, 3, 2)


def _only_row(w):
    rows = list(w.attendance.rows.values())
    assert len(rows) == 1
    return rows[0]


def test_first_punch_of_the_day_is_in():
    w = build_world()

    result = w.punch_service.handle_web_punch(1, 1, now=ist(2026, 3, 2, 9, 5))

    assert result.action == PunchDirection.IN
    assert result.status == PunchTimingStatus.ON_TIME
    assert result.message == "Clocked in successfully"
    assert result.punch_datetime == "2026-03-02 09:05:00"
    assert result.shift_name == "General"
    assert result.shift_start == "09:00:00"
    assert result.shift_source == ShiftSource.DEFAULT
    assert result.timezone == "Asia/Kolkata"

    row = _only_row(w)
    assert row.attendance_date == DAY
    assert row.punch_in == ist(2026, 3, 2, 9, 5)
    assert row.punch_out is None
    assert row.attendance_status == AttendanceStatus.PRESENT
    assert row.pay_day == 1
    assert row.workflow_master_id is None

    punch = w.punches.rows[result.punch_id]
    assert punch.punch_source == PunchSource.WEB
    assert punch.daily_attendance_id == row.daily_attendance_id
    assert punch.utc_offset == "+05:30"
    assert w.employees.locked == [1]


def test_punch_after_clock_in_is_out_and_computes_hours():
    w = build_world()
    w.punch_service.handle_web_punch(1, 1, now=ist(2026, 3, 2, 9, 0))

    result = w.punch_service.handle_web_punch(1, 1, now=ist(2026, 3, 2, 18, 0))

    assert result.action == PunchDirection.OUT
    assert result.message == "Clocked out successfully"
    row = _only_row(w)
    assert row.punch_out == ist(2026, 3, 2, 18, 0)
    assert row.total_hours == Decimal("9.00")
    assert row.worked_hours == Decimal("9.00")
    assert w.punches.rows[result.punch_id].daily_attendance_id == row.daily_attendance_id


def test_later_punch_moves_punch_out():
    w = build_world()
    w.punch_service.handle_web_punch(1, 1, now=ist(2026, 3, 2, 9, 0))
    w.punch_service.handle_web_punch(1, 1, now=ist(2026, 3, 2, 18, 0))

    result = w.punch_service.handle_web_punch(1, 1, now=ist(2026, 3, 2, 19, 0))

    assert result.action == PunchDirection.OUT
    row = _only_row(w)
    assert row.punch_in == ist(2026, 3, 2, 9, 0)
    assert row.punch_out == ist(2026, 3, 2, 19, 0)
    assert row.total_hours == Decimal("10.00")


def test_late_clock_in_is_flagged():
    w = build_world()

    result = w.punch_service.handle_web_punch(1, 1, now=ist(2026, 3, 2, 9, 11))

    assert result.is_late
    assert result.status == PunchTimingStatus.LATE
    assert result.message == "Clocked in successfully (Late)"
    assert w.punches.rows[result.punch_id].is_late
    assert not w.punches.rows[result.punch_id].is_early_out


def test_early_clock_out_is_flagged_on_out_punch_only():
    w = build_world()
    w.punch_service.handle_web_punch(1, 1, now=ist(2026, 3, 2, 9, 0))

    result = w.punch_service.handle_web_punch(1, 1, now=ist(2026, 3, 2, 17, 0))

    assert result.is_early_out
    assert result.status == PunchTimingStatus.EARLY_OUT
    assert result.message == "Clocked out successfully (Early departure)"
    punch = w.punches.rows[result.punch_id]
    assert punch.is_early_out and not punch.is_late


def test_duplicate_punch_is_rejected_without_new_rows():
    w = build_world()
    w.punch_service.handle_web_punch(1, 1, now=ist(2026, 3, 2, 9, 5))
    before = dict(w.attendance.rows)

    with pytest.raises(DuplicatePunch):
        w.punch_service.handle_web_punch(1, 1, now=ist(2026, 3, 2, 9, 5, 30))

    assert len(w.punches.rows) == 1
    assert w.attendance.rows == before
    assert w.tx.rollbacks == 1


def test_punch_just_outside_duplicate_window_is_accepted():
    w = build_world()
    w.punch_service.handle_web_punch(1, 1, now=ist(2026, 3, 2, 9, 5))

    with pytest.raises(DuplicatePunch):
        w.punch_service.handle_web_punch(1, 1, now=ist(2026, 3, 2, 9, 6))

    result = w.punch_service.handle_web_punch(1, 1, now=ist(2026, 3, 2, 9, 6, 1))
    assert result.action == PunchDirection.OUT


def test_check_in_too_early_is_rejected():
    w = build_world()

    with pytest.raises(PunchRejected, match="07:00:00"):
        w.punch_service.handle_web_punch(1, 1, now=ist(2026, 3, 2, 6, 59))

    assert not w.punches.rows
    assert not w.attendance.rows

    result = w.punch_service.handle_web_punch(1, 1, now=ist(2026, 3, 2, 7, 0))
    assert result.action == PunchDirection.IN


def test_check_in_after_midnight_is_rejected_for_day_shift():
    w = build_world()

    with pytest.raises(PunchRejected):
        w.punch_service.handle_web_punch(1, 1, now=ist(2026, 3, 2, 0, 30))

    assert not w.punches.rows
    assert not w.attendance.rows


def test_no_shift_assigned():
    w = build_world(employees=[employee(shift_id=None)])

    with pytest.raises(NoShiftAssigned):
        w.punch_service.handle_web_punch(1, 1, now=ist(2026, 3, 2, 9, 0))
    assert not w.punches.rows


def test_roster_shift_overrides_default():
    w = build_world(schedules={(1, DAY): 2})

    result = w.punch_service.handle_web_punch(1, 1, now=ist(2026, 3, 2, 21, 30))

    assert result.shift_name == "Night"
    assert result.shift_source == ShiftSource.ROSTER
    assert not result.is_late


@pytest.mark.parametrize("emp", [employee(is_active=False), employee(company_id=2)])
def test_inactive_or_foreign_employee_is_not_found(emp):
    w = build_world(employees=[emp])

    with pytest.raises(EmployeeNotFound):
        w.punch_service.handle_web_punch(1, 1, now=ist(2026, 3, 2, 9, 0))


def test_missing_employee_timezone_falls_back_to_default():
    w = build_world(employees=[employee(timezone=None)])

    result = w.punch_service.handle_web_punch(1, 1, now=ist(2026, 3, 2, 9, 0))

    assert result.timezone == "Asia/Kolkata"


def test_punch_date_follows_employee_zone():
    w = build_world(employees=[employee(timezone="America/New_York")])

    # 2026-03-03 01:00 IST is still 2026-03-02 14:30 in New York
    result = w.punch_service.handle_web_punch(1, 1, now=ist(2026, 3, 3, 1, 0))

    assert result.punch_datetime == "2026-03-02 14:30:00"
    assert result.is_late
    assert _only_row(w).attendance_date == DAY


def test_mobile_punch_requires_coordinates():
    w = build_world()

    with pytest.raises(LocationRequired):
        w.punch_service.handle_mobile_punch(1, 1, PunchRequest(), now=ist(2026, 3, 2, 9, 0))
    with pytest.raises(LocationRequired):
        w.punch_service.handle_mobile_punch(
            1, 1, PunchRequest(location=Location(latitude=12.9)), now=ist(2026, 3, 2, 9, 0)
        )
    assert not w.punches.rows


def test_mobile_punch_records_location_and_device():
    w = build_world()
    request = PunchRequest(
        location=Location(latitude=12.97, longitude=77.59, accuracy=8.5, address="MG Road"),
        device_id="phone-1",
        device_info={"os": "android"},
        is_outside_geofence=True,
    )

    result = w.punch_service.handle_mobile_punch(1, 1, request, now=ist(2026, 3, 2, 9, 0))

    punch = w.punches.rows[result.punch_id]
    assert punch.punch_source == PunchSource.MOBILE
    assert (punch.latitude, punch.longitude, punch.location_address) == (12.97, 77.59, "MG Road")
    assert punch.device_info == {"os": "android"}
    assert punch.is_outside_geofence


def test_web_punch_forces_web_source():
    w = build_world()

    result = w.punch_service.handle_web_punch(
        1, 1, PunchRequest(punch_source=PunchSource.MOBILE), now=ist(2026, 3, 2, 9, 0)
    )

    assert w.punches.rows[result.punch_id].punch_source == PunchSource.WEB


def test_admin_biometric_punch_converts_utc_when_company_enabled():
    w = build_world(utc_enabled={1})
    request = PunchRequest(
        punch_source=PunchSource.BIOMETRIC,
        punch_datetime=datetime(2026, 3, 2, 3, 35),
        is_utc=True,
    )

    result = w.punch_service.handle_punch(1, 1, request, now=ist(2026, 3, 2, 12, 0))

    punch = w.punches.rows[result.punch_id]
    assert punch.is_utc_converted
    assert result.punch_datetime == "2026-03-02 09:05:00"
    assert punch.original_utc_datetime.utcoffset().total_seconds() == 0


def test_failure_after_insert_rolls_back_everything(monkeypatch):
    w = build_world()

    def boom(**kwargs):
        raise RuntimeError("db down")

    monkeypatch.setattr(w.aggregator, "apply_interactive_punch", boom)

    with pytest.raises(RuntimeError):
        w.punch_service.handle_web_punch(1, 1, now=ist(2026, 3, 2, 9, 0))

    assert not w.punches.rows
    assert not w.attendance.rows


def test_push_biometric_punch_only_appends_to_ledger():
    w = build_world()

    result = w.punch_service.push_biometric_punch(
        BiometricPunch(biometric_device_id="BIO-1", punch_datetime="2026-03-02T09:05:00", company_id=1, device_name="Gate A")
    )

    assert result.message == "Biometric punch recorded successfully"
    assert result.employee_name == "Asha Rao"
    assert result.employee_code == "EMP001"
    assert result.punch_datetime == "2026-03-02 09:05:00"
    assert not result.is_utc_converted

    punch = w.punches.rows[result.punch_id]
    assert punch.punch_source == PunchSource.BIOMETRIC
    assert punch.daily_attendance_id is None
    assert punch.biometric_device_name == "Gate A"
    assert not punch.is_late and not punch.is_early_out
    assert not w.attendance.rows


def test_push_biometric_punch_converts_utc_only_when_company_allows():
    enabled = build_world(utc_enabled={1})
    converted = enabled.punch_service.push_biometric_punch(
        BiometricPunch(biometric_device_id="BIO-1", punch_datetime="2026-03-02T03:35:00Z", company_id=1, is_utc=True)
    )
    assert converted.is_utc_converted
    assert converted.punch_datetime == "2026-03-02 09:05:00"

    disabled = build_world()
    kept = disabled.punch_service.push_biometric_punch(
        BiometricPunch(biometric_device_id="BIO-1", punch_datetime="2026-03-02T09:05:00", company_id=1, is_utc=True)
    )
    assert not kept.is_utc_converted
    assert kept.punch_datetime == "2026-03-02 09:05:00"


@pytest.mark.parametrize(
    "payload",
    [
        BiometricPunch(biometric_device_id=None, punch_datetime="2026-03-02T09:05:00", company_id=1),
        BiometricPunch(biometric_device_id="BIO-1", punch_datetime=None, company_id=1),
        BiometricPunch(biometric_device_id="BIO-1", punch_datetime="2026-03-02T09:05:00", company_id=None),
    ],
)
def test_push_biometric_punch_requires_fields(payload):
    w = build_world()

    with pytest.raises(ValidationError):
        w.punch_service.push_biometric_punch(payload)


def test_push_biometric_punch_unknown_device():
    w = build_world()

    with pytest.raises(EmployeeNotFound, match="BIO-404"):
        w.punch_service.push_biometric_punch(
            BiometricPunch(biometric_device_id="BIO-404", punch_datetime="2026-03-02T09:05:00", company_id=1)
        )


def test_push_biometric_punch_rejects_duplicates():
    w = build_world()
    payload = BiometricPunch(biometric_device_id="BIO-1", punch_datetime="2026-03-02T09:05:00", company_id=1)
    w.punch_service.push_biometric_punch(payload)

    with pytest.raises(DuplicatePunch):
        w.punch_service.push_biometric_punch(payload)
    assert len(w.punches.rows) == 1


def test_today_status_before_and_after_punching():
    w = build_world()

    empty = w.punch_service.get_today_punch_status(1, 1, now=ist(2026, 3, 2, 8, 0))
    assert empty.next_action == PunchDirection.IN
    assert not empty.is_clocked_in
    assert empty.punch_count == 0
    assert empty.shift["name"] == "General"

    w.punch_service.handle_web_punch(1, 1, now=ist(2026, 3, 2, 9, 15))
    clocked_in = w.punch_service.get_today_punch_status(1, 1, now=ist(2026, 3, 2, 12, 0))
    assert clocked_in.is_clocked_in
    assert clocked_in.next_action == PunchDirection.OUT
    assert clocked_in.first_punch == {"time": "2026-03-02 09:15:00", "is_late": True}

    w.punch_service.handle_web_punch(1, 1, now=ist(2026, 3, 2, 18, 5))
    done = w.punch_service.get_today_punch_status(1, 1, now=ist(2026, 3, 2, 19, 0))
    assert not done.is_clocked_in
    assert done.punch_count == 2
    assert done.last_punch == {"time": "2026-03-02 18:05:00", "is_early_out": False}
    assert [p["source"] for p in done.punches] == ["web", "web"]


def test_punch_history_pages_newest_first():
    w = build_world()
    w.punch_service.handle_web_punch(1, 1, now=ist(2026, 3, 2, 9, 0))
    w.punch_service.handle_web_punch(1, 1, now=ist(2026, 3, 2, 18, 0))
    w.punch_service.handle_web_punch(1, 1, now=ist(2026, 3, 3, 9, 0))

    history = w.punch_service.get_punch_history(
        1, 1, from_date=date(2026, 3, 1), to_date=date(2026, 3, 3), limit=2, offset=0
    )

    assert history.total == 3
    assert [r["punch_datetime"] for r in history.records] == ["2026-03-03 09:00:00", "2026-03-02 18:00:00"]

    default_range = w.punch_service.get_punch_history(1, 1, now=ist(2026, 3, 4, 10, 0))
    assert default_range.total == 3
    assert default_range.from_date == date(2026, 2, 2)


def test_punch_history_rejects_inverted_range():
    w = build_world()

    with pytest.raises(ValidationError):
        w.punch_service.get_punch_history(1, 1, from_date=date(2026, 3, 3), to_date=date(2026, 3, 1))
