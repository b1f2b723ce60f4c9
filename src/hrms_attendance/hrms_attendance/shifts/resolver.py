from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from ..core.enums import ShiftSource
from ..employees.repository import EmployeeDirectory
from ..schedules.repository import ScheduleRepository
from .model import ResolvedShift
from .repository import ShiftRepository


class ShiftResolver(Protocol):
    def resolve_shift(self, employee_id: int, work_date: date) -> Optional[ResolvedShift]:
        raise NotImplementedError


class RosterShiftResolver(ShiftResolver):
    """Roster assignment for the date first, then the employee's default shift."""

    def __init__(self, shifts: ShiftRepository, employees: EmployeeDirectory, schedules: Optional[ScheduleRepository] = None):
        self._shifts = shifts
        self._employees = employees
        self._schedules = schedules

    def resolve_shift(self, employee_id: int, work_date: date) -> Optional[ResolvedShift]:
        if self._schedules:
            sc = self._schedules.get_for_employee_and_date(employee_id=employee_id, work_date=work_date)
            if sc:
                shift = self._shifts.get_by_id(sc.shift_id)
                if shift:
                    return ResolvedShift(shift=shift, source=ShiftSource.ROSTER)

        employee = self._employees.get_by_id(employee_id)
        if employee and employee.shift_id:
            shift = self._shifts.get_by_id(employee.shift_id)
            if shift:
                return ResolvedShift(shift=shift, source=ShiftSource.DEFAULT)
        return None
