from __future__ import annotations

from dataclasses import dataclass

from .attendance.aggregator import DailyAttendanceAggregator
from .attendance.mysql_attendance_repository import MySQLDailyAttendanceRepository
from .attendance.service import PunchService
from .breaks.mysql_break_repository import MySQLBreakLogRepository
from .breaks.service import BreakService
from .companies.mysql_company_repository import MySQLCompanySettings
from .core.constants import DEFAULT_TIMEZONE, DUPLICATE_PUNCH_WINDOW_MINUTES
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .punches.duplicate import DuplicateDetector
from .punches.mysql_punch_repository import MySQLPunchRepository
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .shifts.mysql_shift_repository import MySQLBreakRuleRepository, MySQLShiftRepository
from .shifts.resolver import RosterShiftResolver


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    employees_repo: MySQLEmployeeRepository
    companies_repo: MySQLCompanySettings
    shifts_repo: MySQLShiftRepository
    break_rules_repo: MySQLBreakRuleRepository
    schedules_repo: MySQLScheduleRepository
    punches_repo: MySQLPunchRepository
    attendance_repo: MySQLDailyAttendanceRepository
    breaks_repo: MySQLBreakLogRepository

    aggregator: DailyAttendanceAggregator
    punch_service: PunchService
    break_service: BreakService


def build_container(
    *,
    db_config: dict,
    default_timezone: str = DEFAULT_TIMEZONE,
    duplicate_window_minutes: int = DUPLICATE_PUNCH_WINDOW_MINUTES,
) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection.get_instance(config)

    employees_repo = MySQLEmployeeRepository(conn)
    companies_repo = MySQLCompanySettings(conn)
    shifts_repo = MySQLShiftRepository(conn)
    break_rules_repo = MySQLBreakRuleRepository(conn)
    schedules_repo = MySQLScheduleRepository(conn)
    punches_repo = MySQLPunchRepository(conn)
    attendance_repo = MySQLDailyAttendanceRepository(conn)
    breaks_repo = MySQLBreakLogRepository(conn)

    shift_resolver = RosterShiftResolver(shifts_repo, employees_repo, schedules_repo)
    aggregator = DailyAttendanceAggregator(
        conn,
        attendance_repo,
        punches_repo,
        employees_repo,
        shift_resolver,
        default_timezone=default_timezone,
    )
    punch_service = PunchService(
        conn,
        employees_repo,
        companies_repo,
        shift_resolver,
        punches_repo,
        DuplicateDetector(punches_repo, window_minutes=duplicate_window_minutes),
        aggregator,
        default_timezone=default_timezone,
    )
    break_service = BreakService(
        conn,
        employees_repo,
        attendance_repo,
        breaks_repo,
        break_rules_repo,
        shift_resolver,
        default_timezone=default_timezone,
    )

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        companies_repo=companies_repo,
        shifts_repo=shifts_repo,
        break_rules_repo=break_rules_repo,
        schedules_repo=schedules_repo,
        punches_repo=punches_repo,
        attendance_repo=attendance_repo,
        breaks_repo=breaks_repo,
        aggregator=aggregator,
        punch_service=punch_service,
        break_service=break_service,
    )
