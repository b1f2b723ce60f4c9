"""Cron entry point: reconcile unlinked biometric punches into daily attendance.

Example (every 15 minutes):
    */15 * * * * cd /srv/hrms && python scripts/process_punches.py
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.hrms_attendance.hrms_attendance.common.datetime_utils import parse_optional_date
from src.hrms_attendance.hrms_attendance.container import build_container
from src.hrms_attendance.hrms_attendance.core.constants import DEFAULT_TIMEZONE

logger = logging.getLogger("process_punches")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Process biometric punch logs into daily attendance.")
    parser.add_argument("--company-id", type=int, default=None)
    parser.add_argument("--employee-id", type=int, default=None)
    parser.add_argument("--date-from", default=None, help="YYYY-MM-DD (default: yesterday)")
    parser.add_argument("--date-to", default=None, help="YYYY-MM-DD (default: today)")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    load_dotenv(override=False)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args = parse_args(argv)

    settings = importlib.import_module(get_settings_module())
    container = build_container(
        db_config=dict(settings.DB_CONFIG),
        default_timezone=getattr(settings, "DEFAULT_TIMEZONE", DEFAULT_TIMEZONE),
    )

    result = container.aggregator.process_punch_logs(
        company_id=args.company_id,
        employee_id=args.employee_id,
        date_from=parse_optional_date(args.date_from),
        date_to=parse_optional_date(args.date_to),
    )
    logger.info(
        "%s (punches=%d, skipped_groups=%d)",
        result.message,
        result.total_punches,
        result.skipped_groups,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
