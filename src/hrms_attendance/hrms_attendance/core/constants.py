"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TIMEZONE = "Asia/Kolkata"
DEFAULT_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

DUPLICATE_PUNCH_WINDOW_MINUTES = 1
DEFAULT_CHECKIN_ALLOWED_BEFORE_MINUTES = 120

DEFAULT_HISTORY_DAYS = 30
DEFAULT_HISTORY_LIMIT = 50

FULL_PAY_DAY = 1
AD_HOC_BREAK_NAME = "Ad-hoc Break"
