"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from .enums import LeaveRequestStatus

DEFAULT_LATE_GRACE_MINUTES = 5
DEFAULT_HALF_DAY_THRESHOLD_MINUTES = 240
DEFAULT_HISTORY_LIMIT = 30
DEFAULT_LEDGER_MAX_RETRIES = 5
# Undoing a reservation must not lose to ordinary contention.
COMPENSATION_MAX_RETRIES = 50

NOTES_SEPARATOR = "; "
SIGN_OUT_BEFORE_SIGN_IN_NOTE = "sign-out precedes sign-in, flagged for review"

ACTIVE_LEAVE_STATUSES = frozenset({LeaveRequestStatus.PENDING, LeaveRequestStatus.APPROVED})
