"""Centralized constants for mnemo.

Scheduling policy values are fixed SM-2 constants, not configuration. Every
layer imports them from here.
"""

# ---------- Quality ratings ----------
MIN_QUALITY = 0
MAX_QUALITY = 5
PASSING_QUALITY = 3  # ratings below this are failed recalls

# ---------- SM-2 ----------
INITIAL_EASINESS_FACTOR = 2.5
MIN_EASINESS_FACTOR = 1.3
FIRST_INTERVAL_DAYS = 1
SECOND_INTERVAL_DAYS = 6

# ---------- Classification ----------
LEARNING_REPETITIONS_THRESHOLD = 2  # repetitions below this count as learning

# ---------- Due queue ----------
DEFAULT_DUE_LIMIT = 20
MAX_DUE_LIMIT = 100

# ---------- Event IDs ----------
EVENT_ID_PREFIX = "rev_"
