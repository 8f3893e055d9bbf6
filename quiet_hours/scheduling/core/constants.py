"""
Constants shared by the scheduling system.
"""

# Statuses that no longer occupy time on the calendar
TERMINAL_STATUSES = frozenset({"completed", "cancelled", "missed"})

# Minutes tried around a conflicting request, in order (first clear offset wins)
ADJUST_OFFSETS = (-30, 30, -60, 60, -90, 90)

# Fragments shorter than this are dropped when splitting around conflicts
MIN_FRAGMENT_MINUTES = 15

# Upper bound on occurrences produced by one recurrence rule
MAX_OCCURRENCES = 100

# Horizon used when a recurring request has no end date
DEFAULT_RECURRENCE_YEARS = 1

# Suggestions look this many days ahead, starting tomorrow
SUGGESTION_LOOKAHEAD_DAYS = 7
SUGGESTION_DURATION_MINUTES = 60
