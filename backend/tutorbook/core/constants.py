"""Application-wide constants for the Tutorbook platform."""

from __future__ import annotations

BRAND_NAME = "Tutorbook"

# Minutes in a calendar day; "24:00" is accepted as an end-of-day marker
MINUTES_PER_DAY = 24 * 60

# Booking grid resolution (calendar cells are 15 minutes tall)
GRID_STEP_MINUTES = 15

# Drag selections round their end up to this boundary
DRAG_ROUND_MINUTES = 30

# A click without drag selects this much time
INITIAL_SELECTION_MINUTES = 30

# Session duration constraints
MIN_SESSION_DURATION = 30  # minutes
MAX_SESSION_DURATION = 480  # minutes (8 hours)

# Durations offered by the booking wizard
DEFAULT_DURATION_OPTIONS = (30, 60, 90, 120)

# Lookahead used by the booking calendar
DEFAULT_LOOKAHEAD_DAYS = 28

# Booked sessions are fetched this far past each window edge so that
# multi-day bookings are not missed
BOOKED_SESSION_PADDING_DAYS = 7

RANGE_NOT_AVAILABLE_MESSAGE = "the entire time range must be available"
