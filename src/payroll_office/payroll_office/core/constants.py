"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TOTAL_WORKING_DAYS = 22
DEFAULT_PAGE_LIMIT = 100
MAX_PAGE_LIMIT = 500
DEFAULT_ACTOR = "system"

SLIP_NUMBER_PREFIX = "SS"
SLIP_SEQUENCE_WIDTH = 4
SLIP_NUMBER_MAX_ATTEMPTS = 5
