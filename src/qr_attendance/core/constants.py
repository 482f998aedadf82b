"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_WINDOW_MINUTES = 15
DEFAULT_TOKEN_BYTES = 16
MIN_TOKEN_BYTES = 16

MYSQL_DUPLICATE_KEY = 1062
