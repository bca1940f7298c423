"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

ALL_TAGS = "All"
DEFAULT_TEAM_LOG_LIMIT = 200
DEFAULT_REFERENCE_TZ = "UTC"
ANONYMOUS_NAME = "Anon"
MAX_TAG_LENGTH = 40
MAX_TASK_LENGTH = 500
