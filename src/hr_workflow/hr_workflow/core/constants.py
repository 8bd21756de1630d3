"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_LIST_LIMIT = 500
DEFAULT_TOKEN_MAX_AGE_SECONDS = 8 * 60 * 60
DEFAULT_TOKEN_SALT = "hr-workflow.permission-context"
DEFAULT_FIRE_REASON = "Terminated"

# Area prefix granting read access to every HR screen.
HR_PERMISSION_PREFIX = "hr"
PERMISSION_SEPARATOR = "."

SYSTEM_ADMIN_ROLE = "SystemAdmin"

MAX_REASON_LENGTH = 2000
MAX_NOTES_LENGTH = 1000

API_PREFIX = "/api/hr"
