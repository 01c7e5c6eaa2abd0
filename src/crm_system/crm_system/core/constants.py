"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_PAGE = 1
DEFAULT_PAGE_LIMIT = 10
DEFAULT_SESSION_DAYS = 7
DEFAULT_TASK_DEADLINE_DAYS = 7
DEFAULT_MAINTENANCE_INTERVAL_DAYS = 30
RECENT_ITEMS_LIMIT = 10

MIN_PASSWORD_LENGTH = 6
RESET_PASSWORD_BYTES = 8

USER_NAME_MAX_LENGTH = 50
TASK_TITLE_MAX_LENGTH = 100
TASK_DESCRIPTION_MAX_LENGTH = 500
MACHINE_NOTES_MAX_LENGTH = 500

DEFAULT_USER_DEPARTMENT = "General"
DEFAULT_MACHINE_DEPARTMENT = "Production"

UNASSIGNED_KEY = "Unassigned"
UNCATEGORIZED_KEY = "Uncategorized"
