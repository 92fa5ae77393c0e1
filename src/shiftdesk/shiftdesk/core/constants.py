"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MAX_IMPORT_FILE_BYTES = 10 * 1024 * 1024
DEFAULT_IMPORT_MAX_ROWS = 20_000
ACCEPTED_IMPORT_EXTENSIONS = (".xlsx", ".xls", ".csv")

DEFAULT_PROVISION_DENYLIST = (r"^system\s",)

# Fields whose change reschedules a shift for everyone assigned to it.
BROADCAST_FIELDS = frozenset({"date", "start_time", "end_time", "location_id", "client_id"})

DEFAULT_SHIFT_SLOTS = 1
IMPORTED_TITLE_FALLBACK = "Imported shift"
