"""Internal constants shared across the library."""

STORAGE_KEY = "mindspace_user_data"

#: Current document format. Documents written before the version tag
#: existed carry no ``schemaVersion`` key and are treated as version 0.
SCHEMA_VERSION = 1

# ------------------------------------------------------------------
# Document limits
# ------------------------------------------------------------------

MOOD_HISTORY_LIMIT = 100
EXPORT_INDENT = 2

EXPORT_FILENAME_TEMPLATE = "mindspace-data-export-{day}.json"

LOAD_ERROR_MESSAGE = "Failed to load user data"
