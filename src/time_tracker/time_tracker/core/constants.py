"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

QUARTER_HOUR_MINUTES = 15
LONG_DAY_HOURS = 16

MIN_ACCOUNT_PASSWORD_LENGTH = 6
MIN_RESET_PASSWORD_LENGTH = 8
GENERATED_PASSWORD_LENGTH = 8

# Projects with these names (trimmed, case-folded) can never be deleted.
PROTECTED_PROJECT_NAMES = frozenset({"general", "allgemein"})

LOCK_DATE_SETTING_KEY = "lock_date_to_today"

DEFAULT_EMAIL_SEND_DELAY_SECONDS = 2.0
DEFAULT_RECIPIENT_LANGUAGE = "DE"
DEFAULT_RECIPIENT_SALUTATION = "Sie"

DEFAULT_RESET_TOKEN_MAX_AGE = 3600
SUPPORTED_LANGUAGES = ("de", "en")
DEFAULT_LANGUAGE = "de"
