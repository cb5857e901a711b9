"""Settings shared by every environment module.

Each environment imports these names and overrides what differs.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[1]

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "time_tracker"),
}

# Public URL of the app, used to build password recovery links
APP_BASE_URL = os.getenv("APP_BASE_URL", "http://localhost:5000")

# "log" only logs outgoing mail, "resend" sends through the Resend API
EMAIL_MODE = os.getenv("EMAIL_MODE", "log").lower()
RESEND_API_KEY = os.getenv("RESEND_API_KEY", "")
EMAIL_FROM = os.getenv("EMAIL_FROM", "onboarding@resend.dev")
EMAIL_SEND_DELAY_SECONDS = float(os.getenv("EMAIL_SEND_DELAY_SECONDS", "2.0"))
EMAIL_TIMEOUT_SECONDS = float(os.getenv("EMAIL_TIMEOUT_SECONDS", "10"))

RESET_TOKEN_MAX_AGE = int(os.getenv("RESET_TOKEN_MAX_AGE", "3600"))

# Sent-email history and uploaded HR batches
DATA_DIR = os.getenv("DATA_DIR") or str(BASE_DIR / "instance")

LONG_DAY_HOURS = float(os.getenv("LONG_DAY_HOURS", "16"))
