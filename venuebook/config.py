import os
import warnings
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./venuebook.db")

# Security - CRITICAL: No default secret key in production
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    warnings.warn(
        "SECRET_KEY not set! Using insecure default - DO NOT USE IN PRODUCTION", RuntimeWarning, stacklevel=2
    )
    SECRET_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only

JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_DAYS = int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", "30"))
WIDGET_TOKEN_EXPIRE_HOURS = int(os.getenv("WIDGET_TOKEN_EXPIRE_HOURS", "24"))
# Max age (seconds) of emailed verification / reset links
EMAIL_VERIFICATION_MAX_AGE = int(os.getenv("EMAIL_VERIFICATION_MAX_AGE", str(24 * 3600)))
PASSWORD_RESET_MAX_AGE = int(os.getenv("PASSWORD_RESET_MAX_AGE", "3600"))

# Admin portal base URL, used for links in emails
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
# Public API base URL, used by the widget embed snippet
API_URL = os.getenv("API_URL", "http://localhost:8000")

# Resend Email Configuration
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "VenueBook <noreply@venuebook.dev>")

# Feature switches
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
SECURITY_HEADERS_ENABLED = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"
LOAD_DEMO_DATA = os.getenv("LOAD_DEMO_DATA", "false").lower() == "true"

ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "http://localhost:3000,http://localhost:5173",
).split(",")

# Booking defaults
DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "USD")
VENUE_DEFAULT_CURRENCY = os.getenv("VENUE_DEFAULT_CURRENCY", "NZD")
REMINDER_WINDOW_HOURS = int(os.getenv("REMINDER_WINDOW_HOURS", "24"))
