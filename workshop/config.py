import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./workshop.db")

# Firebase Configuration
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID")

# Workshop calendar
# Slot times are wall-clock times at this fixed offset, regardless of the caller's locale
WORKSHOP_UTC_OFFSET = os.getenv("WORKSHOP_UTC_OFFSET", "+00:00")
DEFAULT_WORK_START = os.getenv("DEFAULT_WORK_START", "09:00")
DEFAULT_WORK_END = os.getenv("DEFAULT_WORK_END", "17:00")
DEFAULT_SLOT_INTERVAL = int(os.getenv("DEFAULT_SLOT_INTERVAL", "30"))

# SMTP relay for outbound email
EMAIL_HOST = os.getenv("EMAIL_HOST")
EMAIL_PORT = int(os.getenv("EMAIL_PORT", "587"))
EMAIL_SECURE = os.getenv("EMAIL_SECURE", "false").lower() == "true"
EMAIL_USER = os.getenv("EMAIL_USER")
EMAIL_PASSWORD = os.getenv("EMAIL_PASSWORD")
EMAIL_FROM = os.getenv("EMAIL_FROM", "Workshop <noreply@workshop.local>")

# Resend Email Configuration (fallback when no SMTP relay is configured)
RESEND_API_KEY = os.getenv("RESEND_API_KEY")

# Frontend base URL used in email links
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

# Pagination
DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "50"))
MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", "100"))

# HTTP surface
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", FRONTEND_URL).split(",")
SECURITY_HEADERS_ENABLED = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"
IS_PRODUCTION = os.getenv("ENVIRONMENT", "development").lower() == "production"

# Redis (ARQ worker)
REDIS_URL = os.getenv("REDIS_URL")
REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))
REDIS_PASSWORD = os.getenv("REDIS_PASSWORD")
REDIS_SSL = os.getenv("REDIS_SSL", "false").lower() == "true"
