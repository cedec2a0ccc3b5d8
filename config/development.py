import os

from .config import ATTENDANCE, CELERY, DB_CONFIG, IDENTITY_INDEX, RECONCILIATION, Config

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG").upper()

DEBUG = True

# Required on admin endpoints (register, reset, reconciliation) when set.
ADMIN_TOKEN = os.getenv("ADMIN_TOKEN") or None

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

__all__ = ["ATTENDANCE", "CELERY", "DB_CONFIG", "IDENTITY_INDEX", "RECONCILIATION", "Config"]
