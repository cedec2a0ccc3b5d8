import os

from .config import ATTENDANCE, CELERY, DB_CONFIG, IDENTITY_INDEX, RECONCILIATION, Config

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")
LOG_LEVEL = Config.LOG_LEVEL

DEBUG = False

# Required on admin endpoints (register, reset, reconciliation) when set.
ADMIN_TOKEN = os.getenv("ADMIN_TOKEN") or None

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

__all__ = ["ATTENDANCE", "CELERY", "DB_CONFIG", "IDENTITY_INDEX", "RECONCILIATION", "Config"]
