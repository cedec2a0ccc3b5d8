import os

from .config import ATTENDANCE, CELERY, IDENTITY_INDEX, RECONCILIATION, Config

SECRET_KEY = "test-secret"
LOG_LEVEL = "DEBUG"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "presence_test"),
}

DEBUG = False
TESTING = True

ADMIN_TOKEN = None

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

__all__ = ["ATTENDANCE", "CELERY", "IDENTITY_INDEX", "RECONCILIATION", "Config"]
