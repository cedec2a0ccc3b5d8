"""Settings shared by every environment, read from environment variables."""

import os


def _optional_float(name: str):
    value = os.getenv(name)
    return float(value) if value not in (None, "") else None


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "change-me"
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = int(os.environ.get("DB_PORT", "3306"))
    DB_NAME = os.environ.get("DB_NAME", "presence_db")

    IDENTITY_INDEX_URL = os.environ.get("IDENTITY_INDEX_URL", "http://localhost:8500/v1")
    IDENTITY_INDEX_API_KEY = os.environ.get("IDENTITY_INDEX_API_KEY", "")
    IDENTITY_COLLECTION_ID = os.environ.get("IDENTITY_COLLECTION_ID", "employee-faces")

    CELERY_BROKER_URL = os.environ.get("CELERY_BROKER_URL", "redis://localhost:6379/0")
    CELERY_RESULT_BACKEND = os.environ.get("CELERY_RESULT_BACKEND", "redis://localhost:6379/1")


DB_CONFIG = {
    "host": Config.DB_HOST,
    "port": Config.DB_PORT,
    "user": Config.DB_USER,
    "password": Config.DB_PASSWORD,
    "database": Config.DB_NAME,
}

IDENTITY_INDEX = {
    "base_url": Config.IDENTITY_INDEX_URL,
    "api_key": Config.IDENTITY_INDEX_API_KEY,
    "collection_id": Config.IDENTITY_COLLECTION_ID,
    "timeout_seconds": float(os.getenv("IDENTITY_INDEX_TIMEOUT", "10")),
    "max_batch_delete": int(os.getenv("IDENTITY_INDEX_MAX_BATCH_DELETE", "100")),
    "page_size": int(os.getenv("IDENTITY_INDEX_PAGE_SIZE", "1000")),
    "match_threshold": float(os.getenv("IDENTITY_MATCH_THRESHOLD", "90")),
}

_office_lat = _optional_float("OFFICE_LATITUDE")
_office_lng = _optional_float("OFFICE_LONGITUDE")

ATTENDANCE = {
    "shift_start": os.getenv("SHIFT_START", "09:30"),
    "shift_end": os.getenv("SHIFT_END", "18:30"),
    "grace_minutes": int(os.getenv("LATE_GRACE_MINUTES", "5")),
    "early_leave_minutes": int(os.getenv("EARLY_LEAVE_MINUTES", "0")),
    "default_geofence": (
        {
            "latitude": _office_lat,
            "longitude": _office_lng,
            "radius_meters": float(os.getenv("OFFICE_RADIUS_METERS", "100")),
        }
        if _office_lat is not None and _office_lng is not None
        else None
    ),
}

RECONCILIATION = {
    "delete_workers": int(os.getenv("RECONCILE_DELETE_WORKERS", "4")),
    "retry_attempts": int(os.getenv("RECONCILE_RETRY_ATTEMPTS", "3")),
    "schedule_minutes": int(os.getenv("RECONCILE_EVERY_MINUTES", "60")),
    "default_mode": os.getenv("RECONCILE_DEFAULT_MODE", "audit"),
}

CELERY = {
    "broker_url": Config.CELERY_BROKER_URL,
    "result_backend": Config.CELERY_RESULT_BACKEND,
}
