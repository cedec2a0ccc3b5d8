from __future__ import annotations

from dataclasses import dataclass
from types import ModuleType
from typing import Optional

from .attendance.location_policy import LocationPolicy
from .attendance.model import ShiftWindow
from .attendance.mysql_session_repository import MySQLSessionRepository
from .attendance.repository import SessionStore
from .attendance.service import SessionManager
from .common.datetime_utils import parse_hhmm
from .core.constants import (
    DEFAULT_DELETE_WORKERS,
    DEFAULT_GEOFENCE_RADIUS_METERS,
    DEFAULT_LATE_GRACE_MINUTES,
    DEFAULT_MATCH_THRESHOLD,
    DEFAULT_RETRY_ATTEMPTS,
    IDENTITY_INDEX_MAX_BATCH_DELETE,
    IDENTITY_INDEX_PAGE_SIZE,
)
from .database.connection import DatabaseConnection, DBConfig
from .employees.model import Geofence
from .employees.mysql_directory_repository import MySQLDirectoryRepository
from .employees.repository import DirectoryStore
from .identity.http_index import HttpIdentityIndex
from .identity.index import IdentityIndex
from .identity.service import IdentityBindingService
from .reconciliation.batching import BatchDeleter
from .reconciliation.service import ReconciliationEngine


@dataclass(frozen=True)
class Container:
    directory: DirectoryStore
    sessions: SessionStore
    index: IdentityIndex

    identity_service: IdentityBindingService
    session_manager: SessionManager
    reconciliation_engine: ReconciliationEngine

    conn: Optional[DatabaseConnection] = None


def wire(
    *,
    directory: DirectoryStore,
    sessions: SessionStore,
    index: IdentityIndex,
    attendance: Optional[dict] = None,
    reconciliation: Optional[dict] = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Assemble services on top of already-built store adapters."""
    attendance = attendance or {}
    reconciliation = reconciliation or {}

    fence = attendance.get("default_geofence")
    default_geofence = (
        Geofence(
            latitude=float(fence["latitude"]),
            longitude=float(fence["longitude"]),
            radius_meters=float(fence.get("radius_meters", DEFAULT_GEOFENCE_RADIUS_METERS)),
        )
        if fence
        else None
    )
    shift = None
    if attendance.get("shift_start") and attendance.get("shift_end"):
        shift = ShiftWindow(
            start_time=parse_hhmm(attendance["shift_start"]),
            end_time=parse_hhmm(attendance["shift_end"]),
            early_leave_minutes=int(attendance.get("early_leave_minutes", 0)),
        )

    identity_service = IdentityBindingService(index, directory)
    session_manager = SessionManager(
        sessions,
        directory,
        identity_service,
        location_policy=LocationPolicy(directory, default_geofence),
        shift=shift,
        grace_minutes=int(attendance.get("grace_minutes", DEFAULT_LATE_GRACE_MINUTES)),
    )
    reconciliation_engine = ReconciliationEngine(
        directory,
        index,
        sessions,
        deleter=BatchDeleter(
            index,
            workers=int(reconciliation.get("delete_workers", DEFAULT_DELETE_WORKERS)),
            retry_attempts=int(reconciliation.get("retry_attempts", DEFAULT_RETRY_ATTEMPTS)),
        ),
    )

    return Container(
        directory=directory,
        sessions=sessions,
        index=index,
        identity_service=identity_service,
        session_manager=session_manager,
        reconciliation_engine=reconciliation_engine,
        conn=conn,
    )


def build_container(
    *,
    db_config: dict,
    identity_index: dict,
    attendance: Optional[dict] = None,
    reconciliation: Optional[dict] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    index = HttpIdentityIndex(
        base_url=str(identity_index["base_url"]),
        collection_id=str(identity_index["collection_id"]),
        api_key=str(identity_index.get("api_key", "")),
        timeout_seconds=float(identity_index.get("timeout_seconds", 10)),
        max_batch_delete=int(identity_index.get("max_batch_delete", IDENTITY_INDEX_MAX_BATCH_DELETE)),
        page_size=int(identity_index.get("page_size", IDENTITY_INDEX_PAGE_SIZE)),
        match_threshold=float(identity_index.get("match_threshold", DEFAULT_MATCH_THRESHOLD)),
        retry_attempts=int((reconciliation or {}).get("retry_attempts", DEFAULT_RETRY_ATTEMPTS)),
    )
    return wire(
        directory=MySQLDirectoryRepository(conn),
        sessions=MySQLSessionRepository(conn),
        index=index,
        attendance=attendance,
        reconciliation=reconciliation,
        conn=conn,
    )


def build_container_from_settings(settings: ModuleType) -> Container:
    return build_container(
        db_config=getattr(settings, "DB_CONFIG"),
        identity_index=getattr(settings, "IDENTITY_INDEX"),
        attendance=getattr(settings, "ATTENDANCE", None),
        reconciliation=getattr(settings, "RECONCILIATION", None),
    )
