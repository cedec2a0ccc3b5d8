from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..core.enums import AttendanceStatus, CheckInType, VerificationMethod
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, is_duplicate_key
from .model import AttendanceSession, Location, SessionPatch
from .repository import SessionStore

logger = logging.getLogger(__name__)

_COLUMNS = """
    session_id, employee_id, day_key, check_in_time, check_out_time,
    check_in_lat, check_in_lng, check_out_lat, check_out_lng,
    verification_method, check_in_type, status, note
"""


class MySQLSessionRepository(SessionStore):
    """attendance_sessions with UNIQUE(employee_id, day_key, open_marker).

    open_marker is a generated column that is 1 only while check_out_time is
    NULL, so the unique key is what makes put_if_absent conditional.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def put_if_absent(self, session: AttendanceSession) -> bool:
        loc = session.check_in_location
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_sessions(
                        session_id, employee_id, day_key, check_in_time,
                        check_in_lat, check_in_lng, verification_method, check_in_type, status, note
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        session.session_id,
                        session.employee_id,
                        session.day_key,
                        session.check_in_time,
                        loc.latitude if loc else None,
                        loc.longitude if loc else None,
                        session.verification_method.value,
                        session.check_in_type.value,
                        session.status.value,
                        session.note,
                    ),
                )
        except mysql.connector.IntegrityError as exc:
            if is_duplicate_key(exc):
                logger.info(
                    "Open session already exists for %s on %s", session.employee_id, session.day_key
                )
                return False
            raise
        return True

    def update_if_open(self, session_id: str, patch: SessionPatch) -> bool:
        loc = patch.check_out_location
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_sessions
                SET check_out_time=%s, check_out_lat=%s, check_out_lng=%s,
                    status=COALESCE(%s, status), note=COALESCE(%s, note)
                WHERE session_id=%s AND check_out_time IS NULL
                """,
                (
                    patch.check_out_time,
                    loc.latitude if loc else None,
                    loc.longitude if loc else None,
                    patch.status.value if patch.status else None,
                    patch.note,
                    session_id,
                ),
            )
            return cur.rowcount > 0

    def query_by_employee_and_day(self, employee_id: str, day_key: str) -> Sequence[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_sessions
                WHERE employee_id=%s AND day_key=%s
                ORDER BY check_in_time
                """,
                (employee_id, day_key),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def list_open_for_employee(self, employee_id: str) -> Sequence[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_sessions
                WHERE employee_id=%s AND check_out_time IS NULL
                ORDER BY check_in_time
                """,
                (employee_id,),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def list_open_for_day(self, day_key: str) -> Sequence[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_sessions
                WHERE day_key=%s AND check_out_time IS NULL
                ORDER BY employee_id, check_in_time
                """,
                (day_key,),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def delete_if_open(self, session_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM attendance_sessions WHERE session_id=%s AND check_out_time IS NULL",
                (session_id,),
            )
            return cur.rowcount > 0


def _location(lat: Any, lng: Any) -> Optional[Location]:
    if lat is None or lng is None:
        return None
    return Location(latitude=float(lat), longitude=float(lng))


def _to_session(r: Dict[str, Any]) -> AttendanceSession:
    return AttendanceSession(
        session_id=str(r["session_id"]),
        employee_id=str(r["employee_id"]),
        day_key=str(r["day_key"]),
        check_in_time=r["check_in_time"],
        check_out_time=r.get("check_out_time"),
        verification_method=VerificationMethod(r["verification_method"]),
        check_in_location=_location(r.get("check_in_lat"), r.get("check_in_lng")),
        check_out_location=_location(r.get("check_out_lat"), r.get("check_out_lng")),
        check_in_type=CheckInType(r.get("check_in_type") or CheckInType.OFFICE.value),
        status=AttendanceStatus(r.get("status") or AttendanceStatus.UNKNOWN.value),
        note=r.get("note"),
    )
