from __future__ import annotations

from typing import Optional, Set

from ..core.enums import EmployeeStatus, WorkMode
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee, Geofence
from .repository import DirectoryStore


class MySQLDirectoryRepository(DirectoryStore):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_employee(self, employee_id: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, full_name, status, identity_binding_id, work_mode, branch_id
                FROM employees
                WHERE employee_id=%s
                """,
                (employee_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Employee(
                employee_id=str(r["employee_id"]),
                full_name=str(r["full_name"]),
                status=EmployeeStatus(r["status"]),
                identity_binding_id=r.get("identity_binding_id"),
                work_mode=WorkMode(r.get("work_mode") or WorkMode.OFFICE.value),
                branch_id=r.get("branch_id"),
            )

    def list_active_employee_ids(self) -> Set[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT employee_id FROM employees WHERE status=%s",
                (EmployeeStatus.ACTIVE.value,),
            )
            return {str(r["employee_id"]) for r in fetchall(cur)}

    def set_identity_binding(self, employee_id: str, binding_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employees SET identity_binding_id=%s WHERE employee_id=%s",
                (binding_id, employee_id),
            )
            return cur.rowcount > 0

    def clear_identity_binding(self, employee_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employees SET identity_binding_id=NULL WHERE employee_id=%s",
                (employee_id,),
            )
            return cur.rowcount > 0

    def get_branch_geofence(self, branch_id: str) -> Optional[Geofence]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT latitude, longitude, radius_meters FROM branches WHERE branch_id=%s",
                (branch_id,),
            )
            r = fetchone(cur)
            if not r or r.get("latitude") is None or r.get("longitude") is None:
                return None
            return Geofence(
                latitude=float(r["latitude"]),
                longitude=float(r["longitude"]),
                radius_meters=float(r.get("radius_meters") or 100),
            )
