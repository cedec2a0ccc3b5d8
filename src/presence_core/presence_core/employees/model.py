from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import EmployeeStatus, WorkMode


@dataclass(frozen=True)
class Geofence:
    latitude: float
    longitude: float
    radius_meters: float


@dataclass(frozen=True)
class Employee:
    """Directory entry, read-only for this core except the binding mirror."""

    employee_id: str
    full_name: str
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    identity_binding_id: Optional[str] = None
    work_mode: WorkMode = WorkMode.OFFICE
    branch_id: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == EmployeeStatus.ACTIVE
