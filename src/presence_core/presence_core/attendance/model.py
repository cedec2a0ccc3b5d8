from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, time, timedelta
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus, CheckInType, VerificationMethod


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class ShiftWindow:
    """Configured working hours used to classify check-in and check-out."""

    start_time: time
    end_time: time
    early_leave_minutes: int = 0


@dataclass(frozen=True)
class AttendanceSession:
    """Domain entity: one check-in/check-out pair.

    A session with no check_out_time is open. At most one open session may
    exist per (employee_id, day_key); once closed it never changes again.
    """

    session_id: str
    employee_id: str
    day_key: str
    check_in_time: datetime
    check_out_time: Optional[datetime] = None
    verification_method: VerificationMethod = VerificationMethod.FACE
    check_in_location: Optional[Location] = None
    check_out_location: Optional[Location] = None
    check_in_type: CheckInType = CheckInType.OFFICE
    status: AttendanceStatus = AttendanceStatus.ON_TIME
    note: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.check_out_time is None

    @property
    def is_late(self) -> bool:
        return self.status == AttendanceStatus.LATE

    @property
    def work_duration(self) -> Optional[timedelta]:
        if self.check_out_time is None:
            return None
        return self.check_out_time - self.check_in_time


@dataclass(frozen=True)
class SessionPatch:
    """Fields a checkout may set on an open session."""

    check_out_time: datetime
    check_out_location: Optional[Location] = None
    status: Optional[AttendanceStatus] = None
    note: Optional[str] = None


@dataclass(frozen=True)
class AttendanceStatusView:
    """Read model returned by SessionManager.get_status."""

    employee_id: str
    day_key: str
    is_checked_in: bool
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    work_duration: Optional[timedelta] = None
    has_open_session: bool = False
    total_minutes_today: int = 0
    sessions: Sequence[AttendanceSession] = field(default_factory=tuple)
