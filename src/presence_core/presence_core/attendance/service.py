from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Sequence

from ..common.datetime_utils import day_key_for, now_local
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_LATE_GRACE_MINUTES
from ..core.enums import CheckInType, VerificationMethod
from ..core.exceptions import (
    DuplicateSessionError,
    NoOpenSessionError,
    NotFoundError,
    ValidationError,
    VerificationFailedError,
)
from ..employees.model import Employee
from ..employees.repository import DirectoryStore
from ..identity.service import IdentityBindingService
from .factory import AttendanceStrategyFactory
from .location_policy import LocationPolicy
from .model import AttendanceSession, AttendanceStatusView, Location, SessionPatch, ShiftWindow
from .repository import SessionStore

logger = logging.getLogger(__name__)


def latest_open(sessions: Sequence[AttendanceSession]) -> Optional[AttendanceSession]:
    """Authoritative open session: the one with the latest check-in time."""
    open_sessions = [s for s in sessions if s.is_open]
    if not open_sessions:
        return None
    return max(open_sessions, key=lambda s: s.check_in_time)


class SessionManager:
    """Check-in/check-out state machine.

    At most one open session per employee and day is guaranteed by the
    store's conditional writes, never by reading first and writing later.
    """

    def __init__(
        self,
        sessions: SessionStore,
        directory: DirectoryStore,
        identity: IdentityBindingService,
        *,
        location_policy: Optional[LocationPolicy] = None,
        strategy_factory: Optional[AttendanceStrategyFactory] = None,
        shift: Optional[ShiftWindow] = None,
        grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES,
        clock: Callable[[], datetime] = now_local,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ):
        self._sessions = sessions
        self._directory = directory
        self._identity = identity
        self._location_policy = location_policy or LocationPolicy(directory)
        self._factory = strategy_factory or AttendanceStrategyFactory(shift, int(grace_minutes))
        self._clock = clock
        self._new_id = id_factory

    def check_in(
        self,
        employee_id: str,
        sample: bytes,
        location: Optional[Location] = None,
        *,
        check_in_type: CheckInType = CheckInType.OFFICE,
        now: Optional[datetime] = None,
    ) -> AttendanceSession:
        now = now or self._clock()
        today = day_key_for(now)

        employee = self._require_employee(employee_id)
        if not employee.is_active:
            raise ValidationError(f"Employee {employee.employee_id} is not active")

        self._location_policy.check(employee, check_in_type, location)
        self._verify(sample, employee.employee_id)
        self._close_stale_sessions(employee.employee_id, today, now)

        decision = self._factory.for_checkin(now).on_checkin(now)
        session = AttendanceSession(
            session_id=self._new_id(),
            employee_id=employee.employee_id,
            day_key=today,
            check_in_time=now,
            verification_method=VerificationMethod.FACE,
            check_in_location=location,
            check_in_type=check_in_type,
            status=decision.status,
            note=decision.note,
        )

        if not self._sessions.put_if_absent(session):
            raise DuplicateSessionError(employee.employee_id, today)

        logger.info(
            "Employee %s checked in (%s, %s) session %s",
            employee.employee_id,
            check_in_type.value,
            decision.status.value,
            session.session_id,
        )
        return session

    def check_out(
        self,
        employee_id: str,
        sample: bytes,
        location: Optional[Location] = None,
        *,
        now: Optional[datetime] = None,
    ) -> AttendanceSession:
        now = now or self._clock()
        today = day_key_for(now)
        employee = self._require_employee(employee_id)

        session = latest_open(self._sessions.query_by_employee_and_day(employee.employee_id, today))
        if session is None:
            raise NoOpenSessionError(f"No open session for {employee.employee_id} on {today}")

        # 1:1 against the session owner, not a search over all identities.
        self._verify(sample, session.employee_id)

        decision = self._factory.for_checkout(now, session.status).on_checkout(now, session.status)
        patch = SessionPatch(
            check_out_time=now,
            check_out_location=location,
            status=decision.status,
            note=decision.note,
        )
        if not self._sessions.update_if_open(session.session_id, patch):
            # Another checkout closed it between our read and write.
            raise NoOpenSessionError(f"Session {session.session_id} was already closed")

        closed = replace(
            session,
            check_out_time=now,
            check_out_location=location,
            status=decision.status,
            note=decision.note or session.note,
        )
        logger.info(
            "Employee %s checked out session %s after %s",
            employee.employee_id,
            session.session_id,
            closed.work_duration,
        )
        return closed

    def get_status(self, employee_id: str, *, now: Optional[datetime] = None) -> AttendanceStatusView:
        now = now or self._clock()
        today = day_key_for(now)
        employee = self._require_employee(employee_id)

        sessions = sorted(
            self._sessions.query_by_employee_and_day(employee.employee_id, today),
            key=lambda s: s.check_in_time,
        )
        if not sessions:
            return AttendanceStatusView(employee_id=employee.employee_id, day_key=today, is_checked_in=False)

        latest = sessions[-1]
        total = timedelta()
        for s in sessions:
            total += (s.check_out_time or now) - s.check_in_time
        return AttendanceStatusView(
            employee_id=employee.employee_id,
            day_key=today,
            is_checked_in=latest.is_open,
            check_in_time=latest.check_in_time,
            check_out_time=latest.check_out_time,
            work_duration=latest.work_duration,
            has_open_session=any(s.is_open for s in sessions),
            total_minutes_today=max(0, int(total / timedelta(minutes=1))),
            sessions=tuple(sessions),
        )

    def close_all_open_sessions(self, employee_id: str, *, now: Optional[datetime] = None) -> int:
        """Admin cleanup: close every open session of the employee, any day."""
        now = now or self._clock()
        employee = self._require_employee(employee_id)

        closed = 0
        for s in self._sessions.list_open_for_employee(employee.employee_id):
            patch = SessionPatch(check_out_time=max(now, s.check_in_time), note="Closed by administrator")
            if self._sessions.update_if_open(s.session_id, patch):
                closed += 1
        logger.info("Closed %d open session(s) for %s", closed, employee.employee_id)
        return closed

    def _close_stale_sessions(self, employee_id: str, today: str, now: datetime) -> List[str]:
        """Close open sessions left over from earlier days at the current time."""
        closed: List[str] = []
        for s in self._sessions.list_open_for_employee(employee_id):
            if s.day_key >= today:
                continue
            patch = SessionPatch(check_out_time=max(now, s.check_in_time), note="Auto-closed: no checkout recorded")
            if self._sessions.update_if_open(s.session_id, patch):
                logger.info("Auto-closed stale session %s of %s from %s", s.session_id, employee_id, s.day_key)
                closed.append(s.session_id)
        return closed

    def _verify(self, sample: bytes, employee_id: str) -> None:
        result = self._identity.verify(sample, employee_id)
        if not result.matched:
            logger.info("Face not recognized for %s (confidence %.1f)", employee_id, result.confidence)
            raise VerificationFailedError(employee_id, result.confidence)

    def _require_employee(self, employee_id: str) -> Employee:
        employee_id = require_non_empty(employee_id, "employee_id")
        employee = self._directory.get_employee(employee_id)
        if not employee:
            raise NotFoundError(f"Employee {employee_id} not found")
        return employee
