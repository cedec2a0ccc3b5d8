from __future__ import annotations

from typing import Protocol, Sequence

from .model import AttendanceSession, SessionPatch


class SessionStore(Protocol):
    """Keyed store of attendance sessions with conditional writes.

    The conditions are evaluated by the store itself; services never lock.
    """

    def put_if_absent(self, session: AttendanceSession) -> bool:
        """Create `session` unless an open one exists for its (employee_id, day_key)."""

        raise NotImplementedError

    def update_if_open(self, session_id: str, patch: SessionPatch) -> bool:
        """Apply `patch` only while the session is still open."""

        raise NotImplementedError

    def query_by_employee_and_day(self, employee_id: str, day_key: str) -> Sequence[AttendanceSession]:
        raise NotImplementedError

    def list_open_for_employee(self, employee_id: str) -> Sequence[AttendanceSession]:
        raise NotImplementedError

    def list_open_for_day(self, day_key: str) -> Sequence[AttendanceSession]:
        raise NotImplementedError

    def delete_if_open(self, session_id: str) -> bool:
        """Remove a session that is still open; closed sessions are left alone."""

        raise NotImplementedError
