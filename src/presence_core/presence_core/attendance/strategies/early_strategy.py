from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision, minutes_between


class EarlyLeaveStrategy(AttendanceStrategy):
    """Checkout before the shift ends, for a session that started on time."""

    def __init__(self, shift_end: datetime):
        self.shift_end = shift_end

    def on_checkin(self, now: datetime) -> StatusDecision:
        raise NotImplementedError("EarlyLeaveStrategy only classifies checkouts")

    def on_checkout(self, now: datetime, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.EARLY_LEAVE,
            note=f"Left {minutes_between(now, self.shift_end)} min early",
        )
