from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision, minutes_between


class LateStrategy(AttendanceStrategy):
    """Check-in after shift start plus grace. A late session stays LATE at checkout."""

    def __init__(self, shift_start: datetime):
        self.shift_start = shift_start

    def on_checkin(self, now: datetime) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.LATE,
            note=f"Late by {minutes_between(self.shift_start, now)} min",
        )
