from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class NormalStrategy(AttendanceStrategy):
    """On time, or no shift configured."""

    def on_checkin(self, now: datetime) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.ON_TIME)
