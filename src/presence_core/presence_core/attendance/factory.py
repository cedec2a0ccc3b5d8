from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..core.constants import DEFAULT_LATE_GRACE_MINUTES
from ..core.enums import AttendanceStatus
from .model import ShiftWindow
from .strategies.base import AttendanceStrategy
from .strategies.early_strategy import EarlyLeaveStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass(frozen=True)
class AttendanceStrategyFactory:
    """Factory Pattern: picks the classification rule for a given moment.

    Without a shift every session is ON_TIME. Shift times are taken on the
    calendar day of `now`.
    """

    shift: Optional[ShiftWindow] = None
    grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES

    def for_checkin(self, now: datetime) -> AttendanceStrategy:
        if self.shift is None:
            return NormalStrategy()
        start = datetime.combine(now.date(), self.shift.start_time)
        if now <= start + timedelta(minutes=self.grace_minutes):
            return NormalStrategy()
        return LateStrategy(start)

    def for_checkout(self, now: datetime, current_status: AttendanceStatus) -> AttendanceStrategy:
        if self.shift is None or current_status != AttendanceStatus.ON_TIME:
            return NormalStrategy()
        end = datetime.combine(now.date(), self.shift.end_time)
        if now < end - timedelta(minutes=self.shift.early_leave_minutes):
            return EarlyLeaveStrategy(end)
        return NormalStrategy()
