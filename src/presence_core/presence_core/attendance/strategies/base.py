from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    note: Optional[str] = None


class AttendanceStrategy(ABC):
    """Strategy Pattern: the status written when a session opens and when it closes."""

    @abstractmethod
    def on_checkin(self, now: datetime) -> StatusDecision:
        raise NotImplementedError

    def on_checkout(self, now: datetime, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current)


def minutes_between(start: datetime, end: datetime) -> int:
    return max(0, int((end - start).total_seconds() // 60))
