from datetime import datetime, time

import pytest

from src.presence_core.presence_core.attendance.factory import AttendanceStrategyFactory
from src.presence_core.presence_core.attendance.model import ShiftWindow
from src.presence_core.presence_core.attendance.strategies.early_strategy import EarlyLeaveStrategy
from src.presence_core.presence_core.attendance.strategies.late_strategy import LateStrategy
from src.presence_core.presence_core.attendance.strategies.normal_strategy import NormalStrategy
from src.presence_core.presence_core.core.enums import AttendanceStatus

SHIFT = ShiftWindow(start_time=time(8, 0), end_time=time(17, 0), early_leave_minutes=30)


def test_factory_checkin_on_time_within_grace():
    factory = AttendanceStrategyFactory(SHIFT, grace_minutes=5)
    strategy = factory.for_checkin(datetime(2025, 1, 1, 8, 4, 59))

    assert isinstance(strategy, NormalStrategy)


def test_factory_checkin_late_after_grace():
    now = datetime(2025, 1, 1, 8, 6, 0)
    strategy = AttendanceStrategyFactory(SHIFT, grace_minutes=5).for_checkin(now)

    assert isinstance(strategy, LateStrategy)
    decision = strategy.on_checkin(now)
    assert decision.status == AttendanceStatus.LATE
    assert decision.note == "Late by 6 min"


def test_factory_without_shift_is_always_normal():
    factory = AttendanceStrategyFactory()
    now = datetime(2025, 1, 1, 23, 0)

    assert isinstance(factory.for_checkin(now), NormalStrategy)
    assert isinstance(factory.for_checkout(now, AttendanceStatus.ON_TIME), NormalStrategy)


def test_checkout_inside_early_leave_tolerance_is_normal():
    factory = AttendanceStrategyFactory(SHIFT)

    assert isinstance(factory.for_checkout(datetime(2025, 1, 1, 16, 40), AttendanceStatus.ON_TIME), NormalStrategy)


def test_early_leave_only_when_checkin_was_on_time():
    now = datetime(2025, 1, 1, 15, 0)
    factory = AttendanceStrategyFactory(SHIFT)

    on_time = factory.for_checkout(now, AttendanceStatus.ON_TIME)
    late = factory.for_checkout(now, AttendanceStatus.LATE)

    assert isinstance(on_time, EarlyLeaveStrategy)
    decision = on_time.on_checkout(now, AttendanceStatus.ON_TIME)
    assert decision.status == AttendanceStatus.EARLY_LEAVE
    assert decision.note == "Left 120 min early"
    assert isinstance(late, NormalStrategy)
    assert late.on_checkout(now, AttendanceStatus.LATE).status == AttendanceStatus.LATE


def test_early_leave_strategy_cannot_classify_a_checkin():
    strategy = AttendanceStrategyFactory(SHIFT).for_checkout(datetime(2025, 1, 1, 15, 0), AttendanceStatus.ON_TIME)

    with pytest.raises(NotImplementedError):
        strategy.on_checkin(datetime(2025, 1, 1, 8, 0))
