from __future__ import annotations

import pytest
from tenacity import wait_none

from src.presence_core.presence_core.core.enums import ReconciliationMode
from src.presence_core.presence_core.core.exceptions import NotFoundError, ReconciliationConflict
from src.presence_core.presence_core.reconciliation.batching import BatchDeleter, chunked
from src.presence_core.presence_core.reconciliation.service import ReconciliationEngine

from tests.conftest import FACE_A
from tests.fakes import InMemoryDirectory

ENFORCE = ReconciliationMode.ENFORCE


@pytest.fixture
def engine(directory, index, sessions):
    return ReconciliationEngine(
        directory, index, sessions, deleter=BatchDeleter(index, workers=3, retry_attempts=3, wait=wait_none())
    )


def test_deactivated_employee_with_duplicate_bindings_is_purged(engine, identity, directory, index):
    identity.register("SRM001", FACE_A)
    index.enroll(b"dev", "SRM004")
    index.enroll(b"dev", "SRM004")
    directory.deactivate("SRM004")

    report = engine.find_and_purge_ghost_bindings(ENFORCE)

    assert report.ghost_count == 2
    assert report.deleted_count == 2
    assert not report.failed_batches
    assert index.external_ids() == ["SRM001"]
    with pytest.raises(NotFoundError):
        identity.verify(b"dev", "SRM004")


def test_purged_employee_can_register_again_after_reactivation(engine, identity, directory):
    identity.register("SRM004", b"dev")
    directory.deactivate("SRM004")
    engine.find_and_purge_ghost_bindings(ENFORCE)

    directory.activate("SRM004")
    identity.register("SRM004", b"dev-new")

    assert identity.verify(b"dev-new", "SRM004").matched


def test_enforce_twice_finds_nothing_the_second_time(engine, index):
    for n in range(5):
        index.enroll(b"x", f"LEFT{n}")

    engine.find_and_purge_ghost_bindings(ENFORCE)
    again = engine.find_and_purge_ghost_bindings(ENFORCE)

    assert again.ghost_count == 0
    assert again.batches == ()


def test_audit_reports_without_deleting(engine, index):
    index.enroll(b"x", "LEFT")

    report = engine.find_and_purge_ghost_bindings()

    assert report.mode == ReconciliationMode.AUDIT
    assert report.ghosts == {"LEFT": ("face-001",)}
    assert report.deleted_count == 0
    assert index.delete_calls == []


def test_deletes_respect_batch_limit(engine, index):
    for n in range(7):
        index.enroll(b"x", f"LEFT{n}")

    report = engine.find_and_purge_ghost_bindings(ENFORCE)

    assert report.deleted_count == 7
    assert [b.batch_no for b in report.batches] == [1, 2, 3, 4]
    assert max(len(call) for call in index.delete_calls) == index.max_batch_delete


def test_throttled_batch_is_retried(engine, index):
    index.enroll(b"x", "LEFT")
    index.throttle_times = 2

    report = engine.find_and_purge_ghost_bindings(ENFORCE)

    assert report.deleted_count == 1
    assert len(index.delete_calls) == 3


def test_failed_batch_does_not_stop_the_others(engine, index):
    for n in range(6):
        index.enroll(b"x", f"LEFT{n}")
    index.poisoned = {"face-003"}

    report = engine.find_and_purge_ghost_bindings(ENFORCE)

    assert len(report.failed_batches) == 1
    assert report.failed_batches[0].binding_ids == ("face-003", "face-004")
    assert report.deleted_count == 4
    assert sorted(index.external_ids()) == ["LEFT2", "LEFT3"]
    assert report.as_dict()["batches"][1]["error"]


def test_empty_directory_refuses_to_purge(index, sessions):
    index.enroll(b"x", "SRM001")
    engine = ReconciliationEngine(InMemoryDirectory(), index, sessions)

    assert engine.find_and_purge_ghost_bindings().ghost_count == 1
    with pytest.raises(ReconciliationConflict):
        engine.find_and_purge_ghost_bindings(ENFORCE)
    assert index.external_ids() == ["SRM001"]


def test_chunked_splits_evenly():
    assert list(chunked(["a", "b", "c"], 2)) == [["a", "b"], ["c"]]
    with pytest.raises(ValueError):
        list(chunked(["a"], 0))
