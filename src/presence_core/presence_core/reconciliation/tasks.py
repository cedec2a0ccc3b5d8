"""Celery jobs wrapping the reconciliation routines.

Bulk employee removals should enqueue `run_ghost_reconciliation.delay("enforce")`
in addition to the periodic beat schedule.
"""

from __future__ import annotations

import importlib
import logging
from typing import Optional

from celery import shared_task

from config import get_settings_module

from ..common.datetime_utils import day_key_for, now_local
from ..container import Container, build_container_from_settings
from ..core.enums import ReconciliationMode
from ..core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

_container: Optional[Container] = None


def get_container() -> Container:
    global _container
    if _container is None:
        _container = build_container_from_settings(importlib.import_module(get_settings_module()))
    return _container


@shared_task(
    name="presence_core.reconciliation.run_ghost_reconciliation",
    autoretry_for=(ExternalServiceError,),
    retry_backoff=True,
    max_retries=3,
)
def run_ghost_reconciliation(mode: str = ReconciliationMode.AUDIT.value) -> dict:
    report = get_container().reconciliation_engine.find_and_purge_ghost_bindings(ReconciliationMode(mode))
    if report.failed_batches:
        logger.error("Ghost reconciliation finished with %d failed batches", len(report.failed_batches))
    return report.as_dict()


@shared_task(
    name="presence_core.reconciliation.run_duplicate_session_reconciliation",
    autoretry_for=(ExternalServiceError,),
    retry_backoff=True,
    max_retries=3,
)
def run_duplicate_session_reconciliation(
    day_key: Optional[str] = None, mode: str = ReconciliationMode.AUDIT.value
) -> dict:
    day_key = day_key or day_key_for(now_local())
    report = get_container().reconciliation_engine.find_and_resolve_duplicate_open_sessions(
        day_key, ReconciliationMode(mode)
    )
    return report.as_dict()
