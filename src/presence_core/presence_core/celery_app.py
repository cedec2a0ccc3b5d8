"""Celery application that runs reconciliation on a schedule."""

from __future__ import annotations

import importlib
import os
from datetime import timedelta
from types import ModuleType
from typing import Optional

from celery import Celery
from dotenv import load_dotenv

from config import get_settings_module

from .core.constants import DEFAULT_RECONCILE_EVERY_MINUTES

GHOST_TASK = "presence_core.reconciliation.run_ghost_reconciliation"
SESSIONS_TASK = "presence_core.reconciliation.run_duplicate_session_reconciliation"


def make_celery(settings: Optional[ModuleType] = None) -> Celery:
    load_dotenv(override=False)
    settings = settings or importlib.import_module(get_settings_module())
    celery_conf = getattr(settings, "CELERY", {}) or {}
    reconcile = getattr(settings, "RECONCILIATION", {}) or {}

    app = Celery(
        "presence_core",
        broker=celery_conf.get("broker_url"),
        backend=celery_conf.get("result_backend"),
        include=["presence_core.reconciliation.tasks"],
    )

    every = timedelta(minutes=int(reconcile.get("schedule_minutes", DEFAULT_RECONCILE_EVERY_MINUTES)))
    mode = str(reconcile.get("default_mode", "audit"))
    app.conf.beat_schedule = {
        "reconcile-ghost-bindings": {"task": GHOST_TASK, "schedule": every, "args": (mode,)},
        "reconcile-duplicate-open-sessions": {"task": SESSIONS_TASK, "schedule": every, "args": (None, mode)},
    }

    if os.name == "nt":
        # Windows workers must run in solo mode
        app.conf.worker_pool = "solo"
    return app


app = make_celery()
