"""Run a reconciliation routine once, by hand.

    python scripts/reconcile.py ghosts [--enforce]
    python scripts/reconcile.py sessions [--day YYYY-MM-DD] [--enforce]

Without --enforce nothing is deleted; the report shows what would be.
"""

from __future__ import annotations

import argparse
import importlib
import json
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.presence_core.presence_core.common.datetime_utils import day_key_for, now_local, parse_iso_date
from src.presence_core.presence_core.container import build_container_from_settings
from src.presence_core.presence_core.core.enums import ReconciliationMode
from src.presence_core.presence_core.core.exceptions import ReconciliationConflict
from src.presence_core.presence_core.main import configure_logging


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("routine", choices=["ghosts", "sessions"])
    parser.add_argument("--enforce", action="store_true", help="delete what the audit finds")
    parser.add_argument("--day", help="day key for the sessions routine (default: today)")
    args = parser.parse_args(argv)

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    engine = build_container_from_settings(settings).reconciliation_engine
    mode = ReconciliationMode.ENFORCE if args.enforce else ReconciliationMode.AUDIT

    try:
        if args.routine == "ghosts":
            report = engine.find_and_purge_ghost_bindings(mode)
            failed = bool(report.failed_batches)
        else:
            day_key = day_key_for(parse_iso_date(args.day)) if args.day else day_key_for(now_local())
            report = engine.find_and_resolve_duplicate_open_sessions(day_key, mode)
            failed = bool(report.conflicts)
    except ReconciliationConflict as exc:
        logging.getLogger(__name__).error("Manual review needed: %s", exc)
        return 2

    print(json.dumps(report.as_dict(), indent=2))
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
