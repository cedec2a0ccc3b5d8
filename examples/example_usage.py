"""Example: drive the service layer directly, without Flask.

Prints today's attendance status for one employee and an audit of ghost
bindings in the identity index.
"""

import importlib
import json
import sys

from config import get_settings_module

from src.presence_core.presence_core.attendance.controller import status_to_dict
from src.presence_core.presence_core.container import build_container_from_settings


def main(employee_id: str = "SRM001"):
    settings = importlib.import_module(get_settings_module())
    container = build_container_from_settings(settings)

    status = container.session_manager.get_status(employee_id)
    print(json.dumps(status_to_dict(status), indent=2))

    report = container.reconciliation_engine.find_and_purge_ghost_bindings()
    print(json.dumps(report.as_dict(), indent=2))


if __name__ == "__main__":
    main(*sys.argv[1:2])
