from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import day_key_for, now_local, parse_iso_date
from ..common.request_utils import admin_required, fail
from ..core.enums import ReconciliationMode
from ..core.exceptions import ExternalServiceError, ReconciliationConflict
from ..container import Container


def _mode() -> ReconciliationMode:
    return ReconciliationMode(request.args.get("mode", ReconciliationMode.AUDIT.value).lower())


def register(app: Flask, container: Container) -> None:
    engine = container.reconciliation_engine

    @app.route("/api/reconciliation/ghost-bindings", methods=["POST"], endpoint="reconcile_ghosts")
    @admin_required
    def ghosts():
        try:
            report = engine.find_and_purge_ghost_bindings(_mode())
        except ValueError:
            return fail("VALIDATION_ERROR", "mode must be 'audit' or 'enforce'", 400)
        except ReconciliationConflict as e:
            return fail("RECONCILIATION_CONFLICT", str(e), 409)
        except ExternalServiceError:
            return fail("SERVICE_UNAVAILABLE", "The system is unavailable, please try again", 503)
        return jsonify({"success": not report.failed_batches, "report": report.as_dict()}), 200

    @app.route("/api/reconciliation/open-sessions", methods=["POST"], endpoint="reconcile_sessions")
    @admin_required
    def open_sessions():
        try:
            day = request.args.get("day")
            day_key = day_key_for(parse_iso_date(day)) if day else day_key_for(now_local())
            report = engine.find_and_resolve_duplicate_open_sessions(day_key, _mode())
        except ValueError:
            return fail("VALIDATION_ERROR", "day must be YYYY-MM-DD and mode 'audit' or 'enforce'", 400)
        except ExternalServiceError:
            return fail("SERVICE_UNAVAILABLE", "The system is unavailable, please try again", 503)
        return jsonify({"success": True, "report": report.as_dict()}), 200
