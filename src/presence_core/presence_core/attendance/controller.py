from __future__ import annotations

import logging

from flask import Flask, jsonify

from ..common.request_utils import admin_required, fail, payload, read_location, read_sample
from ..core.enums import CheckInType
from ..core.exceptions import (
    AuthorizationError,
    DuplicateSessionError,
    ExternalServiceError,
    NoOpenSessionError,
    NotFoundError,
    OutsideGeofenceError,
    ValidationError,
    VerificationFailedError,
)
from ..container import Container
from .model import AttendanceSession, AttendanceStatusView

logger = logging.getLogger(__name__)


def session_to_dict(s: AttendanceSession) -> dict:
    duration = s.work_duration
    return {
        "session_id": s.session_id,
        "employee_id": s.employee_id,
        "day_key": s.day_key,
        "check_in_time": s.check_in_time.isoformat(),
        "check_out_time": s.check_out_time.isoformat() if s.check_out_time else None,
        "work_duration_minutes": int(duration.total_seconds() // 60) if duration is not None else None,
        "status": s.status.value,
        "is_late": s.is_late,
        "check_in_type": s.check_in_type.value,
        "verification_method": s.verification_method.value,
        "note": s.note,
    }


def status_to_dict(v: AttendanceStatusView) -> dict:
    return {
        "employee_id": v.employee_id,
        "day_key": v.day_key,
        "is_checked_in": v.is_checked_in,
        "check_in_time": v.check_in_time.isoformat() if v.check_in_time else None,
        "check_out_time": v.check_out_time.isoformat() if v.check_out_time else None,
        "work_duration_minutes": int(v.work_duration.total_seconds() // 60) if v.work_duration is not None else None,
        "has_open_session": v.has_open_session,
        "total_minutes_today": v.total_minutes_today,
        "sessions": [session_to_dict(s) for s in v.sessions],
    }


def register(app: Flask, container: Container) -> None:
    manager = container.session_manager

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="attendance_check_in")
    def check_in():
        data = payload()
        try:
            try:
                check_in_type = CheckInType(str(data.get("type") or CheckInType.OFFICE.value).upper())
            except ValueError:
                raise ValidationError("Unknown check-in type") from None
            session = manager.check_in(
                str(data.get("employee_id") or ""),
                read_sample(data),
                read_location(data),
                check_in_type=check_in_type,
            )
        except DuplicateSessionError:
            return fail("ALREADY_CHECKED_IN", "You are already checked in", 409)
        except VerificationFailedError:
            return fail("FACE_NOT_RECOGNIZED", "Your face was not recognized", 403)
        except OutsideGeofenceError as e:
            return fail(
                "OUTSIDE_GEOFENCE", str(e), 403,
                distance=round(e.distance_m), allowed_radius=round(e.allowed_radius_m),
            )
        except AuthorizationError as e:
            return fail("FORBIDDEN", str(e), 403)
        except NotFoundError as e:
            return fail("NOT_FOUND", str(e), 404)
        except ValidationError as e:
            return fail("VALIDATION_ERROR", str(e), 400)
        except ExternalServiceError:
            logger.exception("Check-in failed on an external service")
            return fail("SERVICE_UNAVAILABLE", "The system is unavailable, please try again", 503)
        return jsonify({"success": True, "session": session_to_dict(session)}), 201

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="attendance_check_out")
    def check_out():
        data = payload()
        try:
            session = manager.check_out(str(data.get("employee_id") or ""), read_sample(data), read_location(data))
        except NoOpenSessionError:
            return fail("NO_OPEN_SESSION", "You are not checked in", 409)
        except VerificationFailedError:
            return fail("FACE_NOT_RECOGNIZED", "Your face was not recognized", 403)
        except NotFoundError as e:
            return fail("NOT_FOUND", str(e), 404)
        except ValidationError as e:
            return fail("VALIDATION_ERROR", str(e), 400)
        except ExternalServiceError:
            logger.exception("Check-out failed on an external service")
            return fail("SERVICE_UNAVAILABLE", "The system is unavailable, please try again", 503)
        return jsonify({"success": True, "session": session_to_dict(session)}), 200

    @app.route("/api/attendance/status/<employee_id>", methods=["GET"], endpoint="attendance_status")
    def status(employee_id: str):
        try:
            view = manager.get_status(employee_id)
        except NotFoundError as e:
            return fail("NOT_FOUND", str(e), 404)
        except ExternalServiceError:
            return fail("SERVICE_UNAVAILABLE", "The system is unavailable, please try again", 503)
        return jsonify({"success": True, "status": status_to_dict(view)}), 200

    @app.route(
        "/api/attendance/close-all-sessions/<employee_id>",
        methods=["POST"],
        endpoint="attendance_close_all",
    )
    @admin_required
    def close_all(employee_id: str):
        try:
            closed = manager.close_all_open_sessions(employee_id)
        except NotFoundError as e:
            return fail("NOT_FOUND", str(e), 404)
        except ExternalServiceError:
            return fail("SERVICE_UNAVAILABLE", "The system is unavailable, please try again", 503)
        return jsonify({"success": True, "closed_sessions": closed}), 200
