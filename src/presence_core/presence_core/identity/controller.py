from __future__ import annotations

from flask import Flask, jsonify

from ..common.request_utils import admin_required, fail, payload, read_sample
from ..core.exceptions import AlreadyRegisteredError, ExternalServiceError, NotFoundError, ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    identity = container.identity_service

    @app.route("/api/identity/<employee_id>", methods=["POST"], endpoint="identity_register")
    @admin_required
    def register_identity(employee_id: str):
        try:
            binding_id = identity.register(employee_id, read_sample(payload()))
        except AlreadyRegisteredError as e:
            return fail("ALREADY_REGISTERED", str(e), 409)
        except NotFoundError as e:
            return fail("NOT_FOUND", str(e), 404)
        except ValidationError as e:
            return fail("VALIDATION_ERROR", str(e), 400)
        except ExternalServiceError:
            return fail("SERVICE_UNAVAILABLE", "The system is unavailable, please try again", 503)
        return jsonify({"success": True, "binding_id": binding_id}), 201

    @app.route("/api/identity/<employee_id>/verify", methods=["POST"], endpoint="identity_verify")
    def verify_identity(employee_id: str):
        try:
            result = identity.verify_standalone(employee_id, read_sample(payload()))
        except NotFoundError as e:
            return fail("NOT_FOUND", str(e), 404)
        except ValidationError as e:
            return fail("VALIDATION_ERROR", str(e), 400)
        except ExternalServiceError:
            return fail("SERVICE_UNAVAILABLE", "The system is unavailable, please try again", 503)
        return jsonify({"success": True, "matched": result.matched, "confidence": result.confidence}), 200

    @app.route("/api/identity/<employee_id>", methods=["DELETE"], endpoint="identity_reset")
    @admin_required
    def reset_identity(employee_id: str):
        try:
            removed = identity.reset(employee_id)
        except ValidationError as e:
            return fail("VALIDATION_ERROR", str(e), 400)
        except ExternalServiceError:
            return fail("SERVICE_UNAVAILABLE", "The system is unavailable, please try again", 503)
        return jsonify({"success": True, "removed": removed}), 200
