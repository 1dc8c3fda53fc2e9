from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.serialization import to_jsonable
from ..core.exceptions import DomainError, NotFoundError, ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    """JSON operator endpoints over the inactivity engine (trusted internal callers)."""

    @app.errorhandler(NotFoundError)
    def handle_not_found(e):
        return jsonify({"success": False, "message": str(e)}), 404

    @app.errorhandler(ValidationError)
    def handle_validation(e):
        return jsonify({"success": False, "message": str(e)}), 400

    @app.errorhandler(DomainError)
    def handle_domain(e):
        return jsonify({"success": False, "message": str(e)}), 500

    def _optional_int(value, field_name: str):
        if value is None or value == "":
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ValidationError(f"{field_name} must be an integer")

    @app.route("/api/inactivity/sweep", methods=["POST"], endpoint="inactivity_sweep")
    def run_sweep():
        outcome = container.scheduler.run_sweep_now()
        return jsonify(to_jsonable(outcome)), 200 if outcome.success else 503

    @app.route("/api/inactivity/notify", methods=["POST"], endpoint="inactivity_notify")
    def run_notify():
        data = request.get_json(silent=True) or {}
        tenant_id = _optional_int(data.get("tenant_id", request.args.get("tenant_id")), "tenant_id")
        if tenant_id is not None:
            # Single-branch runs are ad-hoc checks and bypass the job registry.
            report = container.notifier.notify_at_risk(tenant_id)
            return jsonify({"success": True, "result": report.to_dict()})
        outcome = container.scheduler.run_notifier_now()
        return jsonify(to_jsonable(outcome)), 200 if outcome.success else 503

    @app.route("/api/inactivity/at-risk/<int:tenant_id>", methods=["GET"], endpoint="inactivity_at_risk")
    def list_at_risk(tenant_id: int):
        students = container.notifier.list_students_at_risk(tenant_id)
        return jsonify({"success": True, "count": len(students), "students": to_jsonable(students)})

    @app.route("/api/inactivity/students/<int:student_id>", methods=["GET"], endpoint="inactivity_student_status")
    def student_status(student_id: int):
        report = container.status_service.get_student_inactivity_status(student_id)
        return jsonify({"success": True, "status": report.to_dict()})

    @app.route(
        "/api/inactivity/students/<int:student_id>/attendance-recorded",
        methods=["POST"],
        endpoint="inactivity_attendance_recorded",
    )
    def attendance_recorded(student_id: int):
        data = request.get_json(silent=True) or {}
        tenant_id = _optional_int(data.get("tenant_id"), "tenant_id")
        if tenant_id is None:
            raise ValidationError("tenant_id is required")
        acting = _optional_int(data.get("acting_user_id"), "acting_user_id")
        result = container.reactivation_hook.on_attendance_recorded(student_id, tenant_id, acting)
        return jsonify({"success": True, "result": result.to_dict()})

    @app.route("/api/jobs/health", methods=["GET"], endpoint="jobs_health")
    def jobs_health():
        return jsonify(container.job_registry.health_report().to_dict())

    @app.route("/api/jobs/status", methods=["GET"], endpoint="jobs_status")
    def jobs_status():
        return jsonify(container.scheduler.jobs_status())
