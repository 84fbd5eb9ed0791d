"""
New-hire onboarding blueprint.

Endpoints:
    POST /api/v1/newhires                       → validate and file tickets
    GET  /api/v1/departments/<name>/tasks       → tasks that apply to a department

POST /newhires accepts JSON or multipart/form-data; in multipart form,
files under "attachments" are uploaded to the tracker.

Layer contract:
    - No store or HTTP calls here — all work delegated to onboarding_service.
"""

import logging

from flask import Blueprint, jsonify, request

from onboarder.blueprints import get_gateway, get_store, register_error_handlers
from onboarder.services import onboarding_service, resolver
from onboarder.services.newhire_validator import Attachment, NewHireRequest

logger = logging.getLogger(__name__)

onboarding_bp = Blueprint("onboarding", __name__, url_prefix="/api/v1")
register_error_handlers(onboarding_bp)


def _date_parts(data) -> tuple[str, str, str]:
    """Read year/month/day fields, or split an ISO "start_date"."""
    if data.get("start_date"):
        parts = str(data["start_date"]).split("-")
        parts += [""] * (3 - len(parts))
        return parts[0], parts[1], "-".join(parts[2:])
    return data.get("start_year", ""), data.get("start_month", ""), data.get("start_day", "")


def _declared_type(upload) -> str | None:
    """The browser's content type, or None to fall back to the file extension."""
    if not upload.mimetype or upload.mimetype == "application/octet-stream":
        return None
    return upload.mimetype


def _new_hire_from_request() -> NewHireRequest:
    if request.mimetype == "multipart/form-data":
        data = request.form
        attachments = [
            Attachment(filename=f.filename, content=f.read(), content_type=_declared_type(f))
            for f in request.files.getlist("attachments")
            if f and f.filename
        ]
    else:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            data = {}
        attachments = []

    year, month, day = _date_parts(data)
    return NewHireRequest(
        first_name=data.get("first_name", ""),
        last_name=data.get("last_name", ""),
        department=data.get("department", ""),
        start_year=year,
        start_month=month,
        start_day=day,
        attachments=attachments,
    )


@onboarding_bp.route("/newhires", methods=["POST"])
def submit_new_hire():
    """File the parent and child tickets for one new hire."""
    new_hire = _new_hire_from_request()
    result = onboarding_service.validate_and_submit(get_store(), get_gateway(), new_hire)
    body = result.to_dict()
    body["message"] = f"Created issues {result.issue_ids}"
    if result.failed:
        body["message"] += f"; stopped at {result.failed[0]['reason']}"
    return jsonify(body), 201


@onboarding_bp.route("/departments/<path:name>/tasks", methods=["GET"])
def department_tasks(name):
    tasks = resolver.tasks_for_department(get_store(), name)
    return jsonify({"department": name, "tasks": [t.to_dict() for t in tasks]}), 200
