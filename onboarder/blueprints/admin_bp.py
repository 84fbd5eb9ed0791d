"""
Administration blueprint — roles, tasks, departments, task table, config.

Endpoints:
    GET    /api/v1/roles                 — list roles
    POST   /api/v1/roles                 — assign (create/replace) a role
    DELETE /api/v1/roles/<name>          — remove a role (409 while tasks use it)
    GET    /api/v1/tasks                 — list tasks
    POST   /api/v1/tasks                 — add (create/replace) a task
    DELETE /api/v1/tasks/<subject>       — remove a task
    GET    /api/v1/departments           — list departments
    POST   /api/v1/departments           — add a department (409 if it exists)
    DELETE /api/v1/departments/<name>    — remove a department
    GET    /api/v1/tasktable             — {department: [subjects]}
    PUT    /api/v1/tasktable             — rebuild every department's task list
    GET    /api/v1/config                — tracker project + hiring manager
    PUT    /api/v1/config                — update them
    GET    /api/v1/tracker/users         — users known to the issue tracker
    GET    /api/v1/tracker/projects      — projects known to the issue tracker

Layer contract:
    - No store calls here — all work delegated to admin_service / resolver.
"""

import logging

from flask import Blueprint, jsonify, request

from onboarder.blueprints import get_gateway, get_store, register_error_handlers
from onboarder.services import admin_service, resolver
from onboarder.utils.errors import E, api_error

logger = logging.getLogger(__name__)

admin_bp = Blueprint("admin", __name__, url_prefix="/api/v1")
register_error_handlers(admin_bp)


def _json() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


# ── Roles ────────────────────────────────────────────────────────────────────


@admin_bp.route("/roles", methods=["GET"])
def list_roles():
    return jsonify(admin_service.list_roles(get_store())), 200


@admin_bp.route("/roles", methods=["POST"])
def assign_role():
    data = _json()
    role = admin_service.assign_role(get_store(), data.get("name", ""), data.get("user", ""))
    return jsonify(role), 201


@admin_bp.route("/roles/<path:name>", methods=["DELETE"])
def remove_role(name):
    admin_service.remove_role(get_store(), name)
    return jsonify({"message": f"Successfully removed the {name!r} role."}), 200


# ── Tasks ────────────────────────────────────────────────────────────────────


@admin_bp.route("/tasks", methods=["GET"])
def list_tasks():
    return jsonify(admin_service.list_tasks(get_store())), 200


@admin_bp.route("/tasks", methods=["POST"])
def add_task():
    data = _json()
    task = admin_service.add_task(
        get_store(),
        data.get("subject", ""),
        data.get("role", ""),
        data.get("long_description", ""),
    )
    return jsonify(task), 201


@admin_bp.route("/tasks/<path:subject>", methods=["DELETE"])
def remove_task(subject):
    if not admin_service.remove_task(get_store(), subject):
        return api_error(E.NOT_FOUND, f"Task {subject!r} not found")
    return jsonify({"message": f"Successfully removed task {subject!r}."}), 200


# ── Departments ──────────────────────────────────────────────────────────────


@admin_bp.route("/departments", methods=["GET"])
def list_departments():
    return jsonify(admin_service.list_departments(get_store())), 200


@admin_bp.route("/departments", methods=["POST"])
def add_department():
    department = admin_service.add_department(get_store(), _json().get("name", ""))
    return jsonify(department), 201


@admin_bp.route("/departments/<path:name>", methods=["DELETE"])
def remove_department(name):
    admin_service.remove_department(get_store(), name)
    return jsonify({"message": f"Successfully removed department {name!r}."}), 200


# ── Task table ───────────────────────────────────────────────────────────────


@admin_bp.route("/tasktable", methods=["GET"])
def get_task_table():
    return jsonify(resolver.task_table(get_store())), 200


@admin_bp.route("/tasktable", methods=["PUT"])
def update_task_table():
    """Body: {"entries": [[department, subject], ...]} or {"keys": ["dept-subject", ...]}."""
    data = _json()
    pairs = [tuple(p) for p in data.get("entries") or [] if isinstance(p, (list, tuple)) and len(p) == 2]
    pairs += [k for k in data.get("keys") or [] if isinstance(k, str)]
    table = admin_service.update_task_table(get_store(), pairs)
    return jsonify(table), 200


# ── Configuration ────────────────────────────────────────────────────────────


@admin_bp.route("/config", methods=["GET"])
def get_config():
    return jsonify(admin_service.get_config(get_store())), 200


@admin_bp.route("/config", methods=["PUT"])
def update_config():
    data = _json()
    settings = admin_service.update_config(
        get_store(),
        data.get("default_issue_tracker_project"),
        data.get("hiring_manager"),
    )
    return jsonify(settings), 200


# ── Issue tracker lookups ────────────────────────────────────────────────────


@admin_bp.route("/tracker/users", methods=["GET"])
def tracker_users():
    users = get_gateway().list_users()
    return jsonify([
        {k: u.get(k) for k in ("id", "login", "firstname", "lastname")} for u in users
    ]), 200


@admin_bp.route("/tracker/projects", methods=["GET"])
def tracker_projects():
    projects = get_gateway().list_projects()
    return jsonify({
        "server_uri": get_gateway().server_uri(),
        "projects": [{k: p.get(k) for k in ("id", "identifier", "name")} for p in projects],
    }), 200
