"""
Onboarder
Organizational data models.

Models:
    - Role: a named accountability mapped to one tracker user login
    - Task: a reusable onboarding work item owned by a Role
    - TaskMap: a department and the ordered subjects of its tasks
    - ConfigSetting: scalar configuration (key → value)

Task.role and TaskMap.tasks reference other records by name only.
No foreign keys: a dangling reference is tolerated and resolved lazily
by the resolver, never cascaded.
"""

from datetime import datetime, timezone

from sqlalchemy.orm import validates

from onboarder.models import db


def _utcnow():
    return datetime.now(timezone.utc)


def _require_text(field: str, value):
    if value is None or not str(value).strip():
        raise ValueError(f"{field} must not be blank")
    return value


# ── Config keys ──────────────────────────────────────────────────────────────

CONFIG_DEFAULT_PROJECT = "default_issue_tracker_project"
CONFIG_HIRING_MANAGER = "hiring_manager"

CONFIG_KEYS = (CONFIG_DEFAULT_PROJECT, CONFIG_HIRING_MANAGER)


class Role(db.Model):
    """Who is accountable for a category of onboarding work."""

    __tablename__ = "roles"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), unique=True, nullable=False, index=True)
    user = db.Column(db.String(200), nullable=False, comment="Tracker user login")
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    @validates("name", "user")
    def _validate_text(self, key, value):
        return _require_text(key, value)

    def to_dict(self):
        return {"name": self.name, "user": self.user}

    def __repr__(self):
        return f"<Role {self.name} → {self.user}>"


class Task(db.Model):
    """A reusable onboarding work item, owned by a role."""

    __tablename__ = "tasks"

    id = db.Column(db.Integer, primary_key=True)
    subject = db.Column(db.String(255), unique=True, nullable=False, index=True)
    role = db.Column(db.String(200), nullable=False, comment="Role.name (no FK)")
    long_description = db.Column(db.Text, default="")
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    @validates("subject", "role")
    def _validate_text(self, key, value):
        return _require_text(key, value)

    @validates("long_description")
    def _validate_description(self, key, value):
        return value or ""

    def to_dict(self):
        return {
            "subject": self.subject,
            "role": self.role,
            "long_description": self.long_description or "",
        }

    def __repr__(self):
        return f"<Task {self.subject[:40]} ({self.role})>"


class TaskMap(db.Model):
    """
    A department (class of employee) and the tasks that apply to it.

    ``tasks`` is an ordered JSON list of Task.subject strings. The list is
    always reassigned, never mutated in place, so the ORM sees the change.
    """

    __tablename__ = "taskmaps"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), unique=True, nullable=False, index=True)
    tasks = db.Column(db.JSON, nullable=False, default=list)

    @validates("name")
    def _validate_name(self, key, value):
        return _require_text(key, value)

    @validates("tasks")
    def _validate_tasks(self, key, value):
        return [str(s) for s in (value or [])]

    def append_task(self, subject: str) -> None:
        self.tasks = [*(self.tasks or []), subject]

    def to_dict(self):
        return {"name": self.name, "tasks": list(self.tasks or [])}

    def __repr__(self):
        return f"<TaskMap {self.name}: {len(self.tasks or [])} tasks>"


class ConfigSetting(db.Model):
    """Scalar configuration value."""

    __tablename__ = "config_settings"

    key = db.Column(db.String(100), primary_key=True)
    value = db.Column(db.Text, nullable=True)

    def __repr__(self):
        return f"<ConfigSetting {self.key}={self.value!r}>"
