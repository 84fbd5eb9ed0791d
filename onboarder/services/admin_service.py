"""
Administration service — operator actions on roles, tasks, departments
and configuration.

Each public function runs as exactly one store transaction, so a failed
guard leaves the store untouched.

Layer contract:
    - Blueprints call these functions; they never touch the store directly.
    - Errors are raised as onboarder.core.exceptions types.
"""

import logging

from onboarder.core.exceptions import ConflictError, NotFoundError, ValidationError
from onboarder.models.onboarding import (
    CONFIG_DEFAULT_PROJECT,
    CONFIG_HIRING_MANAGER,
    CONFIG_KEYS,
    Role,
    Task,
    TaskMap,
)
from onboarder.services.newhire_validator import MESSAGES, NewHireErrors, is_blank

logger = logging.getLogger(__name__)


# ── Reads ────────────────────────────────────────────────────────────────────


def list_roles(store) -> list[dict]:
    return [r.to_dict() for r in store.read("roles")]


def list_tasks(store) -> list[dict]:
    return [t.to_dict() for t in store.read("tasks")]


def list_departments(store) -> list[dict]:
    return [tm.to_dict() for tm in store.read("taskmaps")]


def get_config(store) -> dict:
    settings = store.read("config")
    return {key: settings.get(key) for key in CONFIG_KEYS}


# ── Roles ────────────────────────────────────────────────────────────────────


def assign_role(store, name: str, user: str) -> dict:
    """Create or replace the role ``name``, held by ``user``."""
    if is_blank(name):
        raise ValidationError(MESSAGES[NewHireErrors.EMPTY_NAME], code=NewHireErrors.EMPTY_NAME)
    if is_blank(user):
        raise ValidationError("Sorry, please choose a user for the role.", code="empty-user")

    def _txn(txn):
        return txn.roles.put(Role(name=name, user=user)).to_dict()

    role = store.write_transaction(_txn)
    logger.info("Role %r assigned to %r", name, user)
    return role


def remove_role(store, name: str) -> None:
    """Delete the role ``name``.

    Raises:
        ConflictError: a task still references the role.
    """
    def _txn(txn):
        if any(t.role == name for t in txn.tasks):
            raise ConflictError(
                "Role", "name", name,
                message=f"Please remove all of the tasks assigned to the {name!r} role, first.",
            )
        txn.roles.delete(name)

    store.write_transaction(_txn)
    logger.info("Role %r removed", name)


# ── Tasks ────────────────────────────────────────────────────────────────────


def add_task(store, subject: str, role: str, long_description: str = "") -> dict:
    """Create or replace the task ``subject``."""
    if is_blank(subject):
        raise ValidationError("Sorry, please name the task.", code="empty-subject")
    if is_blank(role):
        raise ValidationError("Sorry, please define a role first.", code="empty-role")

    def _txn(txn):
        task = Task(subject=subject, role=role, long_description=long_description)
        return txn.tasks.put(task).to_dict()

    task = store.write_transaction(_txn)
    logger.info("Task %r added for role %r", subject, role)
    return task


def remove_task(store, subject: str) -> bool:
    """Delete the task ``subject``. Department membership is left as is."""
    removed = store.write_transaction(lambda txn: txn.tasks.delete(subject))
    logger.info("Task %r removed=%s", subject, removed)
    return bool(removed)


# ── Departments (task maps) ──────────────────────────────────────────────────


def add_department(store, name: str) -> dict:
    """Create an empty department.

    Raises:
        ConflictError: the department already exists.
    """
    if is_blank(name):
        raise ValidationError(MESSAGES[NewHireErrors.EMPTY_NAME], code=NewHireErrors.EMPTY_NAME)

    def _txn(txn):
        if name in txn.taskmaps:
            raise ConflictError(
                "Department", "name", name,
                message=f"Sorry, there already is a department {name!r}",
            )
        return txn.taskmaps.put(TaskMap(name=name, tasks=[])).to_dict()

    department = store.write_transaction(_txn)
    logger.info("Department %r added", name)
    return department


def remove_department(store, name: str) -> None:
    """Delete the department ``name``.

    Raises:
        NotFoundError: no such department.
        ConflictError: the department still lists existing tasks.
    """
    def _txn(txn):
        taskmap = txn.taskmaps.get(name)
        if taskmap is None:
            raise NotFoundError(resource="Department", resource_id=name)
        live = [s for s in taskmap.tasks or [] if s in txn.tasks]
        if live:
            raise ConflictError(
                "Department", "name", name,
                message=f"Please remove all of the tasks from the {name!r} department, first.",
            )
        txn.taskmaps.delete(name)

    store.write_transaction(_txn)
    logger.info("Department %r removed", name)


def _split_pair(pair) -> tuple[str, str] | None:
    """Accept (department, subject) or the form-key form "department-subject"."""
    if isinstance(pair, str):
        if "-" not in pair:
            return None
        department, subject = pair.split("-", 1)
        return department, subject
    department, subject = pair
    return department, subject


def update_task_table(store, pairs) -> dict[str, list[str]]:
    """Replace every department's task list.

    All lists are cleared, then each (department, subject) pair is appended
    in input order. Pairs naming an unknown department are ignored.
    """
    def _txn(txn):
        table: dict[str, list[str]] = {tm.name: [] for tm in txn.taskmaps}
        for pair in pairs:
            split = _split_pair(pair)
            if split is None or split[0] not in table:
                continue
            table[split[0]].append(split[1])
        for taskmap in txn.taskmaps:
            taskmap.tasks = table[taskmap.name]
        return table

    table = store.write_transaction(_txn)
    logger.info("Task table updated for %d department(s)", len(table))
    return table


# ── Configuration ────────────────────────────────────────────────────────────


def update_config(store, default_issue_tracker_project: str | None, hiring_manager: str | None) -> dict:
    def _txn(txn):
        txn.config[CONFIG_DEFAULT_PROJECT] = default_issue_tracker_project
        txn.config[CONFIG_HIRING_MANAGER] = hiring_manager

    store.write_transaction(_txn)
    logger.info("Configuration updated")
    return get_config(store)
