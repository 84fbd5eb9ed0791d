"""
Role / Task resolver.

Read-only lookups the orchestrator and the API use to turn a department
name into an ordered task list, and a role name into a tracker login.
"""

import logging

from onboarder.core.exceptions import NotFoundError

logger = logging.getLogger(__name__)


def tasks_for_department(store, department_name: str) -> list:
    """Return the Task records of ``department_name`` in TaskMap order.

    Subjects with no matching Task are dropped. An unknown or empty
    department yields ``[]``.
    """
    taskmap = next(
        (tm for tm in store.read("taskmaps") if tm.name == department_name), None,
    )
    if taskmap is None or not taskmap.tasks:
        return []

    by_subject = {t.subject: t for t in store.read("tasks")}
    resolved = []
    for subject in taskmap.tasks:
        task = by_subject.get(subject)
        if task is None:
            logger.debug("Department %r lists unknown task %r; skipped", department_name, subject)
            continue
        resolved.append(task)
    return resolved


def assignee_for_role(store, role_name: str) -> str:
    """Return the user login assigned to ``role_name``.

    Raises:
        NotFoundError: no role with that name exists.
    """
    role = next((r for r in store.read("roles") if r.name == role_name), None)
    if role is None:
        raise NotFoundError(resource="Role", resource_id=role_name)
    return role.user


def task_table(store) -> dict[str, list[str]]:
    """Return ``{department: [subjects]}`` for every department."""
    return {tm.name: list(tm.tasks or []) for tm in store.read("taskmaps")}
