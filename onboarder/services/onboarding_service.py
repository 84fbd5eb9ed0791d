"""
Onboarding orchestration service.

Business context:
    One submission files one parent ticket ("Onboarding <name>") assigned to
    the hiring manager, plus one child ticket per task of the new hire's
    department, each assigned to the user who holds the task's role.

Sequence (strict order):
    0. validate, then resolve project identifier and user logins to tracker ids
    1. upload every attachment           — any failure aborts, nothing filed
    2. create the parent ticket          — failure aborts, nothing filed
    3. resolve the department's tasks    — empty is fine (parent only)
    4. create one child ticket per task  — best effort:
         * a task whose role (or role user) cannot be resolved is skipped
           and reported; the other children are still filed
         * a tracker failure stops the run; tickets already filed stay,
           the failed task is listed in result.failed and the partial
           result is returned like any other

Nothing is rolled back and no POST is retried. The store lock is never
held across tracker calls.
"""

import logging
import mimetypes
from dataclasses import dataclass, field
from datetime import datetime

from onboarder.core.exceptions import ExternalServiceError, NotFoundError, OrchestrationError
from onboarder.models.onboarding import CONFIG_DEFAULT_PROJECT, CONFIG_HIRING_MANAGER
from onboarder.services.newhire_validator import Attachment, NewHireRequest, validate_new_hire
from onboarder.services.resolver import assignee_for_role, tasks_for_department

logger = logging.getLogger(__name__)


@dataclass
class IssueCreationResult:
    parent_issue_id: int | None = None
    child_issue_ids: list[int] = field(default_factory=list)
    skipped: list[dict] = field(default_factory=list)
    failed: list[dict] = field(default_factory=list)

    @property
    def issue_ids(self) -> list[int]:
        ids = [self.parent_issue_id] if self.parent_issue_id is not None else []
        return ids + list(self.child_issue_ids)

    def to_dict(self) -> dict:
        return {
            "parent_issue_id": self.parent_issue_id,
            "child_issue_ids": list(self.child_issue_ids),
            "skipped": list(self.skipped),
            "failed": list(self.failed),
            "issue_ids": self.issue_ids,
        }


# ── Tracker lookups ──────────────────────────────────────────────────────────


def default_project_id(gateway, identifier: str) -> int:
    """Return the numeric id of the project whose identifier is ``identifier``."""
    for project in gateway.list_projects():
        if project.get("identifier") == identifier:
            return int(project["id"])
    raise NotFoundError(resource="Project", resource_id=identifier)


def user_ids_by_login(gateway) -> dict[str, int]:
    return {u["login"]: int(u["id"]) for u in gateway.list_users() if u.get("login")}


def _user_id(user_ids: dict[str, int], login: str) -> int:
    if login not in user_ids:
        raise NotFoundError(resource="User", resource_id=login)
    return user_ids[login]


# ── Steps ────────────────────────────────────────────────────────────────────


def upload_attachments(gateway, attachments: list[Attachment]) -> list[dict]:
    """Upload each attachment; all-or-nothing.

    Raises:
        OrchestrationError: "<filename>: <tracker message>" on the first failure.
    """
    uploads = []
    for attachment in attachments:
        try:
            token = gateway.post_attachment(attachment.content)
        except ExternalServiceError as exc:
            logger.warning("Attachment upload failed file=%s: %s", attachment.filename, exc)
            raise OrchestrationError(f"{attachment.filename}: {exc}", IssueCreationResult()) from exc
        uploads.append({
            "token": token,
            "filename": attachment.filename,
            "description": "",
            "content_type": attachment.content_type or mimetypes.guess_type(attachment.filename)[0],
        })
    logger.info("Uploaded %d attachment(s)", len(uploads))
    return uploads


def validate_and_submit(
    store,
    gateway,
    request: NewHireRequest,
    now: datetime | None = None,
) -> IssueCreationResult:
    """Validate ``request`` and file its onboarding tickets.

    Returns:
        IssueCreationResult with every ticket actually created. A child
        ticket the tracker refused ends the run early; it is listed in
        ``failed`` and the tickets filed before it are kept.

    Raises:
        ValidationError: the submission is incomplete or the store is not set up.
        NotFoundError: the configured project or hiring manager is unknown to the tracker.
        OrchestrationError: a lookup, upload or the parent ticket failed;
            nothing was filed.
    """
    start_date = validate_new_hire(store, request, now=now)
    due_date = start_date.strftime("%Y-%m-%d")
    full_name = request.full_name
    context = {"new_hire": full_name, "department": request.department}

    settings = store.read("config")
    try:
        project_id = default_project_id(gateway, settings[CONFIG_DEFAULT_PROJECT])
        user_ids = user_ids_by_login(gateway)
    except ExternalServiceError as exc:
        raise OrchestrationError(f"Issue tracker lookup failed: {exc}", IssueCreationResult()) from exc
    manager_id = _user_id(user_ids, settings[CONFIG_HIRING_MANAGER])

    uploads = upload_attachments(gateway, request.attachments)

    result = IssueCreationResult()
    try:
        result.parent_issue_id = gateway.post_issue({
            "project_id": project_id,
            "subject": f"Onboarding {full_name}",
            "description": f"Parent ticket for onboarding {full_name}",
            "assigned_to_id": manager_id,
            "due_date": due_date,
            "uploads": uploads,
        })
    except ExternalServiceError as exc:
        logger.error("Parent ticket for %s failed: %s", full_name, exc, extra=context)
        raise OrchestrationError(f"Onboarding {full_name}: {exc}", result) from exc
    context["parent_issue_id"] = result.parent_issue_id
    logger.info("Parent ticket %s filed for %s", result.parent_issue_id, full_name, extra=context)

    tasks = [(t.subject, t.role, t.long_description or "") for t in
             tasks_for_department(store, request.department)]
    if not tasks:
        logger.info("Department %r has no tasks; parent ticket only", request.department, extra=context)

    for subject, role, long_description in tasks:
        try:
            assignee_id = _user_id(user_ids, assignee_for_role(store, role))
        except NotFoundError as exc:
            logger.warning("Skipping task %r for %s: %s", subject, full_name, exc,
                           extra={**context, "subject": subject})
            result.skipped.append({"subject": subject, "reason": str(exc)})
            continue

        try:
            issue_id = gateway.post_issue({
                "project_id": project_id,
                "subject": f"{full_name} - {subject}",
                "description": long_description,
                "assigned_to_id": assignee_id,
                "parent_issue_id": result.parent_issue_id,
                "due_date": due_date,
            })
        except ExternalServiceError as exc:
            logger.error(
                "Child ticket %r failed after issues %s were filed: %s",
                subject, result.issue_ids, exc, extra={**context, "subject": subject},
            )
            result.failed.append({"subject": subject, "reason": f"{full_name} - {subject}: {exc}"})
            break
        result.child_issue_ids.append(issue_id)
        logger.debug("Child ticket %s filed for %r", issue_id, subject,
                     extra={**context, "subject": subject, "issue_id": issue_id})

    logger.info("Created issues %s for %s", result.issue_ids, full_name, extra=context)
    return result
