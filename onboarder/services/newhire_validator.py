"""
New-hire submission validation.

Checks run in a fixed order and stop at the first failure, so the caller
surfaces one corrective message at a time:

    1. first and last name non-blank             → empty-name
    2. department non-blank                      → empty-department
    3. start date fields form a real date        → invalid-date
    4. start date strictly in the future         → past-date
    5. default tracker project configured        → missing-project-config
    6. hiring manager configured                 → missing-manager-config
    7. at least one task defined                 → no-tasks-defined
    8. at least one role defined                 → no-roles-defined

Validation only reads the store; it has no side effects.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime

from onboarder.core.exceptions import ValidationError
from onboarder.models.onboarding import CONFIG_DEFAULT_PROJECT, CONFIG_HIRING_MANAGER

logger = logging.getLogger(__name__)


class NewHireErrors:
    """Stable validation codes."""

    EMPTY_NAME = "empty-name"
    EMPTY_DEPARTMENT = "empty-department"
    INVALID_DATE = "invalid-date"
    PAST_DATE = "past-date"
    MISSING_PROJECT_CONFIG = "missing-project-config"
    MISSING_MANAGER_CONFIG = "missing-manager-config"
    NO_TASKS_DEFINED = "no-tasks-defined"
    NO_ROLES_DEFINED = "no-roles-defined"


MESSAGES: dict[str, str] = {
    NewHireErrors.EMPTY_NAME: "Sorry, please provide both a first and a last name.",
    NewHireErrors.EMPTY_DEPARTMENT: "Sorry, please choose a department.",
    NewHireErrors.INVALID_DATE: "Sorry, please provide a valid start date.",
    NewHireErrors.PAST_DATE: "Sorry, the start date must be in the future.",
    NewHireErrors.MISSING_PROJECT_CONFIG: "Sorry, please define the issue tracker project.",
    NewHireErrors.MISSING_MANAGER_CONFIG: "Sorry, please define the hiring manager.",
    NewHireErrors.NO_TASKS_DEFINED: "Sorry, please define at least one task.",
    NewHireErrors.NO_ROLES_DEFINED: "Sorry, please define at least one role.",
}


@dataclass
class Attachment:
    filename: str
    content: bytes
    content_type: str | None = None


@dataclass
class NewHireRequest:
    """One new-hire submission. Date parts arrive as raw form strings."""

    first_name: str
    last_name: str
    department: str
    start_year: str
    start_month: str
    start_day: str
    attachments: list[Attachment] = field(default_factory=list)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


def is_blank(value) -> bool:
    return value is None or not str(value).strip()


def _fail(code: str):
    logger.info("New-hire submission rejected: %s", code)
    raise ValidationError(MESSAGES[code], code=code)


def parse_start_date(year, month, day) -> date:
    """Build a date from raw parts; ValueError on anything non-numeric or out of range."""
    parts = [str(p).strip() for p in (year, month, day)]
    # int() alone would also take "+7", "2_030" and other non-ASCII digits
    if not all(p.isascii() and p.isdigit() for p in parts):
        raise ValueError(f"invalid start date {year!r}-{month!r}-{day!r}")
    try:
        return date(*(int(p) for p in parts))
    except (ValueError, OverflowError) as exc:
        raise ValueError(f"invalid start date {year!r}-{month!r}-{day!r}") from exc


def validate_new_hire(store, request: NewHireRequest, now: datetime | None = None) -> date:
    """Validate ``request`` and return its start date.

    Raises:
        ValidationError: with ``code`` set to one of ``NewHireErrors``.
    """
    if is_blank(request.first_name) or is_blank(request.last_name):
        _fail(NewHireErrors.EMPTY_NAME)

    if is_blank(request.department):
        _fail(NewHireErrors.EMPTY_DEPARTMENT)

    parts = (request.start_year, request.start_month, request.start_day)
    if any(is_blank(p) for p in parts):
        _fail(NewHireErrors.INVALID_DATE)
    try:
        start_date = parse_start_date(*parts)
    except ValueError:
        _fail(NewHireErrors.INVALID_DATE)

    now = now or datetime.now()
    # the start date counts from local midnight of that day
    if datetime.combine(start_date, datetime.min.time()) <= now:
        _fail(NewHireErrors.PAST_DATE)

    settings = store.read("config")
    if is_blank(settings.get(CONFIG_DEFAULT_PROJECT)):
        _fail(NewHireErrors.MISSING_PROJECT_CONFIG)
    if is_blank(settings.get(CONFIG_HIRING_MANAGER)):
        _fail(NewHireErrors.MISSING_MANAGER_CONFIG)

    if not store.read("tasks"):
        _fail(NewHireErrors.NO_TASKS_DEFINED)
    if not store.read("roles"):
        _fail(NewHireErrors.NO_ROLES_DEFINED)

    return start_date
