"""
Tests: New-hire validation.

The checks run in a fixed order and stop at the first failure; each
failure carries a stable code.
"""

from datetime import datetime

import pytest

from onboarder.core.exceptions import ValidationError
from onboarder.models.onboarding import Role, Task
from onboarder.services.newhire_validator import NewHireErrors, NewHireRequest, validate_new_hire

NOW = datetime(2030, 6, 15, 9, 30)


def _request(**overrides) -> NewHireRequest:
    fields = dict(
        first_name="Ada",
        last_name="Lovelace",
        department="Engineering",
        start_year="2030",
        start_month="7",
        start_day="1",
    )
    fields.update(overrides)
    return NewHireRequest(**fields)


def _code(store, request) -> str:
    with pytest.raises(ValidationError) as exc_info:
        validate_new_hire(store, request, now=NOW)
    return exc_info.value.code


def test_valid_request_returns_start_date(seeded) -> None:
    assert validate_new_hire(seeded, _request(), now=NOW).isoformat() == "2030-07-01"


@pytest.mark.parametrize("overrides", [
    {"first_name": ""},
    {"last_name": "   "},
    {"first_name": None},
    {"first_name": "\t", "department": ""},
])
def test_blank_names_rejected_first(seeded, overrides) -> None:
    assert _code(seeded, _request(**overrides)) == NewHireErrors.EMPTY_NAME


def test_blank_department_rejected(seeded) -> None:
    assert _code(seeded, _request(department="  ", start_day="")) == NewHireErrors.EMPTY_DEPARTMENT


@pytest.mark.parametrize("year,month,day", [
    ("", "7", "1"),
    ("2030", " ", "1"),
    ("abc", "7", "1"),
    ("2030", "13", "1"),
    ("2030", "2", "30"),
    ("2030", "7", "1.5"),
    ("0", "1", "1"),
    ("99999999999999999999", "1", "1"),
    ("2_030", "7", "1"),
    ("2030", "+7", "1"),
    ("2030", "7", "-1"),
    (None, "7", "1"),
])
def test_bad_dates_are_invalid_not_crashes(seeded, year, month, day) -> None:
    request = _request(start_year=year, start_month=month, start_day=day)
    assert _code(seeded, request) == NewHireErrors.INVALID_DATE


def test_start_date_equal_to_now_rejected(seeded) -> None:
    midnight = datetime(2030, 7, 1, 0, 0)
    with pytest.raises(ValidationError) as exc_info:
        validate_new_hire(seeded, _request(), now=midnight)
    assert exc_info.value.code == NewHireErrors.PAST_DATE


def test_start_date_today_or_past_rejected(seeded) -> None:
    assert _code(seeded, _request(start_month="6", start_day="15")) == NewHireErrors.PAST_DATE
    assert _code(seeded, _request(start_year="2029")) == NewHireErrors.PAST_DATE


def test_start_date_tomorrow_accepted(seeded) -> None:
    assert validate_new_hire(seeded, _request(start_month="6", start_day="16"), now=NOW)


def test_missing_project_config(seeded) -> None:
    seeded.write_transaction(lambda txn: txn.config.__setitem__("default_issue_tracker_project", " "))
    assert _code(seeded, _request()) == NewHireErrors.MISSING_PROJECT_CONFIG


def test_missing_manager_config(seeded) -> None:
    seeded.write_transaction(lambda txn: txn.config.__setitem__("hiring_manager", None))
    assert _code(seeded, _request()) == NewHireErrors.MISSING_MANAGER_CONFIG


def test_no_tasks_defined(seeded) -> None:
    seeded.write_transaction(lambda txn: txn.tasks.delete("Laptop"))
    assert _code(seeded, _request()) == NewHireErrors.NO_TASKS_DEFINED


def test_no_roles_defined(seeded) -> None:
    seeded.write_transaction(lambda txn: txn.roles.delete("IT"))
    assert _code(seeded, _request()) == NewHireErrors.NO_ROLES_DEFINED


def test_config_checked_before_catalog(store) -> None:
    store.write_transaction(lambda txn: txn.roles.put(Role(name="IT", user="jdoe")))
    store.write_transaction(lambda txn: txn.tasks.put(Task(subject="Laptop", role="IT")))
    assert _code(store, _request()) == NewHireErrors.MISSING_PROJECT_CONFIG
