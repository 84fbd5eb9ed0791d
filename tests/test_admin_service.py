"""
Tests: Administration service — roles, tasks, departments, task table, config.
"""

import pytest

from onboarder.core.exceptions import ConflictError, NotFoundError, ValidationError
from onboarder.services import admin_service as svc


def test_assign_role_replaces_existing(store) -> None:
    svc.assign_role(store, "IT", "jdoe")
    svc.assign_role(store, "IT", "asmith")
    svc.assign_role(store, "IT", "asmith")

    assert svc.list_roles(store) == [{"name": "IT", "user": "asmith"}]


def test_assign_role_rejects_blank_name(store) -> None:
    with pytest.raises(ValidationError) as exc_info:
        svc.assign_role(store, "  ", "jdoe")
    assert exc_info.value.code == "empty-name"
    assert svc.list_roles(store) == []


def test_remove_role_referenced_by_task_is_rejected(store) -> None:
    svc.assign_role(store, "IT", "jdoe")
    svc.add_task(store, "Laptop", "IT", "Order one")

    with pytest.raises(ConflictError) as exc_info:
        svc.remove_role(store, "IT")

    assert "remove all of the tasks" in str(exc_info.value)
    assert svc.list_roles(store) == [{"name": "IT", "user": "jdoe"}]
    assert [t["subject"] for t in svc.list_tasks(store)] == ["Laptop"]


def test_remove_role_after_its_tasks_are_gone(store) -> None:
    svc.assign_role(store, "IT", "jdoe")
    svc.add_task(store, "Laptop", "IT")
    svc.remove_task(store, "Laptop")

    svc.remove_role(store, "IT")
    assert svc.list_roles(store) == []


def test_add_task_replaces_and_validates(store) -> None:
    svc.add_task(store, "Laptop", "IT", "old")
    svc.add_task(store, "Laptop", "Facilities", "new")

    assert svc.list_tasks(store) == [
        {"subject": "Laptop", "role": "Facilities", "long_description": "new"},
    ]
    with pytest.raises(ValidationError):
        svc.add_task(store, "Badge", " ")


def test_remove_task_keeps_department_membership(store) -> None:
    svc.add_task(store, "Laptop", "IT")
    svc.add_department(store, "Engineering")
    svc.update_task_table(store, [("Engineering", "Laptop")])

    assert svc.remove_task(store, "Laptop") is True
    assert svc.remove_task(store, "Laptop") is False
    assert svc.list_departments(store) == [{"name": "Engineering", "tasks": ["Laptop"]}]


def test_add_department_twice_is_a_conflict(store) -> None:
    svc.add_department(store, "Engineering")

    with pytest.raises(ConflictError):
        svc.add_department(store, "Engineering")
    assert svc.list_departments(store) == [{"name": "Engineering", "tasks": []}]


def test_remove_department_guarded_by_live_tasks(store) -> None:
    svc.add_task(store, "Laptop", "IT")
    svc.add_department(store, "Engineering")
    svc.update_task_table(store, [("Engineering", "Laptop")])

    with pytest.raises(ConflictError):
        svc.remove_department(store, "Engineering")

    svc.remove_task(store, "Laptop")
    svc.remove_department(store, "Engineering")
    assert svc.list_departments(store) == []

    with pytest.raises(NotFoundError):
        svc.remove_department(store, "Engineering")


def test_update_task_table_rebuilds_every_department(store) -> None:
    svc.add_department(store, "Engineering")
    svc.add_department(store, "Sales")
    svc.update_task_table(store, [("Engineering", "Laptop"), ("Sales", "CRM")])

    table = svc.update_task_table(store, [
        "Engineering-VPN",
        ("Engineering", "Laptop"),
        ("Marketing", "Brand book"),
        "no separator",
        "Sales-Phone-Headset",
    ])

    assert table == {"Engineering": ["VPN", "Laptop"], "Sales": ["Phone-Headset"]}
    assert svc.list_departments(store) == [
        {"name": "Engineering", "tasks": ["VPN", "Laptop"]},
        {"name": "Sales", "tasks": ["Phone-Headset"]},
    ]


def test_update_config(store) -> None:
    assert svc.get_config(store) == {
        "default_issue_tracker_project": None,
        "hiring_manager": None,
    }

    settings = svc.update_config(store, "onboarding", "boss")

    assert settings == {"default_issue_tracker_project": "onboarding", "hiring_manager": "boss"}
    assert store.config("hiring_manager") == "boss"
