"""
Tests: Role / Task resolver.
"""

import pytest

from onboarder.core.exceptions import NotFoundError
from onboarder.models.onboarding import Role, Task, TaskMap
from onboarder.services import resolver


@pytest.fixture()
def catalog(store):
    def _seed(txn):
        txn.roles.put(Role(name="IT", user="jdoe"))
        txn.roles.put(Role(name="Facilities", user="asmith"))
        for subject, role in (("Laptop", "IT"), ("Desk", "Facilities"), ("VPN", "IT")):
            txn.tasks.put(Task(subject=subject, role=role))
        txn.taskmaps.put(TaskMap(name="Engineering", tasks=["VPN", "Desk", "Laptop"]))
        txn.taskmaps.put(TaskMap(name="Support", tasks=["Ghost", "Desk", "Removed"]))
        txn.taskmaps.put(TaskMap(name="Interns", tasks=[]))

    store.write_transaction(_seed)
    return store


def test_tasks_follow_taskmap_order(catalog) -> None:
    tasks = resolver.tasks_for_department(catalog, "Engineering")
    assert [t.subject for t in tasks] == ["VPN", "Desk", "Laptop"]


def test_unknown_subjects_are_skipped(catalog) -> None:
    tasks = resolver.tasks_for_department(catalog, "Support")
    assert [t.subject for t in tasks] == ["Desk"]


def test_deleted_task_leaves_dangling_membership(catalog) -> None:
    catalog.write_transaction(lambda txn: txn.tasks.delete("Desk"))

    assert [t.subject for t in resolver.tasks_for_department(catalog, "Engineering")] == ["VPN", "Laptop"]
    assert resolver.task_table(catalog)["Engineering"] == ["VPN", "Desk", "Laptop"]


@pytest.mark.parametrize("department", ["Interns", "Sales", ""])
def test_empty_or_unknown_department_yields_nothing(catalog, department) -> None:
    assert resolver.tasks_for_department(catalog, department) == []


def test_assignee_for_role(catalog) -> None:
    assert resolver.assignee_for_role(catalog, "Facilities") == "asmith"


def test_assignee_for_missing_role_raises(catalog) -> None:
    with pytest.raises(NotFoundError) as exc_info:
        resolver.assignee_for_role(catalog, "Legal")
    assert exc_info.value.resource == "Role"
    assert exc_info.value.resource_id == "Legal"


def test_task_table_lists_every_department(catalog) -> None:
    assert resolver.task_table(catalog) == {
        "Engineering": ["VPN", "Desk", "Laptop"],
        "Interns": [],
        "Support": ["Ghost", "Desk", "Removed"],
    }
