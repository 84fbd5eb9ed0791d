"""
Shared pytest fixtures for the Onboarder test suite.

Provides:
    - app: Flask application (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client
    - store: the application's Store
    - tracker: in-memory issue tracker installed as the app's gateway
    - seeded: IT role, Laptop task, Engineering department, config set
"""

import itertools

import pytest

from onboarder import create_app
from onboarder.core.exceptions import ExternalServiceError
from onboarder.models import db as _db
from onboarder.models.onboarding import Role, Task, TaskMap


class FakeTracker:
    """Stands in for RedmineGateway; records every call."""

    def __init__(self):
        self.projects = [
            {"id": 7, "identifier": "onboarding", "name": "Onboarding"},
            {"id": 8, "identifier": "ops", "name": "Operations"},
        ]
        self.users = [
            {"id": 1, "login": "boss", "firstname": "Hiring", "lastname": "Manager"},
            {"id": 2, "login": "jdoe", "firstname": "Jane", "lastname": "Doe"},
            {"id": 3, "login": "asmith", "firstname": "Alex", "lastname": "Smith"},
        ]
        self.uploads: list[bytes] = []
        self.issues: list[dict] = []
        self.fail_upload_calls: dict[int, str] = {}
        self.fail_issue_subjects: dict[str, str] = {}
        self._upload_calls = 0
        self._ids = itertools.count(100)

    def server_uri(self):
        return "http://redmine.test"

    def list_projects(self):
        return list(self.projects)

    def list_users(self):
        return list(self.users)

    def post_attachment(self, content):
        self._upload_calls += 1
        if self._upload_calls in self.fail_upload_calls:
            raise ExternalServiceError(self.fail_upload_calls[self._upload_calls], 422)
        self.uploads.append(content)
        return f"token-{self._upload_calls}"

    def post_issue(self, fields):
        subject = fields.get("subject")
        if subject in self.fail_issue_subjects:
            raise ExternalServiceError(self.fail_issue_subjects[subject], 422)
        issue_id = next(self._ids)
        self.issues.append({"id": issue_id, **fields})
        return issue_id


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    return create_app("testing", gateway=FakeTracker())


@pytest.fixture(autouse=True)
def session(app):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture()
def store(app):
    return app.extensions["store"]


@pytest.fixture()
def tracker(app):
    """A fresh FakeTracker installed as the app's gateway for one test."""
    previous = app.extensions["redmine_gateway"]
    fake = FakeTracker()
    app.extensions["redmine_gateway"] = fake
    yield fake
    app.extensions["redmine_gateway"] = previous


# ── Convenience fixtures ─────────────────────────────────────────────────


@pytest.fixture()
def seeded(store):
    """IT role (jdoe), Laptop task, Engineering department, config set."""

    def _seed(txn):
        txn.roles.put(Role(name="IT", user="jdoe"))
        txn.tasks.put(Task(subject="Laptop", role="IT", long_description="Order a laptop"))
        txn.taskmaps.put(TaskMap(name="Engineering", tasks=["Laptop"]))
        txn.config["default_issue_tracker_project"] = "onboarding"
        txn.config["hiring_manager"] = "boss"

    store.write_transaction(_seed)
    return store
