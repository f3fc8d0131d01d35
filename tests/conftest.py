"""Shared fixtures for the request hub test suite."""

import os
import sys
from datetime import datetime, timedelta
from pathlib import Path
from types import SimpleNamespace

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

# Point the app at an in-memory database before config.py is imported.
os.environ["MRH_ENV"] = "testing"
os.environ["MRH_DATABASE_URI"] = "sqlite:///:memory:"
os.environ["MRH_SECRET_KEY"] = "test-secret"
os.environ["MRH_ADMIN_USERNAME"] = "admin"
os.environ["MRH_ADMIN_PASSWORD"] = "s3cret"
os.environ["MRH_EMAIL_ENDPOINT"] = ""

from errors import TransportError  # noqa: E402
from models import Employee, Request, TaskStatus, TaskType, db  # noqa: E402

ADMIN_LOGIN = {"username": "admin", "password": "s3cret"}

# Wednesday; the week runs Mon 2026-10-19 .. Sun 2026-10-25
NOW = datetime(2026, 10, 21, 15, 30)


class FakeTransport:
    """Records sent messages; raises TransportError when `fail` is set."""

    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []

    def send(self, message):
        if self.fail:
            raise TransportError("Email endpoint returned 500", {"error": "Failed to send email"})
        self.sent.append(message)
        return f"msg-{len(self.sent)}"


# ── Plain objects for the pure filtering functions ───────────────────

def make_employee(name="Alice Smith", code="2025-001", branch="Marketing Department",
                  email="alice@company.com"):
    return SimpleNamespace(full_name=name, employee_id=code, branch=branch, email=email)


def make_req(task_id="MR-2026-00001", employee=None, task_type="poster_layout",
             description="Poster for the product launch", date_requested=NOW,
             deadline=None, status="pending", notes=None):
    return SimpleNamespace(
        task_id=task_id,
        employee=employee or make_employee(),
        task_type=task_type,
        task_description=description,
        date_requested=date_requested,
        target_completion_date=deadline or date_requested + timedelta(days=7),
        status=status,
        notes=notes,
    )


@pytest.fixture
def sample_requests():
    """A mixed snapshot spread over this week, this month, this year and last year."""
    bob = make_employee("Bob Reyes", "2024-117", "Finance", None)
    carla = make_employee("carla ALICEA", "2023-450", "HR Branch", "carla@company.com")
    return [
        make_req("MR-2026-00001", date_requested=datetime(2026, 10, 19, 0, 0)),
        make_req("MR-2026-00002", bob, "video_editing", "Edit the onboarding video",
                 datetime(2026, 10, 25, 23, 59, 59), status="in_progress"),
        make_req("MR-2026-00003", carla, "social_media_content", "Facebook post for HR week",
                 datetime(2026, 10, 2, 9, 0), status="completed", notes="Urgency: Urgent"),
        make_req("MR-2026-00004", bob, "tarpaulin_design", "Tarpaulin for the sports fest",
                 datetime(2026, 3, 14, 11, 0), status="cancelled"),
        make_req("MR-2025-00005", carla, "other", "Certificates for the seminar",
                 datetime(2025, 12, 31, 23, 59), status="pending"),
        make_req("MR-2026-00006", date_requested=datetime(2026, 10, 18, 23, 59, 59),
                 task_type="poster_layout", status="completed"),
    ]


# ── App / database ───────────────────────────────────────────────────

@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def app(tmp_path, transport):
    from app import app as flask_app

    flask_app.config.update(
        TESTING=True,
        UPLOAD_FOLDER=str(tmp_path / "uploads"),
        EMAIL_TRANSPORT=transport,
        SERVER_NAME="localhost",
    )
    with flask_app.app_context():
        db.create_all()
        yield flask_app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(client):
    client.post("/admin/login", data=ADMIN_LOGIN)
    return client


@pytest.fixture
def employee(app):
    emp = Employee(employee_id="2025-322", full_name="Juan Dela Cruz",
                   branch="Marketing Department", email="juan@company.com")
    db.session.add(emp)
    db.session.commit()
    return emp


@pytest.fixture
def create_request(app, employee):
    """Factory inserting a request straight into the database."""
    from store import make_task_id

    def _create(date_requested=None, status=TaskStatus.PENDING, task_type=TaskType.POSTER_LAYOUT,
                description="Poster for the product launch", owner=None, notes=None):
        date_requested = date_requested or datetime.now()
        req = Request(
            employee_pk=(owner or employee).id,
            task_type=task_type.value,
            task_description=description,
            date_requested=date_requested,
            target_completion_date=date_requested + timedelta(days=7),
            status=status.value,
            notes=notes,
        )
        db.session.add(req)
        db.session.flush()
        req.task_id = make_task_id(req.id, date_requested)
        db.session.commit()
        return req

    return _create
