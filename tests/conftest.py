"""Shared test fixtures."""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from app.core.clock import utcnow
from app.core.database import get_session
from app.core.security import create_access_token, hash_answer, hash_password
from app.main import app
from app.models import Checklist, ChecklistType, User
from app.submissions.mailer import get_mailer
from app.submissions.storage import SubmissionStore, get_store

PASSWORD = "correct-horse"


def make_user(session: Session, username: str, is_admin: bool = False, **kwargs) -> User:
    user = User(
        username=username,
        first_name=kwargs.pop("first_name", username.capitalize()),
        last_name=kwargs.pop("last_name", "Tester"),
        password_hash=hash_password(kwargs.pop("password", PASSWORD)),
        security_question_1_id=1,
        security_answer_1_hash=hash_answer("Fluffy"),
        security_question_2_id=3,
        security_answer_2_hash=hash_answer("Central Elementary"),
        is_admin=is_admin,
        **kwargs,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def make_checklist(
    session: Session,
    filename: str,
    checklist_type: ChecklistType = ChecklistType.daily,
    order: int = 1,
    last_assigned_at=None,
) -> Checklist:
    checklist = Checklist(
        filename=filename,
        title=filename.removesuffix(".html").replace("_", " "),
        type=checklist_type,
        order=order,
        last_assigned_at=last_assigned_at,
    )
    session.add(checklist)
    session.commit()
    session.refresh(checklist)
    return checklist


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


class RecordingMailer:
    """Stands in for the SMTP mailer and remembers what it was asked to send."""

    def __init__(self, succeed: bool = True):
        self.succeed = succeed
        self.sent = []

    def __call__(self, to_address, checklist_url, filename, title) -> bool:
        self.sent.append(
            {
                "to": to_address,
                "url": checklist_url,
                "filename": filename,
                "title": title,
            }
        )
        return self.succeed


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Create a new database session for each test."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="store")
def store_fixture(tmp_path) -> SubmissionStore:
    """Submission store writing to a per-test temporary directory."""
    return SubmissionStore(tmp_path / "data")


@pytest.fixture(name="mailer")
def mailer_fixture() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture(name="client")
def client_fixture(session: Session, store: SubmissionStore, mailer: RecordingMailer):
    """Create a test client with the test database session and file store."""

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_mailer] = lambda: mailer
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="employee")
def employee_fixture(session: Session) -> User:
    return make_user(session, "worker", first_name="Wendy", last_name="Worker")


@pytest.fixture(name="admin")
def admin_fixture(session: Session) -> User:
    return make_user(session, "boss", is_admin=True, first_name="Sam", last_name="Supervisor")


@pytest.fixture(name="daily_checklists")
def daily_checklists_fixture(session: Session) -> list[Checklist]:
    """Three daily checklists: never assigned, assigned yesterday, assigned last week."""
    now = utcnow()
    return [
        make_checklist(session, "01_Dock_Doors_Daily.html", order=1),
        make_checklist(
            session,
            "02_Break_Room_Daily.html",
            order=2,
            last_assigned_at=now - timedelta(days=1),
        ),
        make_checklist(
            session,
            "03_Restrooms_Daily.html",
            order=3,
            last_assigned_at=now - timedelta(days=7),
        ),
    ]


@pytest.fixture(name="weekly_checklist")
def weekly_checklist_fixture(session: Session) -> Checklist:
    return make_checklist(session, "10_Racking_Weekly.html", ChecklistType.weekly, order=10)
