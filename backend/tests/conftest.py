"""
Shared fixtures: in-memory SQLite database, controllable OTP clock,
recording notifier, and a TestClient wired to them via dependency overrides.
"""

import os
import uuid
from datetime import datetime, timedelta, timezone

# Must be set before coaching.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from coaching.core.database import Base
from coaching.core.deps import get_db, get_notifier, get_otp_ledger
from coaching.core.security import create_access_token
from coaching.main import app
from coaching.models.course import Course
from coaching.models.user import User, UserRole
from coaching.services.otp import OtpLedger


class FakeClock:
    def __init__(self):
        self.now = datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class RecordingLedger(OtpLedger):
    """Keeps the last code issued per identifier so tests can play the user."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.issued = {}

    def issue(self, identifier: str, code=None) -> str:
        code = super().issue(identifier, code)
        self.issued[identifier] = code
        return code


class FakeNotifier:
    def __init__(self, deliver: bool = True):
        self.deliver = deliver
        self.outbox = []

    def send(self, destination: str, subject: str, body: str) -> bool:
        self.outbox.append((destination, subject, body))
        return self.deliver


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ledger(clock):
    return RecordingLedger(ttl=timedelta(minutes=5), clock=clock)


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def client(session_factory, ledger, notifier):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_otp_ledger] = lambda: ledger
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_user(db, role=UserRole.STUDENT, **fields) -> User:
    suffix = uuid.uuid4().hex[:8]
    user = User(
        id=str(uuid.uuid4()),
        name=fields.get("name", f"User {suffix}"),
        email=fields.get("email", f"{suffix}@test.com"),
        phone=fields.get("phone", f"+91{int(suffix, 16) % 10**10:010d}"),
        password=fields.get("password", "secret"),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_course(db, **fields) -> Course:
    course = Course(
        id=fields.get("id", str(uuid.uuid4())),
        title=fields.get("title", "Algebra Basics"),
        description=fields.get("description", "Weekly live session"),
        date=fields.get("date", datetime(2026, 2, 1, 10, 0, tzinfo=timezone.utc)),
        meet_link=fields.get("meet_link", "https://meet.example.com/abc"),
        instructor_name=fields.get("instructor_name", "Dr. Rao"),
        price=fields.get("price", 10.0),
        duration=fields.get("duration", "4 weeks"),
    )
    db.add(course)
    db.commit()
    db.refresh(course)
    return course


def auth_headers(user: User) -> dict:
    token = create_access_token(subject=user.id, extra_claims={"role": user.role.value})
    return {"Authorization": f"Bearer {token}"}
