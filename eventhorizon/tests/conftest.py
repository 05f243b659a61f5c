import os
import tempfile

# Point the application at a throwaway SQLite file before anything imports the engine.
_TEST_DB_DIR = tempfile.mkdtemp(prefix="eventhorizon-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_DB_DIR, 'test.db')}"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-with-enough-bytes-for-hs256")
os.environ["CONFIRMATION_DELAY_SECONDS"] = "0"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["PASSWORD_HASH_ITERATIONS"] = "1000"

from datetime import datetime, timedelta, timezone

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session

import eventhorizon.models  # noqa: F401
from eventhorizon.core.security import create_access_token
from eventhorizon.crud.user import create_user, update_user_jti
from eventhorizon.database.db import Base, engine, get_db
from eventhorizon.main import app
from eventhorizon.models.events import Event
from eventhorizon.models.users import User

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Set up and tear down the database for the test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clean_tables():
    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


# Override the database dependency
def override_get_db():
    db: Session = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture
def db_session():
    db: Session = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def fake_redis_server():
    return fakeredis.FakeServer()


@pytest.fixture
def fake_redis(fake_redis_server):
    return fakeredis.FakeRedis(server=fake_redis_server, decode_responses=True)


@pytest.fixture(autouse=True)
def redis_client(monkeypatch: pytest.MonkeyPatch, fake_redis_server):
    """Route the event lock to an in-process Redis shared by every thread in the test."""

    def _client():
        return fakeredis.FakeRedis(server=fake_redis_server, decode_responses=True)

    monkeypatch.setattr("eventhorizon.services.locking.get_redis_client", _client)
    return _client()


@pytest.fixture(autouse=True)
def enqueued(monkeypatch: pytest.MonkeyPatch) -> list[int]:
    """Capture confirmation jobs instead of talking to a Celery broker."""
    calls: list[int] = []
    monkeypatch.setattr("eventhorizon.routes.events.enqueue_confirmation", calls.append)
    return calls


def future(days: int = 30) -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=days)


@pytest.fixture
def make_user(db_session: Session):
    def _make_user(username: str, *, is_admin: bool = False, password: str = "secret-pass") -> User:
        return create_user(db_session, username, password, is_admin=is_admin)

    return _make_user


@pytest.fixture
def auth_headers(db_session: Session):
    def _auth_headers(user: User) -> dict[str, str]:
        jti = update_user_jti(db_session, user.username)
        token = create_access_token(data={"sub": user.username}, jti=jti)
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture
def organizer(make_user) -> User:
    return make_user("organizer")


@pytest.fixture
def attendee(make_user) -> User:
    return make_user("attendee")


@pytest.fixture
def admin(make_user) -> User:
    return make_user("admin", is_admin=True)


@pytest.fixture
def make_event(db_session: Session, organizer: User):
    def _make_event(
        name: str = "Test Event",
        *,
        max_attendees: int = 10,
        registered_total: int = 0,
        scheduled_at: datetime | None = None,
        is_active: bool = True,
        organizer_id: int | None = None,
    ) -> Event:
        event = Event(
            name=name,
            max_attendees=max_attendees,
            registered_total=registered_total,
            scheduled_at=scheduled_at or future(),
            is_active=is_active,
            organizer_id=organizer_id or organizer.id,
        )
        db_session.add(event)
        db_session.commit()
        db_session.refresh(event)
        return event

    return _make_event
