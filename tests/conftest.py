from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from src.api.app import create_app
from src.auth.passwords import hash_password
from src.config import Settings
from src.db.database import create_tables, make_engine, make_session_factory
from src.db.store import ResourceStore
from src.errors import AddressUnresolvable, NotifierFailed
from src.geocoding.nominatim import ResolvedAddress

ADMIN_CODE = "SilverFreak"
PASSWORD = "password123"


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def send(self, to, subject, body):
        self.sent.append((to, subject, body))


class FailingNotifier:
    def __init__(self):
        self.attempts = 0

    def send(self, to, subject, body):
        self.attempts += 1
        raise NotifierFailed("SMTP server unreachable")


class FrozenClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


def fake_resolver(text):
    if "nowhere" in text.lower():
        raise AddressUnresolvable()
    return ResolvedAddress(lat=44.6, lng=-110.5, formatted_address=f"{text}, USA")


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'yelpcamp.db'}")
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def store(session_factory):
    session = session_factory()
    yield ResourceStore(session)
    session.close()


@pytest.fixture
def make_account(store):
    def _make(username, is_admin=False, email=None, password=PASSWORD):
        return store.create_account(
            username=username,
            password_hash=hash_password(password, rounds=4),
            email=email or f"{username}@example.com",
            is_admin=is_admin,
        )
    return _make


@pytest.fixture
def settings():
    return Settings(
        session_secret="test-secret",
        admin_code=ADMIN_CODE,
        base_url="http://yelpcamp.test",
    )


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def clock():
    return FrozenClock(datetime(2026, 1, 1, 12, 0, 0))


@pytest.fixture
def app(settings, engine, notifier, clock):
    return create_app(settings, engine=engine, notifier=notifier, resolver=fake_resolver, clock=clock)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def login_client(app, make_account):
    """Return a logged-in TestClient for a freshly created account."""
    def _login(username, is_admin=False):
        account = make_account(username, is_admin=is_admin)
        client = TestClient(app)
        res = client.post("/login", json={"username": username, "password": PASSWORD})
        assert res.status_code == 200, res.text
        return client, account
    return _login
