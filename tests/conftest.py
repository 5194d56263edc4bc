"""
Shared fixtures. The environment is set before any jobhub import so the engine points
at a throwaway SQLite file and tokens are signed with a test key.
"""

import os
import tempfile
from pathlib import Path

_tmp = Path(tempfile.mkdtemp(prefix="jobhub-tests-"))
os.environ["DB_URL"] = f"sqlite:///{_tmp / 'test.db'}"
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["PASSWORD_BREACH_CHECK"] = "false"
os.environ["SEED_DEMO_DATA"] = "false"

import pytest

from jobhub.db.database import Session, engine
from jobhub.db.gateway import DataGateway
from jobhub.db.models import Base, User
from jobhub.errors import GatewayError
from jobhub.realtime import ChangeFeed
from jobhub.session import SessionUser
from jobhub.utils import generate_token, hash_password


@pytest.fixture(autouse=True)
def db():
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture
def feed():
    return ChangeFeed()


@pytest.fixture
def gateway(feed):
    return DataGateway(Session, feed=feed)


class FlakyGateway:
    """ Delegates to a real gateway, failing the (operation, table) pairs in `fail`. """

    def __init__(self, inner, fail=()):
        self.inner = inner
        self.fail = set(fail)
        self.calls = []
        self.before_update = None

    @property
    def feed(self):
        return self.inner.feed

    def _call(self, operation, table):
        self.calls.append((operation, table))
        if (operation, table) in self.fail:
            raise GatewayError("simulated outage", operation, table)

    def fetch(self, table, filters=None, order=None, embed=(), limit=None):
        self._call("fetch", table)
        return self.inner.fetch(table, filters, order=order, embed=embed, limit=limit)

    def fetch_one(self, table, filters, embed=()):
        self._call("fetch", table)
        return self.inner.fetch_one(table, filters, embed=embed)

    def insert(self, table, rows):
        self._call("insert", table)
        return self.inner.insert(table, rows)

    def update(self, table, id, patch):
        self._call("update", table)
        if self.before_update is not None:
            self.before_update()
        return self.inner.update(table, id, patch)

    def subscribe_insert(self, table, on_row, filter=None):
        self._call("subscribe", table)
        return self.inner.subscribe_insert(table, on_row, filter)


@pytest.fixture
def flaky(gateway):
    def make(*fail):
        return FlakyGateway(gateway, fail)
    return make


@pytest.fixture
def acme(gateway):
    return gateway.insert("businesses", {"name": "Acme Builders", "email": "owner@acme.example"})[0]


@pytest.fixture
def plumbers(gateway):
    return gateway.insert("workers", [
        {"name": "Ravi", "email": "ravi@example.com", "phone": "9000000001", "skill": "Plumber", "status": "Available"},
        {"name": "Anita", "email": "anita@example.com", "phone": "9000000002", "skill": "Plumber", "status": "Available"},
    ])


@pytest.fixture
def business_session():
    return SessionUser(id=101, email="owner@acme.example", phone=None, user_type="business")


@pytest.fixture
def worker_session():
    return SessionUser(id=201, email="ravi@example.com", phone="9000000001", user_type="worker")


def create_login(email, role, phone=None, password="Str0ng!Passw0rd"):
    """ Stores a user row and returns (SessionUser, bearer token). """
    with Session() as session:
        user = User(email=email, phone=phone, password_hash=hash_password(password), role=role)
        session.add(user)
        session.commit()
        session.refresh(user)
        session_user = SessionUser(id=user.id, email=user.email, phone=user.phone, user_type=user.role)
    return session_user, generate_token(session_user)


@pytest.fixture
def login():
    return create_login
