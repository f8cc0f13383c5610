import os

os.environ.setdefault("REDDAT_DB_URL", "sqlite://")
os.environ.setdefault("REDDAT_MAIL_PROVIDER", "fake")

import pytest
from fastapi.testclient import TestClient

from reddat.db import Base, get_session, init_db, make_engine, make_sessionmaker
from reddat.main import app
from reddat.services.notify import get_notifier


class RecordingNotifier:
    """Keeps every link it was asked to announce."""

    def __init__(self):
        self.sent = []

    def new_link(self, link) -> None:
        self.sent.append(link)


class FailingNotifier:
    def new_link(self, link) -> None:
        raise ConnectionRefusedError("mail server down")


@pytest.fixture
def engine():
    """A fresh in-memory database per test."""
    eng = make_engine("sqlite://")
    init_db(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return make_sessionmaker(engine)


@pytest.fixture
def db(session_factory):
    s = session_factory()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client(session_factory, notifier):
    def _get_session():
        s = session_factory()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_session] = _get_session
    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def failing_notifier(client):
    """Make the moderator notification raise for the rest of the test."""
    app.dependency_overrides[get_notifier] = lambda: FailingNotifier()
    return client
