"""
Shared test fixtures.

Each test gets its own SQLite file under tmp_path and, where time matters,
a hand-driven clock source.
"""

from datetime import datetime, timedelta, timezone

import pytest

from passkeep.core.clock import Clock
from passkeep.core.db import create_db_engine, create_session_factory, init_db, run_migrations
from passkeep.core.entry import CredentialDraft
from passkeep.core.repository import SqlEntryRepository
from passkeep.core.service import EntryService


class FakeTime:
    """Callable time source that only moves when told to."""

    def __init__(self, start=datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self):
        return self.current

    def advance(self, seconds=1.0):
        self.current += timedelta(seconds=seconds)

    def rewind(self, seconds=1.0):
        self.current -= timedelta(seconds=seconds)


@pytest.fixture
def fake_time():
    return FakeTime()


@pytest.fixture
def clock(fake_time):
    return Clock(source=fake_time)


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "vault.db")


@pytest.fixture
def engine(db_path):
    engine = create_db_engine(db_path)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = create_session_factory(engine)()
    run_migrations(session)
    yield session
    session.close()


@pytest.fixture
def repo(db):
    return SqlEntryRepository(db)


@pytest.fixture
def service(repo, clock):
    return EntryService(repo, clock=clock)


@pytest.fixture
def gmail_draft():
    return CredentialDraft(title="Gmail", username="a@b.com", password="p@ss")
