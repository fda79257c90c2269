"""Shared pytest fixtures."""

from __future__ import annotations

import os
import sys
import tempfile
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

# Config classes read the environment at import time, so point them at the
# test database before the application package is imported.
_DB_DIR = tempfile.mkdtemp(prefix="cbar-rates-tests-")
TEST_DATABASE_URL = f"sqlite:///{Path(_DB_DIR) / 'test.db'}"
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["SCHEDULER_ENABLED"] = "false"

from cbar_rates import create_app  # noqa: E402
from cbar_rates.database import SessionLocal, get_engine  # noqa: E402
from cbar_rates.errors import UpstreamUnavailable  # noqa: E402
from cbar_rates.feed.base import BaseFeedClient  # noqa: E402
from cbar_rates.feed.schemas import RawFeedEntry  # noqa: E402
from cbar_rates.models import CachedCurrency  # noqa: E402
from cbar_rates.services import (  # noqa: E402
    IngestionCoordinator,
    SingleFlight,
    SnapshotCache,
)
from tests.factories import FIXED_TODAY, FakeFeed  # noqa: E402


@pytest.fixture(scope="session")
def app() -> Iterator:
    """Session-wide Flask application backed by a migrated temporary SQLite database."""

    alembic_cfg = Config(str(ROOT_DIR / "alembic.ini"))
    alembic_cfg.set_main_option("sqlalchemy.url", TEST_DATABASE_URL)
    command.upgrade(alembic_cfg, "head")

    flask_app = create_app("testing")

    yield flask_app

    engine = get_engine()
    SessionLocal.remove()
    engine.dispose()
    command.downgrade(alembic_cfg, "base")


@pytest.fixture()
def client(app):
    """Provide a Flask test client."""

    with app.test_client() as client:
        yield client


@pytest.fixture()
def db_session(app) -> Iterator:
    """Provide a session on an emptied cached_currencies table."""

    session = SessionLocal()
    session.query(CachedCurrency).delete()
    session.commit()
    try:
        yield session
    finally:
        session.rollback()
        session.query(CachedCurrency).delete()
        session.commit()
        SessionLocal.remove()


@pytest.fixture()
def sample_entries() -> list[RawFeedEntry]:
    return [
        RawFeedEntry(code="USD", name="1 ABŞ dolları", nominal="1", value="1.7"),
        RawFeedEntry(code="EUR", name="1 Avro", nominal="1", value="1.9829"),
        RawFeedEntry(code="RUB", name="100 Rusiya rublu", nominal="100", value="2,1043"),
        RawFeedEntry(code="", name="Qızıl", nominal="1 t.u.", value="2450.5"),
    ]


@pytest.fixture()
def fake_feed(sample_entries) -> FakeFeed:
    return FakeFeed(entries=sample_entries)


@pytest.fixture()
def install_coordinator(app, db_session) -> Iterator[Callable[[BaseFeedClient], IngestionCoordinator]]:
    """Swap the app's coordinator for one using the given feed and a fixed clock."""

    original = app.extensions["cbar_coordinator"]

    def _install(feed: BaseFeedClient) -> IngestionCoordinator:
        coordinator = IngestionCoordinator(
            feed=feed,
            cache=SnapshotCache(),
            flights=SingleFlight(),
            clock=lambda: FIXED_TODAY,
        )
        app.extensions["cbar_coordinator"] = coordinator
        return coordinator

    yield _install

    app.extensions["cbar_coordinator"] = original


@pytest.fixture()
def unavailable_feed() -> FakeFeed:
    return FakeFeed(error=UpstreamUnavailable("CBAR feed unavailable"))
