"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient

from shortlinks.config import Settings
from shortlinks.database import init_db, make_engine
from shortlinks.main import create_app
from shortlinks.store import AliasStore


@pytest.fixture
def settings(tmp_path):
    # file-backed so threads get their own connections
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'shortlinks_test.db'}",
        public_base_url="http://sho.rt",
        log_level="DEBUG",
    )


@pytest.fixture
def store(settings):
    engine = make_engine(settings)
    init_db(engine)
    store = AliasStore(engine)
    yield store
    store.close()


@pytest.fixture
def client(settings, store):
    app = create_app(settings=settings, store=store)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def sample_urls():
    return [f"https://example.com/page/{i}" for i in range(15)]
