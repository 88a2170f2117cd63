import sqlite3
from collections.abc import Iterator

import pytest

from app import create_app
from app.repositories import AssessTypeRepository
from app.services.assess_type import AssessTypeStore
from app.services.strings import LanguageStringTranslator
from models import init_db, reset_engine


@pytest.fixture()
def app(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", "sqlite+pysqlite:///:memory:")
    monkeypatch.setenv("ASSESS_TYPE_LANG", "en")

    reset_engine()

    application = create_app()
    application.config.update(TESTING=True)

    yield application

    reset_engine()


@pytest.fixture()
def client(app) -> Iterator:
    with app.test_client() as client:
        yield client


@pytest.fixture()
def app_context(app):
    with app.app_context():
        yield


@pytest.fixture()
def connection() -> Iterator[sqlite3.Connection]:
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    init_db(conn)
    yield conn
    conn.close()


@pytest.fixture()
def repository(connection) -> AssessTypeRepository:
    return AssessTypeRepository(connection)


@pytest.fixture()
def store(repository) -> AssessTypeStore:
    return AssessTypeStore(repository, LanguageStringTranslator("en"))
