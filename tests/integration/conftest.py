import os
from collections.abc import Generator
from typing import Any

import psycopg
import pytest

from docuextract.config.settings import Settings
from docuextract.database.connection import Database
from docuextract.database.repositories.document_repository import PostgresDocumentRepository


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "docuextract_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def database(test_settings: Settings) -> Generator[Database, None, None]:
    try:
        psycopg.connect(
            host=test_settings.db_host,
            port=test_settings.db_port,
            dbname=test_settings.db_database,
            user=test_settings.db_username,
            password=test_settings.db_password,
            connect_timeout=3,
        ).close()
    except psycopg.Error as e:
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env to point at a disposable database"
        )
    db = Database(test_settings)
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def db_conn(database: Database) -> Generator[psycopg.Connection[Any], None, None]:
    with database.connection() as conn:
        yield conn


@pytest.fixture
def repository(database: Database) -> Generator[PostgresDocumentRepository, None, None]:
    repo = PostgresDocumentRepository(database)
    repo.ensure_schema()
    with database.connection() as conn:
        conn.execute("TRUNCATE document_records")
        conn.commit()
    yield repo
    with database.connection() as conn:
        conn.execute("TRUNCATE document_records")
        conn.commit()
