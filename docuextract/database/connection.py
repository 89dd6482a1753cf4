from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg_pool import ConnectionPool

from docuextract.config.settings import Settings


class Database:
    """Owns the PostgreSQL connection pool for one application run."""

    def __init__(self, settings: Settings, min_size: int = 1, max_size: int = 4) -> None:
        conninfo = (
            f"host={settings.db_host} "
            f"port={settings.db_port} "
            f"dbname={settings.db_database} "
            f"user={settings.db_username} "
            f"password={settings.db_password}"
        )
        self._pool: ConnectionPool | None = ConnectionPool(
            conninfo, min_size=min_size, max_size=max_size, open=True
        )

    @contextmanager
    def connection(self) -> Generator[psycopg.Connection[Any], None, None]:
        """Yield a connection from the pool. Caller manages commit/rollback."""
        if self._pool is None:
            raise RuntimeError("Connection pool already closed.")
        with self._pool.connection() as conn:
            yield conn

    def close(self) -> None:
        if self._pool is not None:
            self._pool.close()
            self._pool = None
