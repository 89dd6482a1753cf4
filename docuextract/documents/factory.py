from pathlib import Path

from docuextract.config.settings import Settings
from docuextract.database.connection import Database
from docuextract.database.repositories.document_repository import PostgresDocumentRepository
from docuextract.documents.persistence import BaseSnapshotBackend, JsonFileSnapshotBackend


class SnapshotBackendFactory:
    """Creates the configured snapshot backend (None means in-memory only)."""

    BACKENDS = ("memory", "json", "postgres")

    @classmethod
    def create(
        cls,
        settings: Settings,
        database: Database | None = None,
    ) -> BaseSnapshotBackend | None:
        backend = settings.store_backend.lower()
        if backend == "memory":
            return None
        if backend == "json":
            return JsonFileSnapshotBackend(Path(settings.store_json_path))
        if backend == "postgres":
            if database is None:
                raise ValueError("store_backend=postgres requires a Database")
            repository = PostgresDocumentRepository(database)
            repository.ensure_schema()
            return repository
        raise ValueError(
            f"Unknown store backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )
