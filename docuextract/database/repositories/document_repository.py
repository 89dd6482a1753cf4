import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from docuextract.database.connection import Database
from docuextract.database.models import DocumentRow
from docuextract.documents.exceptions import StoreError
from docuextract.documents.models import DocumentRecord
from docuextract.documents.persistence import BaseSnapshotBackend
from docuextract.documents.serialization import record_from_dict, record_to_dict


class PostgresDocumentRepository(BaseSnapshotBackend):
    """Database operations for the document_records table."""

    def __init__(self, database: Database) -> None:
        self._database = database

    def ensure_schema(self) -> None:
        """Create the document_records table if it does not exist."""
        with self._database.connection() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS document_records (
                    seq BIGSERIAL,
                    id TEXT PRIMARY KEY,
                    payload JSONB NOT NULL,
                    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
                    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
                )
                """
            )
            conn.commit()

    def load(self) -> list[DocumentRecord]:
        try:
            rows = self.find_all()
            return [record_from_dict(row.payload) for row in rows]
        except psycopg.Error as exc:
            raise StoreError(f"Failed to load document records: {exc}") from exc
        except (KeyError, TypeError, ValueError) as exc:
            raise StoreError(f"Corrupt document record payload: {exc}") from exc

    def find_all(self) -> list[DocumentRow]:
        """Fetch all rows in insertion order."""
        with self._database.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, payload, created_at, updated_at
                    FROM document_records
                    ORDER BY seq
                    """
                )
                rows = cur.fetchall()
        return [
            DocumentRow(
                id=row["id"],
                payload=row["payload"],
                created_at=row["created_at"],
                updated_at=row["updated_at"],
            )
            for row in rows
        ]

    def save(self, record: DocumentRecord) -> None:
        try:
            with self._database.connection() as conn:
                conn.execute(
                    """
                    INSERT INTO document_records (id, payload)
                    VALUES (%s, %s)
                    ON CONFLICT (id) DO UPDATE
                    SET payload = EXCLUDED.payload, updated_at = NOW()
                    """,
                    (record.id, Jsonb(record_to_dict(record))),
                )
                conn.commit()
        except psycopg.Error as exc:
            raise StoreError(f"Failed to save document {record.id}: {exc}") from exc

    def delete(self, record_id: str) -> None:
        try:
            with self._database.connection() as conn:
                conn.execute("DELETE FROM document_records WHERE id = %s", (record_id,))
                conn.commit()
        except psycopg.Error as exc:
            raise StoreError(f"Failed to delete document {record_id}: {exc}") from exc
