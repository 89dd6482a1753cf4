from datetime import datetime, timezone
from unittest.mock import MagicMock

import psycopg
import pytest

from docuextract.database.repositories.document_repository import PostgresDocumentRepository
from docuextract.documents.exceptions import StoreError
from docuextract.documents.models import DocumentRecord, DocumentStatus, SourceFile
from docuextract.documents.serialization import record_to_dict


def _record(record_id: str = "doc-1") -> DocumentRecord:
    return DocumentRecord(
        id=record_id,
        source_file=SourceFile(name="form.pdf", size_bytes=2048, mime_type="application/pdf"),
        status=DocumentStatus.COMPLETED,
        progress=100,
    )


def _make_row(record: DocumentRecord) -> dict[str, object]:
    now = datetime(2024, 3, 1, tzinfo=timezone.utc)
    return {
        "id": record.id,
        "payload": record_to_dict(record),
        "created_at": now,
        "updated_at": now,
    }


def _mock_database() -> tuple[MagicMock, MagicMock, MagicMock]:
    """Wire up a mock database, connection and cursor."""
    mock_cursor = MagicMock()
    mock_conn = MagicMock()
    mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
    mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
    mock_db = MagicMock()
    mock_db.connection.return_value.__enter__ = MagicMock(return_value=mock_conn)
    mock_db.connection.return_value.__exit__ = MagicMock(return_value=False)
    return mock_db, mock_conn, mock_cursor


class TestEnsureSchema:
    def test_creates_table_and_commits(self) -> None:
        mock_db, mock_conn, _cursor = _mock_database()

        PostgresDocumentRepository(mock_db).ensure_schema()

        sql = mock_conn.execute.call_args[0][0]
        assert "CREATE TABLE IF NOT EXISTS document_records" in sql
        mock_conn.commit.assert_called_once()


class TestLoad:
    def test_returns_records_in_row_order(self) -> None:
        mock_db, _conn, mock_cursor = _mock_database()
        mock_cursor.fetchall.return_value = [_make_row(_record("b")), _make_row(_record("a"))]

        records = PostgresDocumentRepository(mock_db).load()

        assert [r.id for r in records] == ["b", "a"]
        assert records[0].status == DocumentStatus.COMPLETED
        assert "ORDER BY seq" in mock_cursor.execute.call_args[0][0]

    def test_wraps_database_errors(self) -> None:
        mock_db, _conn, mock_cursor = _mock_database()
        mock_cursor.execute.side_effect = psycopg.OperationalError("connection lost")

        with pytest.raises(StoreError, match="Failed to load document records"):
            PostgresDocumentRepository(mock_db).load()

    def test_wraps_corrupt_payloads(self) -> None:
        mock_db, _conn, mock_cursor = _mock_database()
        row = _make_row(_record())
        row["payload"] = {"id": "doc-1"}
        mock_cursor.fetchall.return_value = [row]

        with pytest.raises(StoreError, match="Corrupt document record payload"):
            PostgresDocumentRepository(mock_db).load()


class TestSave:
    def test_upserts_payload(self) -> None:
        mock_db, mock_conn, _cursor = _mock_database()

        PostgresDocumentRepository(mock_db).save(_record())

        sql, params = mock_conn.execute.call_args[0]
        assert "ON CONFLICT (id) DO UPDATE" in sql
        assert params[0] == "doc-1"
        assert params[1].obj["status"] == "completed"
        mock_conn.commit.assert_called_once()

    def test_wraps_database_errors(self) -> None:
        mock_db, mock_conn, _cursor = _mock_database()
        mock_conn.execute.side_effect = psycopg.OperationalError("boom")

        with pytest.raises(StoreError, match="Failed to save document doc-1"):
            PostgresDocumentRepository(mock_db).save(_record())


class TestDelete:
    def test_deletes_by_id(self) -> None:
        mock_db, mock_conn, _cursor = _mock_database()

        PostgresDocumentRepository(mock_db).delete("doc-1")

        sql, params = mock_conn.execute.call_args[0]
        assert sql.startswith("DELETE FROM document_records")
        assert params == ("doc-1",)
        mock_conn.commit.assert_called_once()
