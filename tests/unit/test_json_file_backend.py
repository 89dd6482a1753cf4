import json
from pathlib import Path
from unittest.mock import patch

import pytest

from docuextract.documents.exceptions import StoreError
from docuextract.documents.models import DocumentRecord, DocumentStatus, SourceFile
from docuextract.documents.persistence import JsonFileSnapshotBackend
from docuextract.documents.store import DocumentStore


def _record(record_id: str, status: DocumentStatus = DocumentStatus.COMPLETED) -> DocumentRecord:
    return DocumentRecord(
        id=record_id,
        source_file=SourceFile(
            name=f"{record_id}.pdf", size_bytes=3, mime_type="application/pdf", content=b"abc"
        ),
        status=status,
    )


class TestJsonFileSnapshotBackend:
    def test_missing_file_loads_empty(self, tmp_path: Path) -> None:
        backend = JsonFileSnapshotBackend(tmp_path / "docs.json")
        assert backend.load() == []

    def test_save_then_load_in_new_backend(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "docs.json"
        backend = JsonFileSnapshotBackend(path)
        backend.save(_record("a"))
        backend.save(_record("b"))
        backend.save(_record("a", DocumentStatus.FAILED))

        restored = JsonFileSnapshotBackend(path).load()

        assert [r.id for r in restored] == ["a", "b"]
        assert restored[0].status == DocumentStatus.FAILED
        assert restored[0].source_file.content is None

    def test_delete_removes_entry(self, tmp_path: Path) -> None:
        path = tmp_path / "docs.json"
        backend = JsonFileSnapshotBackend(path)
        backend.save(_record("a"))
        backend.save(_record("b"))

        backend.delete("a")
        backend.delete("ghost")

        assert [item["id"] for item in json.loads(path.read_text())] == ["b"]

    def test_invalid_json_raises_store_error(self, tmp_path: Path) -> None:
        path = tmp_path / "docs.json"
        path.write_text("{not json")

        with pytest.raises(StoreError, match="Failed to read snapshot"):
            JsonFileSnapshotBackend(path).load()

    def test_non_array_raises_store_error(self, tmp_path: Path) -> None:
        path = tmp_path / "docs.json"
        path.write_text('{"id": "a"}')

        with pytest.raises(StoreError, match="JSON array"):
            JsonFileSnapshotBackend(path).load()

    def test_corrupt_entry_raises_store_error(self, tmp_path: Path) -> None:
        path = tmp_path / "docs.json"
        path.write_text('[{"id": "a"}]')

        with pytest.raises(StoreError, match="Corrupt snapshot entry"):
            JsonFileSnapshotBackend(path).load()

    def test_failed_write_leaves_no_temp_file(self, tmp_path: Path) -> None:
        path = tmp_path / "docs.json"
        backend = JsonFileSnapshotBackend(path)

        with patch(
            "docuextract.documents.persistence.os.replace", side_effect=OSError("disk full")
        ):
            with pytest.raises(StoreError, match="disk full"):
                backend.save(_record("a"))

        assert list(tmp_path.iterdir()) == []


class TestStoreWithJsonBackend:
    def test_store_state_survives_reload(self, tmp_path: Path) -> None:
        path = tmp_path / "docs.json"
        store = DocumentStore(JsonFileSnapshotBackend(path))
        store.create_many([_record("a", DocumentStatus.PENDING), _record("b")])
        store.update_by_id("a", status=DocumentStatus.EXTRACTING, progress=60)
        store.remove_by_id("b")

        reloaded = DocumentStore(JsonFileSnapshotBackend(path))
        reloaded.load()

        (record,) = reloaded.list_all()
        assert record.id == "a"
        assert record.status == DocumentStatus.FAILED
        assert record.error == "Interrupted before completion"
