import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from docuextract.documents.exceptions import StoreError
from docuextract.documents.models import DocumentRecord
from docuextract.documents.serialization import record_from_dict, record_to_dict


class BaseSnapshotBackend(ABC):
    """Contract for document snapshot persistence."""

    @abstractmethod
    def load(self) -> list[DocumentRecord]:
        """Return all persisted records in submission order.

        Raises:
            StoreError: if the snapshot cannot be read.
        """

    @abstractmethod
    def save(self, record: DocumentRecord) -> None:
        """Insert or replace one record.

        Raises:
            StoreError: if the record cannot be written.
        """

    @abstractmethod
    def delete(self, record_id: str) -> None:
        """Remove one record. Missing ids are ignored."""


class JsonFileSnapshotBackend(BaseSnapshotBackend):
    """Keeps the whole document list in one JSON file."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._payloads: dict[str, dict[str, object]] = {}

    def load(self) -> list[DocumentRecord]:
        if not self._path.exists():
            self._payloads = {}
            return []
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise StoreError(f"Failed to read snapshot {self._path}: {exc}") from exc
        if not isinstance(raw, list):
            raise StoreError(f"Snapshot {self._path} must contain a JSON array")
        try:
            records = [record_from_dict(item) for item in raw]
        except (KeyError, TypeError, ValueError) as exc:
            raise StoreError(f"Corrupt snapshot entry in {self._path}: {exc}") from exc
        self._payloads = {r.id: record_to_dict(r) for r in records}
        return records

    def save(self, record: DocumentRecord) -> None:
        self._payloads[record.id] = record_to_dict(record)
        self._flush()

    def delete(self, record_id: str) -> None:
        if self._payloads.pop(record_id, None) is not None:
            self._flush()

    def _flush(self) -> None:
        directory = self._path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=directory, suffix=".tmp")
        except OSError as exc:
            raise StoreError(f"Failed to write snapshot {self._path}: {exc}") from exc
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(list(self._payloads.values()), handle, ensure_ascii=False)
            os.replace(tmp_name, self._path)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise StoreError(f"Failed to write snapshot {self._path}: {exc}") from exc
