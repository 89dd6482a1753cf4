from collections.abc import Iterable
from dataclasses import replace

from docuextract.documents.exceptions import StoreError
from docuextract.documents.models import IN_FLIGHT_STATUSES, DocumentRecord, DocumentStatus
from docuextract.documents.persistence import BaseSnapshotBackend
from docuextract.logging.logger import Log

INTERRUPTED_ERROR = "Interrupted before completion"

_PATCHABLE_FIELDS = frozenset({
    "status",
    "progress",
    "classification",
    "extracted_data",
    "error",
    "retry_count",
})


class DocumentStore:
    """Authoritative, ordered collection of document records.

    Every mutation is synchronous and swaps in a new immutable record, so a
    reader running between two suspension points never sees a partial update.
    When a snapshot backend is given, each change is persisted right away,
    inside the same synchronous call. With the PostgreSQL backend that is a
    blocking round trip on the event loop: every in-flight document waits
    for it, in exchange for an update never being observed half-persisted.
    """

    def __init__(self, backend: BaseSnapshotBackend | None = None) -> None:
        self._backend = backend
        self._records: dict[str, DocumentRecord] = {}

    def load(self) -> None:
        """Replace the contents with the backend's snapshot.

        Records that were still in flight when the snapshot was written are
        marked failed so they can be retried.
        """
        if self._backend is None:
            return
        restored = self._backend.load()
        self._records = {}
        for record in restored:
            if record.status in IN_FLIGHT_STATUSES:
                record = replace(
                    record,
                    status=DocumentStatus.FAILED,
                    progress=100,
                    error=INTERRUPTED_ERROR,
                )
                self._persist(record)
            self._records[record.id] = record
        Log.info(f"Restored {len(self._records)} documents from snapshot")

    def create_many(self, records: Iterable[DocumentRecord]) -> None:
        """Append records, preserving submission order.

        Raises:
            ValueError: if an id is already present.
        """
        batch = list(records)
        for record in batch:
            if record.id in self._records:
                raise ValueError(f"Document {record.id} already exists")
        for record in batch:
            self._records[record.id] = record
            self._persist(record)

    def update_by_id(self, record_id: str, **patch: object) -> DocumentRecord | None:
        """Apply a partial update. Returns None when the record no longer exists.

        Raises:
            ValueError: if the patch names a field that cannot be updated.
        """
        unknown = set(patch) - _PATCHABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")
        current = self._records.get(record_id)
        if current is None:
            Log.debug(f"Ignoring update for removed document {record_id}")
            return None
        updated = replace(current, **patch)  # type: ignore[arg-type]
        self._records[record_id] = updated
        self._persist(updated)
        return updated

    def remove_by_id(self, record_id: str) -> bool:
        removed = self._records.pop(record_id, None)
        if removed is None:
            return False
        if self._backend is not None:
            try:
                self._backend.delete(record_id)
            except StoreError as exc:
                Log.warning(f"Failed to persist removal of {record_id}: {exc}")
        return True

    def get(self, record_id: str) -> DocumentRecord | None:
        return self._records.get(record_id)

    def list_all(self) -> list[DocumentRecord]:
        return list(self._records.values())

    def _persist(self, record: DocumentRecord) -> None:
        if self._backend is None:
            return
        try:
            self._backend.save(record)
        except StoreError as exc:
            # The in-memory state stays authoritative for the running session.
            Log.warning(f"Failed to persist document {record.id}: {exc}")
