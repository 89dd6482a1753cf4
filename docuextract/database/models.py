from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass
class DocumentRow:
    """Represents a row from the document_records table."""

    id: str
    payload: dict[str, Any]
    created_at: datetime | None = None
    updated_at: datetime | None = None
