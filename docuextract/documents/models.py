from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import PurePath

PDF_MIME_TYPE = "application/pdf"


class DocumentStatus(StrEnum):
    """Lifecycle states of a document record."""

    PENDING = "pending"
    PREPROCESSING = "preprocessing"
    CLASSIFYING = "classifying"
    EXTRACTING = "extracting"
    COMPLETED = "completed"
    FAILED = "failed"
    RATE_LIMITED = "rate-limited"


IN_FLIGHT_STATUSES = frozenset({
    DocumentStatus.PENDING,
    DocumentStatus.PREPROCESSING,
    DocumentStatus.CLASSIFYING,
    DocumentStatus.EXTRACTING,
    DocumentStatus.RATE_LIMITED,
})


class DocumentType(StrEnum):
    """Coarse type hint used to pick an extraction model."""

    TYPED = "typed"
    HANDWRITTEN = "handwritten"
    MIXED = "mixed"


STAMP_CODES = frozenset({"BB", "AB", "FK", "S", "other"})


@dataclass(frozen=True)
class UploadedFile:
    """Raw file blob offered to the pipeline."""

    name: str
    content: bytes = field(repr=False)
    mime_type: str = ""

    def is_pdf(self) -> bool:
        if self.mime_type.lower() == PDF_MIME_TYPE:
            return True
        return PurePath(self.name).suffix.lower() == ".pdf"


@dataclass(frozen=True)
class SourceFile:
    """Reference to the original PDF payload.

    ``content`` lives only in memory and is never serialized, so records
    restored from a snapshot carry ``content=None``.
    """

    name: str
    size_bytes: int
    mime_type: str
    content: bytes | None = field(default=None, repr=False, compare=False)


@dataclass(frozen=True)
class ExtractedRecord:
    """Structured fields produced by a successful extraction plus provenance."""

    name: str | None = None
    address: str | None = None
    postal_code: str | None = None
    city: str | None = None
    birthday: str | None = None
    document_date: str | None = None
    time: str | None = None
    handwritten: bool = False
    signed: bool = False
    stamp: str | None = None
    confidence: int = 0
    model_used: str = ""
    estimated_cost: float = 0.0
    processing_time_seconds: float = 0.0
    file_name: str = ""
    warnings: tuple[str, ...] = ()
    created_at: str | None = None


@dataclass(frozen=True)
class DocumentRecord:
    """A document and its current processing state.

    Records are immutable; the store swaps in a new instance on every update.
    """

    id: str
    source_file: SourceFile
    status: DocumentStatus = DocumentStatus.PENDING
    progress: int = 0
    classification: DocumentType | None = None
    extracted_data: ExtractedRecord | None = None
    error: str | None = None
    retry_count: int = 0
