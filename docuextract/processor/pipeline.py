from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar

from docuextract.documents.models import DocumentStatus, DocumentType
from docuextract.extraction.models import ExtractionResult


@dataclass(slots=True)
class PipelineContext:
    record_id: str
    file_name: str
    mime_type: str
    content: bytes
    classification: DocumentType | None = None
    extraction_result: ExtractionResult | None = None


class PipelineStep(ABC):
    """One stage of document processing.

    The pipeline moves the record to ``status``/``progress`` before ``run``
    is awaited.
    """

    status: ClassVar[DocumentStatus]
    progress: ClassVar[int]

    @abstractmethod
    async def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
