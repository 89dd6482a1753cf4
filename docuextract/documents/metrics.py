from collections.abc import Iterable
from dataclasses import dataclass

from docuextract.documents.models import DocumentRecord, DocumentStatus
from docuextract.extraction.model_selection import is_heavy_model

_PROCESSING_STATUSES = frozenset({
    DocumentStatus.PREPROCESSING,
    DocumentStatus.CLASSIFYING,
    DocumentStatus.EXTRACTING,
    DocumentStatus.RATE_LIMITED,
})


@dataclass(frozen=True)
class ProcessingMetrics:
    """Aggregate view of a batch of documents."""

    total_documents: int = 0
    success_count: int = 0
    failure_count: int = 0
    processing_count: int = 0
    total_cost: float = 0.0
    average_confidence: float = 0.0
    average_processing_time: float = 0.0
    heavy_model_count: int = 0
    light_model_count: int = 0


def summarize(records: Iterable[DocumentRecord]) -> ProcessingMetrics:
    """Derive batch metrics from the current store contents."""
    documents = list(records)
    completed = [
        d.extracted_data
        for d in documents
        if d.status == DocumentStatus.COMPLETED and d.extracted_data is not None
    ]
    count = len(completed)
    heavy = sum(1 for r in completed if is_heavy_model(r.model_used))
    return ProcessingMetrics(
        total_documents=len(documents),
        success_count=sum(1 for d in documents if d.status == DocumentStatus.COMPLETED),
        failure_count=sum(1 for d in documents if d.status == DocumentStatus.FAILED),
        processing_count=sum(1 for d in documents if d.status in _PROCESSING_STATUSES),
        total_cost=sum(r.estimated_cost for r in completed),
        average_confidence=(sum(r.confidence for r in completed) / count) if count else 0.0,
        average_processing_time=(
            sum(r.processing_time_seconds for r in completed) / count if count else 0.0
        ),
        heavy_model_count=heavy,
        light_model_count=count - heavy,
    )
