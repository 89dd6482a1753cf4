"""Conversion of document records to and from JSON-ready dicts."""

import json
from collections.abc import Iterable
from typing import Any

from docuextract.documents.models import (
    DocumentRecord,
    DocumentStatus,
    DocumentType,
    ExtractedRecord,
    SourceFile,
)

# Export keys follow the provider vocabulary so exported files read like
# the extraction responses they came from.
_EXPORT_KEYS: dict[str, str] = {
    "name": "name",
    "address": "address",
    "postal_code": "postalcode",
    "city": "city",
    "birthday": "birthday",
    "document_date": "date",
    "time": "time",
    "handwritten": "handwritten",
    "signed": "signed",
    "stamp": "stamp",
    "confidence": "confidence",
    "model_used": "model",
    "estimated_cost": "cost",
    "processing_time_seconds": "processingTime",
    "file_name": "pdf_file_name",
    "warnings": "warnings",
    "created_at": "createdAt",
}


def extracted_to_dict(record: ExtractedRecord) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    for attr, key in _EXPORT_KEYS.items():
        value = getattr(record, attr)
        payload[key] = list(value) if attr == "warnings" else value
    return payload


def extracted_from_dict(data: dict[str, Any]) -> ExtractedRecord:
    kwargs: dict[str, Any] = {}
    for attr, key in _EXPORT_KEYS.items():
        if key in data:
            kwargs[attr] = data[key]
    kwargs["warnings"] = tuple(kwargs.get("warnings") or ())
    return ExtractedRecord(**kwargs)


def record_to_dict(record: DocumentRecord) -> dict[str, Any]:
    """Serialize a DocumentRecord. The file content is dropped."""
    return {
        "id": record.id,
        "source_file": {
            "name": record.source_file.name,
            "size_bytes": record.source_file.size_bytes,
            "mime_type": record.source_file.mime_type,
        },
        "status": str(record.status),
        "progress": record.progress,
        "classification": (
            str(record.classification) if record.classification is not None else None
        ),
        "extracted_data": (
            extracted_to_dict(record.extracted_data)
            if record.extracted_data is not None
            else None
        ),
        "error": record.error,
        "retry_count": record.retry_count,
    }


def record_from_dict(data: dict[str, Any]) -> DocumentRecord:
    source = data["source_file"]
    classification = data.get("classification")
    extracted = data.get("extracted_data")
    return DocumentRecord(
        id=data["id"],
        source_file=SourceFile(
            name=source["name"],
            size_bytes=int(source["size_bytes"]),
            mime_type=source["mime_type"],
        ),
        status=DocumentStatus(data["status"]),
        progress=int(data.get("progress", 0)),
        classification=DocumentType(classification) if classification else None,
        extracted_data=extracted_from_dict(extracted) if extracted else None,
        error=data.get("error"),
        retry_count=int(data.get("retry_count", 0)),
    )


def export_json(records: Iterable[ExtractedRecord]) -> str:
    """Export extracted records as a pretty-printed JSON array."""
    return json.dumps([extracted_to_dict(r) for r in records], indent=2, ensure_ascii=False)


def import_json(text: str) -> list[ExtractedRecord]:
    """Re-import records produced by export_json.

    Raises:
        ValueError: if the payload is not a JSON array of objects.
    """
    parsed = json.loads(text)
    if not isinstance(parsed, list):
        raise ValueError("Exported payload must be a JSON array")
    records: list[ExtractedRecord] = []
    for index, item in enumerate(parsed):
        if not isinstance(item, dict):
            raise ValueError(f"Exported item at index {index} must be an object")
        records.append(extracted_from_dict(item))
    return records
