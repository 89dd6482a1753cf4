import asyncio
from pathlib import Path

import pytest

from docuextract.config.settings import Settings
from docuextract.documents.metrics import summarize
from docuextract.documents.models import DocumentStatus, DocumentType, UploadedFile
from docuextract.documents.persistence import JsonFileSnapshotBackend
from docuextract.documents.serialization import export_json, import_json
from docuextract.documents.store import DocumentStore
from docuextract.extraction.model_selection import HEAVY_MODEL, LIGHT_MODEL
from docuextract.processor.processor import build_pipeline


def _settings(**overrides: object) -> Settings:
    values: dict[str, object] = {
        "extraction_provider": "example",
        "extraction_api_url": "",
        "gemini_model": "",
        "classifier": "text_layer",
        "preprocess_delay_seconds": 0,
        "classify_delay_seconds": 0,
    }
    values.update(overrides)
    return Settings(**values)  # type: ignore[arg-type]


@pytest.mark.parametrize("engine", ["pdfplumber", "pymupdf"])
class TestPipelineWithRealPdfs:
    def test_classifies_and_routes_models(
        self,
        engine: str,
        sample_pdf_bytes: bytes,
        empty_pdf_bytes: bytes,
        mixed_pdf_bytes: bytes,
    ) -> None:
        store = DocumentStore()
        pipeline = build_pipeline(_settings(pdf_engine=engine), store)
        files = [
            UploadedFile(name="typed.pdf", content=sample_pdf_bytes, mime_type="application/pdf"),
            UploadedFile(name="scan.pdf", content=empty_pdf_bytes, mime_type="application/pdf"),
            UploadedFile(name="mixed.pdf", content=mixed_pdf_bytes, mime_type="application/pdf"),
        ]

        async def scenario() -> None:
            await pipeline.submit(files)
            await pipeline.wait_idle()

        asyncio.run(scenario())

        by_name = {r.source_file.name: r for r in store.list_all()}
        assert {name: r.classification for name, r in by_name.items()} == {
            "typed.pdf": DocumentType.TYPED,
            "scan.pdf": DocumentType.HANDWRITTEN,
            "mixed.pdf": DocumentType.MIXED,
        }
        models = {name: r.extracted_data.model_used for name, r in by_name.items() if r.extracted_data}
        assert models == {"typed.pdf": LIGHT_MODEL, "scan.pdf": HEAVY_MODEL, "mixed.pdf": HEAVY_MODEL}

        metrics = summarize(store.list_all())
        assert metrics.success_count == 3
        assert metrics.heavy_model_count == 2
        assert metrics.light_model_count == 1
        assert metrics.average_confidence == 90


class TestPipelineWithSnapshot:
    def test_export_and_restore(self, tmp_path: Path, sample_pdf_bytes: bytes) -> None:
        path = tmp_path / "documents.json"
        store = DocumentStore(JsonFileSnapshotBackend(path))
        pipeline = build_pipeline(_settings(), store)

        async def scenario() -> None:
            await pipeline.submit([UploadedFile(name="form.pdf", content=sample_pdf_bytes)])
            await pipeline.wait_idle()

        asyncio.run(scenario())

        completed = [r.extracted_data for r in store.list_all() if r.extracted_data]
        assert import_json(export_json(completed)) == completed

        restored = DocumentStore(JsonFileSnapshotBackend(path))
        restored.load()
        (record,) = restored.list_all()
        assert record.status == DocumentStatus.COMPLETED
        assert record.source_file.content is None
        assert record.extracted_data == completed[0]
