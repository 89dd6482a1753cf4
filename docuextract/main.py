import asyncio
import sys
from collections.abc import Sequence
from pathlib import Path

from docuextract.config.settings import Settings
from docuextract.database.connection import Database
from docuextract.documents.factory import SnapshotBackendFactory
from docuextract.documents.metrics import summarize
from docuextract.documents.models import DocumentRecord, DocumentStatus, UploadedFile
from docuextract.documents.serialization import export_json
from docuextract.documents.store import DocumentStore
from docuextract.logging.logger import Log
from docuextract.processor.file_loader import FileLoader
from docuextract.processor.processor import DocumentPipeline, build_pipeline


async def _run(pipeline: DocumentPipeline, files: list[UploadedFile]) -> list[DocumentRecord]:
    submitted = await pipeline.submit(files)
    await pipeline.wait_idle()
    return submitted


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point: load store -> build pipeline -> process files -> report."""
    settings = Settings()
    Log.configure(settings.log_level, debug=settings.debug)
    paths = [Path(p) for p in (sys.argv[1:] if argv is None else argv)]
    if not paths:
        Log.error("Usage: docuextract FILE.pdf [FILE.pdf ...]")
        return 2

    database = Database(settings) if settings.store_backend.lower() == "postgres" else None
    try:
        store = DocumentStore(SnapshotBackendFactory.create(settings, database))
        store.load()
        pipeline = build_pipeline(settings, store)
        loader = FileLoader()
        uploads: list[UploadedFile] = []
        for path in paths:
            try:
                uploads.append(loader.load(path))
            except FileNotFoundError as exc:
                Log.error(str(exc))
        submitted = asyncio.run(_run(pipeline, uploads))

        ids = {record.id for record in submitted}
        results = [r for r in store.list_all() if r.id in ids]
        for record in results:
            if record.status == DocumentStatus.FAILED:
                Log.error(f"{record.source_file.name}: failed: {record.error}")
            else:
                Log.info(f"{record.source_file.name}: {record.status}")

        metrics = summarize(results)
        Log.info(
            f"Processed {metrics.total_documents} documents: {metrics.success_count} completed, "
            f"{metrics.failure_count} failed, estimated cost ${metrics.total_cost:.4f}, "
            f"average confidence {metrics.average_confidence:.1f}%"
        )
        completed = [r.extracted_data for r in results if r.extracted_data is not None]
        sys.stdout.write(export_json(completed) + "\n")
        return 1 if metrics.failure_count or len(submitted) < len(paths) else 0
    finally:
        if database is not None:
            database.close()


if __name__ == "__main__":
    sys.exit(main())
