import asyncio
import uuid
from collections.abc import Sequence
from datetime import datetime, timezone

from docuextract.classification.base import BaseClassifier
from docuextract.classification.factory import ClassifierFactory
from docuextract.config.settings import Settings
from docuextract.documents.models import (
    PDF_MIME_TYPE,
    DocumentRecord,
    DocumentStatus,
    ExtractedRecord,
    SourceFile,
    UploadedFile,
)
from docuextract.documents.store import DocumentStore
from docuextract.extraction.base import BaseExtractionClient
from docuextract.extraction.exceptions import ExtractionError, InvalidInputError
from docuextract.extraction.factory import ExtractionFactory
from docuextract.logging.logger import Log
from docuextract.processor.exceptions import DocumentRemovedError
from docuextract.processor.pipeline import PipelineContext, PipelineStep
from docuextract.processor.rate_limit import BackoffPolicy
from docuextract.processor.steps import ClassifyStep, ExtractStep, PreprocessStep

DEFAULT_CONFIDENCE = 85


class DocumentPipeline:
    """Drives documents through preprocess -> classify -> extract -> finalize.

    Each document runs in its own asyncio task and only touches shared state
    through the DocumentStore. Failures are isolated per document and are
    terminal until ``retry`` is called.
    """

    def __init__(
        self,
        store: DocumentStore,
        classifier: BaseClassifier,
        extraction_client: BaseExtractionClient,
        *,
        preprocess_delay_seconds: float = 0.8,
        classify_delay_seconds: float = 0.6,
        backoff: BackoffPolicy | None = None,
    ) -> None:
        self._store = store
        self._steps: list[PipelineStep] = [
            PreprocessStep(preprocess_delay_seconds),
            ClassifyStep(classifier, classify_delay_seconds),
            ExtractStep(extraction_client, store, backoff or BackoffPolicy()),
        ]
        self._tasks: set[asyncio.Task[None]] = set()

    async def submit(self, files: Sequence[UploadedFile]) -> list[DocumentRecord]:
        """Create one pending record per PDF and start processing each of them.

        Non-PDF files are skipped with a warning; nothing is raised.
        """
        accepted: list[DocumentRecord] = []
        for upload in files:
            if not upload.is_pdf():
                Log.warning(f"Rejected {upload.name}: only PDF files are accepted")
                continue
            accepted.append(
                DocumentRecord(
                    id=str(uuid.uuid4()),
                    source_file=SourceFile(
                        name=upload.name,
                        size_bytes=len(upload.content),
                        mime_type=PDF_MIME_TYPE,
                        content=upload.content,
                    ),
                )
            )
        if not accepted:
            return []

        self._store.create_many(accepted)
        Log.info(f"Accepted {len(accepted)} of {len(files)} files")
        for record in accepted:
            self._schedule(record)
        return accepted

    async def process(self, record: DocumentRecord) -> None:
        """Run every step for one record and finalize it as completed or failed."""
        Log.info("Processing document", document_id=record.id, file_name=record.source_file.name)
        try:
            content = record.source_file.content
            if content is None:
                raise InvalidInputError("Source file content is no longer available")
            context = PipelineContext(
                record_id=record.id,
                file_name=record.source_file.name,
                mime_type=record.source_file.mime_type,
                content=content,
            )
            for step in self._steps:
                self._advance(context, step)
                context = await step.run(context)
            self._complete(context)
        except DocumentRemovedError:
            Log.info("Document removed while processing, stopping", document_id=record.id)
        except ExtractionError as exc:
            self._fail(record.id, exc.describe())
        except Exception as exc:
            Log.error(f"Unexpected error while processing: {exc!r}", document_id=record.id)
            self._fail(record.id, str(exc) or type(exc).__name__)

    async def retry(self, record_id: str) -> DocumentRecord | None:
        """Re-run a failed record. Any other status makes this a no-op."""
        record = self._store.get(record_id)
        if record is None or record.status != DocumentStatus.FAILED:
            Log.debug("Ignoring retry: document is not in failed state", document_id=record_id)
            return None
        updated = self._store.update_by_id(
            record_id,
            status=DocumentStatus.PENDING,
            progress=0,
            error=None,
            retry_count=record.retry_count + 1,
        )
        if updated is None:
            return None
        Log.info(f"Retrying document (retry {updated.retry_count})", document_id=record_id)
        self._schedule(updated)
        return updated

    def remove(self, record_id: str) -> bool:
        """Delete a record. In-flight work for it turns into no-ops."""
        return self._store.remove_by_id(record_id)

    async def wait_idle(self) -> None:
        """Wait until no document is being processed."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    def _schedule(self, record: DocumentRecord) -> None:
        task = asyncio.create_task(self.process(record), name=f"document-{record.id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _advance(self, context: PipelineContext, step: PipelineStep) -> None:
        patch: dict[str, object] = {"status": step.status, "progress": step.progress}
        if context.classification is not None:
            patch["classification"] = context.classification
        if self._store.update_by_id(context.record_id, **patch) is None:
            raise DocumentRemovedError(f"Document {context.record_id} was removed")
        Log.debug(f"-> {step.status} ({step.progress}%)", document_id=context.record_id)

    def _complete(self, context: PipelineContext) -> None:
        result = context.extraction_result
        if result is None:
            raise RuntimeError("Extraction finished without a result")
        fields = result.fields
        extracted = ExtractedRecord(
            name=fields.name,
            address=fields.address,
            postal_code=fields.postal_code,
            city=fields.city,
            birthday=fields.birthday,
            document_date=fields.document_date,
            time=fields.time,
            handwritten=fields.handwritten,
            signed=fields.signed,
            stamp=fields.stamp,
            confidence=fields.confidence if fields.confidence is not None else DEFAULT_CONFIDENCE,
            model_used=result.model_used,
            estimated_cost=result.estimated_cost,
            processing_time_seconds=result.processing_time_seconds,
            file_name=context.file_name,
            warnings=fields.warnings,
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        updated = self._store.update_by_id(
            context.record_id,
            status=DocumentStatus.COMPLETED,
            progress=100,
            classification=context.classification,
            extracted_data=extracted,
            error=None,
        )
        if updated is not None:
            Log.info(
                f"Document completed with {result.model_used} (confidence {extracted.confidence})",
                document_id=context.record_id,
            )

    def _fail(self, record_id: str, message: str) -> None:
        Log.error(f"Document failed: {message}", document_id=record_id)
        self._store.update_by_id(
            record_id,
            status=DocumentStatus.FAILED,
            progress=100,
            extracted_data=None,
            error=message,
        )


def build_pipeline(settings: Settings, store: DocumentStore) -> DocumentPipeline:
    """Build a DocumentPipeline with the configured collaborators."""
    return DocumentPipeline(
        store=store,
        classifier=ClassifierFactory.create(settings),
        extraction_client=ExtractionFactory.create_client(settings),
        preprocess_delay_seconds=settings.preprocess_delay_seconds,
        classify_delay_seconds=settings.classify_delay_seconds,
        backoff=BackoffPolicy.from_settings(settings),
    )
