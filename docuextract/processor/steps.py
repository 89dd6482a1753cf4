import asyncio

from docuextract.classification.base import BaseClassifier
from docuextract.documents.models import DocumentStatus
from docuextract.documents.store import DocumentStore
from docuextract.extraction.base import BaseExtractionClient
from docuextract.extraction.exceptions import RateLimitedError
from docuextract.logging.logger import Log
from docuextract.processor.exceptions import DocumentRemovedError
from docuextract.processor.pipeline import PipelineContext, PipelineStep
from docuextract.processor.rate_limit import BackoffPolicy


class PreprocessStep(PipelineStep):
    """Stage boundary reserved for image normalization; passes bytes through."""

    status = DocumentStatus.PREPROCESSING
    progress = 20

    def __init__(self, delay_seconds: float) -> None:
        self._delay_seconds = delay_seconds

    async def run(self, context: PipelineContext) -> PipelineContext:
        await asyncio.sleep(self._delay_seconds)
        return context


class ClassifyStep(PipelineStep):
    status = DocumentStatus.CLASSIFYING
    progress = 40

    def __init__(self, classifier: BaseClassifier, delay_seconds: float) -> None:
        self._classifier = classifier
        self._delay_seconds = delay_seconds

    async def run(self, context: PipelineContext) -> PipelineContext:
        context.classification = await self._classifier.classify(context.content)
        await asyncio.sleep(self._delay_seconds)
        Log.info(f"Classified as {context.classification}", document_id=context.record_id)
        return context


class ExtractStep(PipelineStep):
    """Calls the extraction client, pausing in rate-limited between attempts."""

    status = DocumentStatus.EXTRACTING
    progress = 60

    def __init__(
        self,
        client: BaseExtractionClient,
        store: DocumentStore,
        backoff: BackoffPolicy,
    ) -> None:
        self._client = client
        self._store = store
        self._backoff = backoff

    async def run(self, context: PipelineContext) -> PipelineContext:
        attempt = 0
        while True:
            try:
                context.extraction_result = await self._client.extract(
                    content=context.content,
                    mime_type=context.mime_type,
                    document_type=context.classification,
                    file_name=context.file_name,
                )
                return context
            except RateLimitedError:
                if attempt >= self._backoff.max_retries:
                    Log.error(
                        f"Still rate limited after {attempt} resumes, giving up",
                        document_id=context.record_id,
                    )
                    raise
                delay = self._backoff.delay_for(attempt)
                attempt += 1
                Log.warning(
                    f"Rate limited, resuming in {delay:.1f}s "
                    f"(resume {attempt}/{self._backoff.max_retries})",
                    document_id=context.record_id,
                )
                self._transition(context.record_id, DocumentStatus.RATE_LIMITED)
                await asyncio.sleep(delay)
                self._transition(context.record_id, DocumentStatus.EXTRACTING)

    def _transition(self, record_id: str, status: DocumentStatus) -> None:
        if self._store.update_by_id(record_id, status=status) is None:
            raise DocumentRemovedError(f"Document {record_id} was removed")
