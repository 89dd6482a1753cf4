from abc import ABC, abstractmethod

from docuextract.documents.models import DocumentType
from docuextract.extraction.models import ExtractionResult


class BaseExtractionClient(ABC):
    """Contract the pipeline uses to turn a document into extracted fields."""

    @abstractmethod
    async def extract(
        self,
        *,
        content: bytes,
        mime_type: str,
        document_type: DocumentType | str | None,
        file_name: str = "",
    ) -> ExtractionResult:
        """Extract structured fields from one document.

        Args:
            content: Raw document bytes (PDF or image).
            mime_type: Declared MIME type of ``content``.
            document_type: Classifier hint used for model selection.
            file_name: Original file name, for diagnostics.

        Raises:
            InvalidInputError: no content or an unsupported MIME type.
            ConfigurationError: the provider credential is missing.
            ServiceUnavailableError: generation failed and no fallback worked.
            MalformedResponseError: the response is not the expected JSON.
            RateLimitedError: the provider is throttling requests.
        """
