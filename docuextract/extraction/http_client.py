from typing import Any

import httpx

from docuextract.documents.models import DocumentType
from docuextract.extraction.base import BaseExtractionClient
from docuextract.extraction.exceptions import (
    ERRORS_BY_CODE,
    ExtractionError,
    InvalidInputError,
    MalformedResponseError,
    RateLimitedError,
    ServiceUnavailableError,
)
from docuextract.extraction.models import ExtractionResult
from docuextract.extraction.validator import validate_and_build
from docuextract.logging.logger import Log


class HttpExtractionClient(BaseExtractionClient):
    """Calls the extraction HTTP API with a multipart file + type submission."""

    def __init__(
        self,
        *,
        api_url: str,
        timeout_seconds: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        base = api_url.rstrip("/")
        self._extract_url = f"{base}/extract"
        self._upload_url = f"{base}/upload"
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    async def extract(
        self,
        *,
        content: bytes,
        mime_type: str,
        document_type: DocumentType | str | None,
        file_name: str = "",
    ) -> ExtractionResult:
        if not content:
            raise InvalidInputError("No file provided")
        files = {"file": (file_name or "document.pdf", content, mime_type)}
        form = {"type": str(document_type or "")}
        try:
            async with self._client() as client:
                response = await client.post(self._extract_url, files=files, data=form)
        except httpx.HTTPError as exc:
            raise ServiceUnavailableError(
                "Extraction endpoint unreachable", details=str(exc)
            ) from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise MalformedResponseError(
                f"Extraction endpoint returned non-JSON (HTTP {response.status_code})",
                raw_text=response.text,
            ) from exc
        if not isinstance(body, dict):
            raise MalformedResponseError("Extraction endpoint returned non-object", raw_text=response.text)
        if response.is_error or body.get("error"):
            raise self._error_from(response.status_code, body)

        try:
            fields = validate_and_build(body.get("data"))
        except MalformedResponseError as exc:
            raise MalformedResponseError(exc.message, raw_text=response.text) from exc
        model = str(body.get("model") or "")
        return ExtractionResult(
            fields=fields,
            model_used=model,
            requested_model=str(body.get("requestedModel") or model),
            estimated_cost=float(body.get("cost") or 0.0),
            processing_time_seconds=float(body.get("processingTime") or 0.0),
        )

    async def health_check(self) -> bool:
        """Return True when the upload endpoint reports ok."""
        try:
            async with self._client() as client:
                response = await client.get(self._upload_url)
            return response.is_success and bool(response.json().get("ok"))
        except (httpx.HTTPError, ValueError, AttributeError) as exc:
            Log.warning(f"Health check against {self._upload_url} failed: {exc}")
            return False

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout_seconds, transport=self._transport)

    @staticmethod
    def _error_from(status_code: int, body: dict[str, Any]) -> ExtractionError:
        message = str(body.get("error") or f"Extraction failed (HTTP {status_code})")
        details = body.get("details")
        hint = body.get("hint")
        if status_code == 429:
            error_cls: type[ExtractionError] = RateLimitedError
        elif status_code == 400:
            error_cls = InvalidInputError
        else:
            error_cls = ERRORS_BY_CODE.get(str(body.get("code")), ServiceUnavailableError)
        if error_cls is MalformedResponseError:
            return MalformedResponseError(message, raw_text=str(details or ""), hint=hint)
        return error_cls(message, details=str(details) if details else None, hint=hint)
