"""HTTP surface: upload liveness, PDF upload check and the extraction endpoint.

Run with ``uvicorn --factory docuextract.api.app:create_app``.
"""

from typing import Any

from fastapi import FastAPI, File, Form, UploadFile
from fastapi.responses import JSONResponse

from docuextract.config.settings import Settings
from docuextract.documents.models import PDF_MIME_TYPE
from docuextract.extraction.exceptions import (
    ExtractionError,
    InvalidInputError,
    RateLimitedError,
)
from docuextract.extraction.factory import ExtractionFactory
from docuextract.extraction.models import ExtractedFields
from docuextract.extraction.service import ExtractionService
from docuextract.logging.logger import Log


def fields_payload(fields: ExtractedFields) -> dict[str, Any]:
    """Render fields with the same keys the provider is asked to return."""
    return {
        "name": fields.name,
        "address": fields.address,
        "postalcode": fields.postal_code,
        "city": fields.city,
        "birthday": fields.birthday,
        "date": fields.document_date,
        "time": fields.time,
        "handwritten": fields.handwritten,
        "signed": fields.signed,
        "stamp": fields.stamp,
        "confidence": fields.confidence,
    }


def error_response(exc: ExtractionError) -> JSONResponse:
    if isinstance(exc, InvalidInputError):
        status_code = 400
    elif isinstance(exc, RateLimitedError):
        status_code = 429
    else:
        status_code = 500
    body: dict[str, Any] = {"error": exc.message, "code": exc.code}
    if exc.details:
        body["details"] = exc.details
    if exc.hint:
        body["hint"] = exc.hint
    return JSONResponse(body, status_code=status_code)


def create_app(
    settings: Settings | None = None,
    service: ExtractionService | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    The extraction service is created on first use so a missing credential
    is reported per request instead of preventing startup.
    """
    settings = settings or Settings()
    Log.configure(settings.log_level, debug=settings.debug)
    app = FastAPI(title="DocuExtract")
    services: dict[str, ExtractionService] = {}
    if service is not None:
        services["default"] = service

    def get_service() -> ExtractionService:
        if "default" not in services:
            services["default"] = ExtractionFactory.create_service(settings)
        return services["default"]

    @app.get("/api/upload")
    async def upload_health() -> dict[str, bool]:
        return {"ok": True}

    @app.post("/api/upload", response_model=None)
    async def upload(file: UploadFile | None = File(None)) -> dict[str, Any] | JSONResponse:
        if file is None:
            return JSONResponse({"error": "No file uploaded"}, status_code=400)
        if file.content_type != PDF_MIME_TYPE:
            return JSONResponse({"error": "Only PDF files are allowed"}, status_code=400)
        content = await file.read()
        Log.info(f"PDF received: {file.filename} ({len(content)} bytes)")
        return {"success": True, "fileName": file.filename, "size": len(content)}

    @app.post("/api/extract", response_model=None)
    async def extract(
        file: UploadFile | None = File(None),
        document_type: str = Form("", alias="type"),
    ) -> dict[str, Any] | JSONResponse:
        try:
            if file is None:
                raise InvalidInputError("No file provided")
            content = await file.read()
            result = await get_service().extract(
                content=content,
                mime_type=file.content_type or "",
                document_type=document_type or None,
                file_name=file.filename or "",
            )
        except ExtractionError as exc:
            Log.error(f"Extraction request failed: {exc.describe()}")
            return error_response(exc)
        except Exception as exc:
            Log.error(f"Unexpected extraction failure: {exc!r}")
            return JSONResponse(
                {"error": "Extraction failed", "details": str(exc)}, status_code=500
            )
        return {
            "data": fields_payload(result.fields),
            "model": result.model_used,
            "requestedModel": result.requested_model,
            "cost": result.estimated_cost,
            "processingTime": result.processing_time_seconds,
        }

    @app.get("/api/extract", response_model=None)
    async def list_models() -> dict[str, Any] | JSONResponse:
        try:
            return await get_service().list_models()
        except ExtractionError as exc:
            return error_response(exc)

    return app
