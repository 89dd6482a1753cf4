"""Vision-language extraction with model fallback."""

import json
import re
import time
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from docuextract.documents.models import PDF_MIME_TYPE, DocumentType
from docuextract.extraction.base import BaseExtractionClient
from docuextract.extraction.client_base import BaseVisionClient
from docuextract.extraction.exceptions import (
    ExtractionError,
    InvalidInputError,
    MalformedResponseError,
    RateLimitedError,
    ServiceUnavailableError,
)
from docuextract.extraction.model_resolution import ModelResolutionStrategy, family_candidates
from docuextract.extraction.model_selection import MODEL_FAMILY_MARKER, ModelSelector, estimate_cost
from docuextract.extraction.models import ExtractionResult
from docuextract.extraction.prompt_loader import load_prompt_template
from docuextract.extraction.validator import validate_and_build
from docuextract.logging.logger import Log

_FENCE_RE = re.compile(r"```(?:json)?\n?")
_NO_STRATEGY_HINT = "No model resolution strategy configured. Set GEMINI_MODEL to a working model name."


class ExtractionService(BaseExtractionClient):
    """Extracts document fields by calling a vision client directly.

    A generation failure triggers the resolution strategies in order. The
    first model they discover gets exactly one more attempt; if nothing is
    found or that attempt fails too, the original failure is reported.
    """

    def __init__(
        self,
        *,
        client: BaseVisionClient,
        selector: ModelSelector,
        strategies: Sequence[ModelResolutionStrategy] = (),
        temperature: float = 0.0,
        family_marker: str = MODEL_FAMILY_MARKER,
        prompt_template_path: Path | None = None,
    ) -> None:
        self._client = client
        self._selector = selector
        self._strategies = list(strategies)
        self._temperature = max(0.0, min(0.2, temperature))
        self._family_marker = family_marker
        self._prompt_template = load_prompt_template(prompt_template_path)

    async def extract(
        self,
        *,
        content: bytes,
        mime_type: str,
        document_type: DocumentType | str | None,
        file_name: str = "",
    ) -> ExtractionResult:
        self._validate_input(content, mime_type)
        requested_model = self._selector.select(document_type)
        Log.info(f"Extracting {file_name or 'document'} ({document_type}) with {requested_model}")

        prompt = self._prompt_template.format(document_type=document_type or "unknown")
        started = time.monotonic()
        raw_text, model_used = await self._generate_with_fallback(
            requested_model, prompt, content, mime_type
        )
        Log.debug(f"AI raw response:\n{raw_text}")

        parsed = self.parse_json(raw_text)
        try:
            fields = validate_and_build(parsed)
        except MalformedResponseError as exc:
            raise MalformedResponseError(exc.message, raw_text=raw_text) from exc

        return ExtractionResult(
            fields=fields,
            model_used=model_used,
            requested_model=requested_model,
            estimated_cost=estimate_cost(model_used),
            processing_time_seconds=round(time.monotonic() - started, 3),
        )

    async def list_models(self) -> dict[str, list[Any]]:
        """Return the provider's models and the family candidates among them.

        Raises:
            ServiceUnavailableError: if no strategy can list models.
        """
        hints: list[str] = []
        for strategy in self._strategies:
            try:
                descriptors = await strategy.list_descriptors()
            except ExtractionError as exc:
                hints.append(exc.hint or exc.message)
                continue
            return {
                "models": descriptors,
                "candidates": family_candidates(descriptors, self._family_marker),
            }
        raise ServiceUnavailableError(
            "Failed to list models",
            hint=hints[-1] if hints else "No model listing strategy configured.",
        )

    @staticmethod
    def parse_json(raw: str) -> dict[str, Any]:
        """Strip fenced code block markers and parse the JSON object.

        Raises:
            MalformedResponseError: carrying the raw text when parsing fails.
        """
        cleaned = _FENCE_RE.sub("", raw).strip()
        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            raise MalformedResponseError(
                f"Failed to parse AI response: {exc}", raw_text=raw
            ) from exc
        if not isinstance(parsed, dict):
            raise MalformedResponseError("AI response must be a JSON object", raw_text=raw)
        return parsed

    async def _generate_with_fallback(
        self,
        requested_model: str,
        prompt: str,
        content: bytes,
        mime_type: str,
    ) -> tuple[str, str]:
        try:
            text = await self._generate(requested_model, prompt, content, mime_type)
            return text, requested_model
        except (ServiceUnavailableError, MalformedResponseError) as original:
            Log.error(f"Generation with {requested_model} failed: {original.describe()}")
            hint = _NO_STRATEGY_HINT
            for strategy in self._strategies:
                resolution = await strategy.resolve(requested_model, self._family_marker)
                if resolution.model is None:
                    hint = resolution.hint
                    continue
                Log.warning(
                    f"Falling back from {requested_model} to {resolution.model} ({strategy.name})"
                )
                try:
                    text = await self._generate(resolution.model, prompt, content, mime_type)
                except RateLimitedError:
                    raise
                except ExtractionError as fallback_exc:
                    Log.error(
                        f"Fallback generation with {resolution.model} failed: "
                        f"{fallback_exc.describe()}"
                    )
                    hint = (
                        f"Fallback model {resolution.model} also failed. "
                        "Set GEMINI_MODEL to a working model name."
                    )
                    break
                return text, resolution.model
            raise ServiceUnavailableError(
                "Model unavailable", details=original.describe(), hint=hint
            ) from original

    async def _generate(self, model: str, prompt: str, content: bytes, mime_type: str) -> str:
        return await self._client.generate(
            model=model,
            temperature=self._temperature,
            prompt=prompt,
            content=content,
            mime_type=mime_type,
        )

    @staticmethod
    def _validate_input(content: bytes, mime_type: str) -> None:
        if not content:
            raise InvalidInputError("No file provided")
        lowered = mime_type.lower()
        if lowered != PDF_MIME_TYPE and not lowered.startswith("image/"):
            raise InvalidInputError(f"Unsupported file type '{mime_type}'")
