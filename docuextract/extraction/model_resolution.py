"""Fallback model discovery.

When the requested model cannot serve a request, the extraction service
walks an ordered list of strategies. Each one either names a usable model
or passes through to the next, explaining why in its hint.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

import httpx

from docuextract.extraction.client_base import BaseVisionClient
from docuextract.extraction.exceptions import ExtractionError
from docuextract.extraction.model_selection import MODEL_FAMILY_MARKER
from docuextract.logging.logger import Log

GENERATE_METHOD = "generateContent"
_IDENTIFIER_KEYS = ("name", "id", "model")
_METHOD_KEYS = ("supportedGenerationMethods", "supportedMethods", "methods")


@dataclass(frozen=True)
class Resolution:
    """Outcome of one strategy: a model id, or None with the reason in hint."""

    model: str | None
    hint: str = ""


def extract_descriptors(payload: Any) -> list[Any]:
    """Accept a bare sequence or an object with a ``models`` field."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        models = payload.get("models")
        return list(models) if isinstance(models, list) else []
    return []


def model_identifier(descriptor: Any) -> str:
    for key in _IDENTIFIER_KEYS:
        value = descriptor.get(key) if isinstance(descriptor, dict) else getattr(descriptor, key, None)
        if value:
            return str(value)
    return ""


def supported_methods(descriptor: Any) -> list[str] | None:
    for key in _METHOD_KEYS:
        value = descriptor.get(key) if isinstance(descriptor, dict) else getattr(descriptor, key, None)
        if isinstance(value, (list, tuple)):
            return [str(v) for v in value]
    return None


def _bare_name(model: str) -> str:
    return model.lower().removeprefix("models/")


def family_candidates(descriptors: Iterable[Any], family_marker: str = MODEL_FAMILY_MARKER) -> list[Any]:
    marker = family_marker.lower()
    return [d for d in descriptors if marker in model_identifier(d).lower()]


def select_fallback_model(
    descriptors: Sequence[Any],
    *,
    family_marker: str = MODEL_FAMILY_MARKER,
    exclude: str | None = None,
) -> str | None:
    """Pick the first family model that declares generation support.

    When no descriptor declares generation support, the first family match
    wins regardless of its metadata. The model that just failed is never
    offered again.
    """
    candidates = [
        d
        for d in family_candidates(descriptors, family_marker)
        if exclude is None or _bare_name(model_identifier(d)) != _bare_name(exclude)
    ]
    for descriptor in candidates:
        methods = supported_methods(descriptor)
        if methods is not None and GENERATE_METHOD in methods:
            return model_identifier(descriptor)
    if candidates:
        return model_identifier(candidates[0])
    return None


class ModelResolutionStrategy(ABC):
    """One way of discovering a fallback model."""

    name = "strategy"

    @abstractmethod
    async def list_descriptors(self) -> list[Any]:
        """Return raw model descriptors.

        Raises:
            ExtractionError: if this strategy is unavailable or the listing failed.
        """

    async def resolve(self, requested_model: str, family_marker: str = MODEL_FAMILY_MARKER) -> Resolution:
        try:
            descriptors = await self.list_descriptors()
        except ExtractionError as exc:
            Log.warning(f"Model listing via {self.name} failed: {exc.describe()}")
            return Resolution(model=None, hint=exc.hint or exc.message)
        model = select_fallback_model(descriptors, family_marker=family_marker, exclude=requested_model)
        if model is None:
            return Resolution(
                model=None,
                hint=(
                    f"No {family_marker} models discovered via {self.name}. "
                    "Set GEMINI_MODEL to a working model name or verify your API key/project permissions."
                ),
            )
        return Resolution(model=model)


class ClientModelListingStrategy(ModelResolutionStrategy):
    """Uses the provider client's own model enumeration."""

    name = "client"

    def __init__(self, client: BaseVisionClient) -> None:
        self._client = client

    async def list_descriptors(self) -> list[Any]:
        if not self._client.supports_model_listing:
            raise ExtractionError(
                "Client does not support model listing",
                hint=(
                    f"{type(self._client).__name__} cannot enumerate models. "
                    "Set GEMINI_MODEL to a working model name."
                ),
            )
        return extract_descriptors(await self._client.list_models())


class HttpModelListingStrategy(ModelResolutionStrategy):
    """Queries the provider's model-listing endpoint with the API key."""

    name = "REST"

    def __init__(
        self,
        *,
        models_url: str,
        api_key: str,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._models_url = models_url
        self._api_key = api_key
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    async def list_descriptors(self) -> list[Any]:
        if not self._api_key:
            raise ExtractionError(
                "No API key for model listing",
                hint="Set GEMINI_API_KEY to enable model discovery.",
            )
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_seconds, transport=self._transport
            ) as client:
                response = await client.get(self._models_url, params={"key": self._api_key})
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise ExtractionError(
                "REST model listing failed",
                details=str(exc),
                hint="Failed to discover models via REST. Set GEMINI_MODEL to a working model name.",
            ) from exc
        Log.debug(f"Model listing response (REST): {payload}")
        return extract_descriptors(payload)
