import base64
from typing import Any, ClassVar

import httpx
import openai

from docuextract.extraction.client_base import BaseVisionClient
from docuextract.extraction.exceptions import (
    MalformedResponseError,
    RateLimitedError,
    ServiceUnavailableError,
)


class OpenAIVisionClientAdapter(BaseVisionClient):
    """Vision client built on an OpenAI-compatible chat API (Gemini by default)."""

    supports_model_listing: ClassVar[bool] = True

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.AsyncOpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )

    async def generate(
        self,
        *,
        model: str,
        temperature: float,
        prompt: str,
        content: bytes,
        mime_type: str,
    ) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            self._document_part(content, mime_type),
                            {"type": "text", "text": prompt},
                        ],
                    },
                ],
            )
        except openai.RateLimitError as exc:
            raise RateLimitedError("AI provider rate limit reached", details=str(exc)) from exc
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise ServiceUnavailableError(
                f"AI provider network error for model {model}", details=str(exc)
            ) from exc
        except openai.APIError as exc:
            raise ServiceUnavailableError(
                f"AI provider API error for model {model}", details=str(exc)
            ) from exc

        if not response.choices:
            raise MalformedResponseError("AI returned no choices")
        text = response.choices[0].message.content
        if text is None:
            raise MalformedResponseError("AI returned empty response")
        return text

    async def list_models(self) -> list[Any]:
        try:
            return [
                {"id": model.id, "owned_by": getattr(model, "owned_by", None)}
                async for model in self._client.models.list()
            ]
        except openai.APIError as exc:
            raise ServiceUnavailableError("AI provider model listing failed", details=str(exc)) from exc

    @staticmethod
    def _document_part(content: bytes, mime_type: str) -> dict[str, Any]:
        data_url = f"data:{mime_type};base64,{base64.b64encode(content).decode('ascii')}"
        if mime_type.startswith("image/"):
            return {"type": "image_url", "image_url": {"url": data_url}}
        return {"type": "file", "file": {"filename": "document.pdf", "file_data": data_url}}
