from abc import ABC, abstractmethod
from typing import Any, ClassVar


class BaseVisionClient(ABC):
    """Contract for provider-specific vision-language model clients."""

    supports_model_listing: ClassVar[bool] = False

    @abstractmethod
    async def generate(
        self,
        *,
        model: str,
        temperature: float,
        prompt: str,
        content: bytes,
        mime_type: str,
    ) -> str:
        """Return the provider response for one document as plain text."""

    async def list_models(self) -> list[Any]:
        """Return the provider's model descriptors.

        Only available when ``supports_model_listing`` is True.
        """
        raise NotImplementedError(f"{type(self).__name__} cannot enumerate models")
