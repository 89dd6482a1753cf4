from docuextract.config.settings import Settings
from docuextract.extraction.base import BaseExtractionClient
from docuextract.extraction.client_base import BaseVisionClient
from docuextract.extraction.example_client_adapter import ExampleVisionClientAdapter
from docuextract.extraction.exceptions import ConfigurationError
from docuextract.extraction.http_client import HttpExtractionClient
from docuextract.extraction.model_resolution import (
    ClientModelListingStrategy,
    HttpModelListingStrategy,
    ModelResolutionStrategy,
)
from docuextract.extraction.model_selection import ModelSelector
from docuextract.extraction.openai_client_adapter import OpenAIVisionClientAdapter
from docuextract.extraction.service import ExtractionService


class ExtractionFactory:
    """Creates the configured extraction service or pipeline-side client."""

    PROVIDERS = ("gemini", "example")

    @classmethod
    def create_client(cls, settings: Settings) -> BaseExtractionClient:
        """Client used by the pipeline: the HTTP API when configured, else in-process."""
        api_url = settings.extraction_api_url.strip()
        if api_url:
            return HttpExtractionClient(
                api_url=api_url,
                timeout_seconds=float(settings.gemini_timeout_seconds) * 2,
            )
        return cls.create_service(settings)

    @classmethod
    def create_service(cls, settings: Settings) -> ExtractionService:
        """Build the in-process service.

        Raises:
            ConfigurationError: if the gemini provider has no API key.
            ValueError: if the provider is unknown.
        """
        provider = settings.extraction_provider.lower()
        client = cls._create_vision_client(provider, settings)
        return ExtractionService(
            client=client,
            selector=ModelSelector(override=settings.gemini_model),
            strategies=cls._create_strategies(client, settings),
            temperature=settings.extraction_temperature,
        )

    @classmethod
    def _create_vision_client(cls, provider: str, settings: Settings) -> BaseVisionClient:
        if provider == "example":
            return ExampleVisionClientAdapter()
        if provider == "gemini":
            if not settings.gemini_api_key:
                raise ConfigurationError(
                    "GEMINI_API_KEY not configured",
                    hint="Set GEMINI_API_KEY in the environment or .env file.",
                )
            return OpenAIVisionClientAdapter(
                api_key=settings.gemini_api_key,
                timeout_seconds=settings.gemini_timeout_seconds,
                base_url=settings.gemini_base_url or None,
            )
        raise ValueError(
            f"Unknown extraction provider '{provider}'. Choose from: {list(cls.PROVIDERS)}"
        )

    @classmethod
    def _create_strategies(
        cls, client: BaseVisionClient, settings: Settings
    ) -> list[ModelResolutionStrategy]:
        strategies: list[ModelResolutionStrategy] = [ClientModelListingStrategy(client)]
        if settings.gemini_api_key:
            strategies.append(
                HttpModelListingStrategy(
                    models_url=settings.gemini_models_url,
                    api_key=settings.gemini_api_key,
                    timeout_seconds=float(settings.gemini_timeout_seconds),
                )
            )
        return strategies
