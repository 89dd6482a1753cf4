from dataclasses import dataclass


@dataclass(frozen=True)
class ExtractedFields:
    """Validated fields as returned by the provider."""

    name: str | None = None
    address: str | None = None
    postal_code: str | None = None
    city: str | None = None
    birthday: str | None = None
    document_date: str | None = None
    time: str | None = None
    handwritten: bool = False
    signed: bool = False
    stamp: str | None = None
    confidence: int | None = None
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class ExtractionResult:
    """Output of one extraction request.

    ``model_used`` differs from ``requested_model`` when a fallback model
    answered the request.
    """

    fields: ExtractedFields
    model_used: str
    requested_model: str
    estimated_cost: float
    processing_time_seconds: float

    @property
    def used_fallback(self) -> bool:
        return self.model_used != self.requested_model
