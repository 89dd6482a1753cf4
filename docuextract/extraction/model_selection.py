from docuextract.documents.models import DocumentType

HEAVY_MODEL = "gemini-2.5-pro"
LIGHT_MODEL = "gemini-2.5-flash"
MODEL_FAMILY_MARKER = "gemini"

# Cost figures are a rough approximation for dashboards, not billing data:
# every request is assumed to use a fixed token budget.
ESTIMATED_TOKENS = 1000
HEAVY_COST_PER_TOKEN = 0.000002
LIGHT_COST_PER_TOKEN = 0.0000005


class ModelSelector:
    """Picks the model to request for a document type hint."""

    def __init__(
        self,
        *,
        override: str = "",
        heavy_model: str = HEAVY_MODEL,
        light_model: str = LIGHT_MODEL,
    ) -> None:
        self._override = override.strip()
        self._heavy_model = heavy_model
        self._light_model = light_model

    def select(self, document_type: DocumentType | str | None) -> str:
        if self._override:
            return self._override
        if document_type in (DocumentType.HANDWRITTEN, DocumentType.MIXED):
            return self._heavy_model
        return self._light_model


def is_heavy_model(model: str) -> bool:
    return "pro" in model.lower()


def estimate_cost(model: str) -> float:
    """Approximate request cost for the model that answered."""
    rate = HEAVY_COST_PER_TOKEN if is_heavy_model(model) else LIGHT_COST_PER_TOKEN
    return ESTIMATED_TOKENS * rate
