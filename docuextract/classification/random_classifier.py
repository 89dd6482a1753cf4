import random

from docuextract.classification.base import BaseClassifier
from docuextract.documents.models import DocumentType


class RandomClassifier(BaseClassifier):
    """Placeholder classifier: a coin flip between typed and handwritten."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng if rng is not None else random.Random()

    async def classify(self, content: bytes) -> DocumentType:
        _ = content
        return DocumentType.TYPED if self._rng.random() > 0.5 else DocumentType.HANDWRITTEN
