from abc import ABC, abstractmethod

from docuextract.documents.models import DocumentType


class BaseClassifier(ABC):
    """Contract for document type classifiers.

    The returned hint only steers model selection; it never changes the
    extracted content.
    """

    @abstractmethod
    async def classify(self, content: bytes) -> DocumentType:
        """Return one of typed, handwritten or mixed for the given PDF bytes."""
