from abc import ABC, abstractmethod


class BasePdfExtractor(ABC):
    """Contract for all PDF text-layer adapters."""

    @abstractmethod
    def extract_pages(self, pdf_bytes: bytes) -> list[str]:
        """Extract the text layer of every page.

        Args:
            pdf_bytes: Raw PDF file content.

        Returns:
            One string per page, empty for pages without a text layer.

        Raises:
            PdfExtractionError: if the PDF cannot be parsed.
        """
