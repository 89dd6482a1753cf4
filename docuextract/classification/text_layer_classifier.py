import asyncio

from docuextract.classification.base import BaseClassifier
from docuextract.documents.models import DocumentType
from docuextract.logging.logger import Log
from docuextract.pdf.base import BasePdfExtractor


class TextLayerClassifier(BaseClassifier):
    """Classifies a PDF by how many of its pages carry a text layer.

    Scans of handwritten forms have no text layer, born-digital documents
    have one on every page, and anything in between is treated as mixed.
    """

    def __init__(self, pdf_extractor: BasePdfExtractor, min_page_chars: int = 20) -> None:
        self._pdf_extractor = pdf_extractor
        self._min_page_chars = min_page_chars

    async def classify(self, content: bytes) -> DocumentType:
        pages = await asyncio.to_thread(self._pdf_extractor.extract_pages, content)
        typed_pages = sum(1 for text in pages if len(text) >= self._min_page_chars)
        Log.debug(f"Text layer found on {typed_pages}/{len(pages)} pages")
        if pages and typed_pages == len(pages):
            return DocumentType.TYPED
        if typed_pages == 0:
            return DocumentType.HANDWRITTEN
        return DocumentType.MIXED
