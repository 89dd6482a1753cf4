from docuextract.extraction.base import BaseExtractionClient
from docuextract.extraction.factory import ExtractionFactory
from docuextract.extraction.http_client import HttpExtractionClient
from docuextract.extraction.service import ExtractionService

__all__ = [
    "BaseExtractionClient",
    "ExtractionFactory",
    "ExtractionService",
    "HttpExtractionClient",
]
