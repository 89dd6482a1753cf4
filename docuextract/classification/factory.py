from docuextract.classification.base import BaseClassifier
from docuextract.classification.random_classifier import RandomClassifier
from docuextract.classification.text_layer_classifier import TextLayerClassifier
from docuextract.config.settings import Settings
from docuextract.pdf.base import BasePdfExtractor
from docuextract.pdf.pdfplumber_adapter import PdfPlumberAdapter
from docuextract.pdf.pymupdf_adapter import PyMuPdfAdapter


class ClassifierFactory:
    """Creates the configured document classifier."""

    PDF_ENGINES: dict[str, type[BasePdfExtractor]] = {
        "pdfplumber": PdfPlumberAdapter,
        "pymupdf": PyMuPdfAdapter,
    }
    CLASSIFIERS = ("text_layer", "random")

    @classmethod
    def create(cls, settings: Settings) -> BaseClassifier:
        name = settings.classifier.lower()
        if name == "random":
            return RandomClassifier()
        if name == "text_layer":
            return TextLayerClassifier(
                cls.create_pdf_extractor(settings),
                min_page_chars=settings.classifier_min_page_chars,
            )
        raise ValueError(
            f"Unknown classifier '{name}'. Choose from: {list(cls.CLASSIFIERS)}"
        )

    @classmethod
    def create_pdf_extractor(cls, settings: Settings) -> BasePdfExtractor:
        engine = settings.pdf_engine.lower()
        adapter_cls = cls.PDF_ENGINES.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {list(cls.PDF_ENGINES)}"
            )
        return adapter_cls()
