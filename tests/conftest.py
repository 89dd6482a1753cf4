import io

import pytest
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

TYPED_LINE = "Erika Mustermann, Heidestrasse 17, 51147 Koeln"


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with a text layer."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    c.drawString(72, 720, TYPED_LINE)
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with text on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    c.drawString(72, 720, "Page one content of the form")
    c.showPage()
    c.drawString(72, 720, "Page two content of the form")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF without any text layer, like a bare scan."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def mixed_pdf_bytes() -> bytes:
    """Generate a PDF whose first page has text and second page has none."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    c.drawString(72, 720, TYPED_LINE)
    c.showPage()
    c.showPage()
    c.save()
    return buf.getvalue()
