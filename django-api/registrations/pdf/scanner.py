"""Streams the words of a PDF's text layer with their page and position.

Positions are reported in text-layer units rather than PDF points: the
origin is the top-left corner of the page, y grows downward, and one unit
is 1/50 of the page's width (x) or height (y). This is the space anchor
geometry in ``WAIVER_LAYOUTS`` is calibrated against.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass

import fitz  # PyMuPDF

from registrations.domain.errors import PdfScanError

logger = logging.getLogger(__name__)

TEXT_LAYER_SPAN = 50.0


@dataclass(frozen=True)
class TextToken:
    page: int
    text: str
    x: float
    y: float
    width: float | None = None


def open_pdf(pdf_bytes: bytes) -> fitz.Document:
    """Open PDF bytes as a fresh document, mapping parser failures to PdfScanError."""
    try:
        doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    except (RuntimeError, ValueError) as exc:
        logger.warning("Unreadable PDF (%d bytes): %s", len(pdf_bytes), exc)
        raise PdfScanError() from exc
    if doc.page_count == 0:
        doc.close()
        raise PdfScanError()
    return doc


def scan_tokens(pdf_bytes: bytes) -> Iterator[TextToken]:
    """
    Yield text tokens page by page, in content-stream order within a page.

    The iterator is lazy and forward-only; exhausting it is the completion
    signal. Pages are numbered from 1.
    """
    with open_pdf(pdf_bytes) as doc:
        for page_index in range(doc.page_count):
            try:
                page = doc[page_index]
                width, height = page.rect.width, page.rect.height
                words = page.get_text("words", sort=False)
            except (RuntimeError, ValueError) as exc:
                logger.warning("Unreadable PDF page %d: %s", page_index + 1, exc)
                raise PdfScanError() from exc
            logger.debug("Scanned page %d: %d words", page_index + 1, len(words))
            for x0, y0, x1, _y1, text, *_ in words:
                yield TextToken(
                    page=page_index + 1,
                    text=text,
                    x=x0 / width * TEXT_LAYER_SPAN,
                    y=y0 / height * TEXT_LAYER_SPAN,
                    width=(x1 - x0) / width * TEXT_LAYER_SPAN,
                )
