"""Stamps the signature, names and signing date onto waiver templates.

Anchors are resolved once per template; every participant is then drawn
onto its own freshly loaded copy of the template bytes.
"""

import logging
from dataclasses import dataclass
from datetime import date

import fitz  # PyMuPDF

from registrations.domain.errors import WaiverCompositionError
from registrations.pdf.anchors import Anchor, ResolvedAnchors, resolve_anchors
from registrations.pdf.layout import AxisScale, TemplateLayout
from registrations.pdf.scanner import open_pdf, scan_tokens
from registrations.pdf.transform import RenderPoint, to_render_space

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlacedAnchors:
    """Resolved anchors already mapped to render space."""

    signature: RenderPoint
    date: RenderPoint | None
    resolved: ResolvedAnchors


@dataclass(frozen=True)
class Stamp:
    guardian_name: str
    participant_name: str
    signed_on: date


def format_signing_date(value: date) -> str:
    return f"{value.month}/{value.day}/{value.year}"


class WaiverCompositor:
    """Overlays signature content onto one template family's layout."""

    def __init__(self, layout: TemplateLayout | None = None) -> None:
        self.layout = layout or TemplateLayout()

    def place_anchors(self, template_bytes: bytes) -> PlacedAnchors:
        """
        Locate the signature and date anchors and transform them to render space.

        Raises:
            PdfScanError: If the template cannot be parsed.
            AnchorNotFoundError: If no signature anchor exists.
        """
        resolved = resolve_anchors(scan_tokens(template_bytes), self.layout)
        with open_pdf(template_bytes) as doc:
            signature = self._place(doc, resolved.signature, self.layout.signature_scale)
            placed_date = None
            if resolved.date is not None:
                placed_date = self._place(doc, resolved.date, self.layout.date_scale)

        logger.info(
            "Signature anchor %r on page %d at (%.1f, %.1f); date anchor %s",
            resolved.signature.source_text,
            signature.page,
            signature.x,
            signature.y,
            "found" if placed_date else "absent",
        )
        return PlacedAnchors(signature=signature, date=placed_date, resolved=resolved)

    def composite(
        self,
        template_bytes: bytes,
        signature_image: bytes,
        stamp: Stamp,
        anchors: PlacedAnchors,
    ) -> bytes:
        """
        Produce one participant's signed PDF.

        Raises:
            WaiverCompositionError: If the image cannot be embedded or the
                document cannot be serialized.
        """
        layout = self.layout
        with open_pdf(template_bytes) as doc:
            try:
                if anchors.date is not None:
                    date_page = doc[anchors.date.page - 1]
                    self._draw_text(
                        date_page,
                        format_signing_date(stamp.signed_on),
                        anchors.date.x,
                        anchors.date.y,
                        layout.date_font_size,
                    )

                sig = anchors.signature
                page = doc[sig.page - 1]
                width, height = self._embed_signature(page, signature_image, sig)
                center_x = sig.x + width / 2

                guardian_y = sig.y - (height + layout.guardian_gap)
                self._draw_centered(page, stamp.guardian_name, center_x, guardian_y)

                participant_y = guardian_y - (layout.name_font_size + layout.participant_gap)
                self._draw_centered(page, stamp.participant_name, center_x, participant_y)

                return doc.tobytes(garbage=3, deflate=True)
            except Exception as exc:  # MuPDF raises its own error types for bad images
                logger.warning("Failed to stamp waiver for %s: %s", stamp.participant_name, exc)
                raise WaiverCompositionError() from exc

    def _place(self, doc: fitz.Document, anchor: Anchor, scale: AxisScale) -> RenderPoint:
        rect = doc[anchor.page - 1].rect
        return to_render_space(anchor, rect.width, rect.height, scale)

    def _embed_signature(self, page: fitz.Page, image: bytes, at: RenderPoint) -> tuple[float, float]:
        pixmap = fitz.Pixmap(image)
        width = pixmap.width * self.layout.image_scale
        height = pixmap.height * self.layout.image_scale
        # render space y is the image's top edge; fitz measures from the page top
        top = page.rect.height - at.y
        page.insert_image(fitz.Rect(at.x, top, at.x + width, top + height), stream=image, keep_proportion=False)
        return width, height

    def _draw_centered(self, page: fitz.Page, text: str, center_x: float, y: float) -> None:
        size = self.layout.name_font_size
        text_width = fitz.get_text_length(text, fontname=self.layout.font_name, fontsize=size)
        self._draw_text(page, text, center_x - text_width / 2, y, size)

    def _draw_text(self, page: fitz.Page, text: str, x: float, y: float, size: float) -> None:
        page.insert_text(
            fitz.Point(x, page.rect.height - y),
            text,
            fontsize=size,
            fontname=self.layout.font_name,
        )
