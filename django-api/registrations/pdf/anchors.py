"""Anchor resolution over a scanned token stream.

Resolution is a fold: each token updates an immutable accumulator, and the
result is decided once the stream is exhausted.
"""

from collections.abc import Iterable
from dataclasses import dataclass, replace
from functools import partial, reduce

from registrations.domain.errors import AnchorNotFoundError
from registrations.pdf.layout import TemplateLayout
from registrations.pdf.scanner import TextToken


@dataclass(frozen=True)
class Anchor:
    x: float
    y: float
    page: int
    source_text: str


@dataclass(frozen=True)
class ResolvedAnchors:
    signature: Anchor
    date: Anchor | None = None


@dataclass(frozen=True)
class AnchorScan:
    exact: tuple[Anchor, ...] = ()
    fallback: tuple[Anchor, ...] = ()
    date: Anchor | None = None
    current_page: int = 0


def normalize(text: str) -> str:
    return "".join(text.split()).lower()


def accumulate(layout: TemplateLayout, scan: AnchorScan, token: TextToken) -> AnchorScan:
    scan = replace(scan, current_page=token.page)
    anchor = Anchor(x=token.x, y=token.y, page=token.page, source_text=token.text)

    normalized = normalize(token.text)
    if normalized == layout.signature_text:
        scan = replace(scan, exact=scan.exact + (anchor,))
    elif normalized.startswith(layout.signature_prefix):
        scan = replace(scan, fallback=scan.fallback + (anchor,))

    if (
        scan.date is None
        and layout.date_line is not None
        and layout.date_line.matches(token.text, token.x, token.y, token.width)
    ):
        scan = replace(scan, date=anchor)
    return scan


def first_in_scan_order(candidates: tuple[Anchor, ...]) -> Anchor | None:
    # sorted() is stable, so stream order is kept within a page
    ordered = sorted(candidates, key=lambda a: a.page)
    return ordered[0] if ordered else None


def finalize(scan: AnchorScan) -> ResolvedAnchors:
    """Pick the first exact signature candidate, else the first prefix candidate.

    Raises:
        AnchorNotFoundError: If the template has neither.
    """
    signature = first_in_scan_order(scan.exact) or first_in_scan_order(scan.fallback)
    if signature is None:
        raise AnchorNotFoundError()
    return ResolvedAnchors(signature=signature, date=scan.date)


def resolve_anchors(tokens: Iterable[TextToken], layout: TemplateLayout) -> ResolvedAnchors:
    return finalize(reduce(partial(accumulate, layout), tokens, AnchorScan()))
