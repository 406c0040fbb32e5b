from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterator

import pdfplumber

from guardias.parsers.errors import UnreadableDocumentError

logger = logging.getLogger("guardias.parser")


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in native PDF space (origin bottom-left, y up)."""

    x: float
    y: float
    width: float
    height: float


def extract_text(page: Any, rect: Rect) -> str | None:
    """Return the trimmed text intersecting ``rect`` or ``None``.

    pdfplumber addresses pages from the top-left corner, so the rectangle is
    flipped against the page height before cropping. Failures inside the page
    degrade to ``None``.
    """
    try:
        page_width = float(page.width)
        page_height = float(page.height)
        x0 = max(rect.x, 0.0)
        x1 = min(rect.x + rect.width, page_width)
        top = max(page_height - (rect.y + rect.height), 0.0)
        bottom = min(page_height - rect.y, page_height)
        if x1 <= x0 or bottom <= top:
            return None
        text = page.crop((x0, top, x1, bottom), relative=True).extract_text()
    except Exception as exc:
        logger.debug("Text extraction failed for %s: %s", rect, exc)
        return None

    if not text:
        return None
    text = text.strip()
    return text or None


def smallest_font_size(page: Any, fallback: float) -> float:
    try:
        sizes = [float(char["size"]) for char in page.chars if char.get("size")]
    except Exception as exc:
        logger.debug("Font metadata unavailable: %s", exc)
        return fallback
    if not sizes:
        return fallback
    return min(sizes)


DocumentOpener = Callable[[Path], Any]


@contextmanager
def open_document(path: Path, opener: DocumentOpener | None = None) -> Iterator[Any]:
    open_pdf = opener or pdfplumber.open
    if not path.is_file():
        raise UnreadableDocumentError(f"PDF not found: {path}")

    try:
        document = open_pdf(path)
    except Exception as exc:
        raise UnreadableDocumentError(f"Could not open PDF {path}: {exc}") from exc

    try:
        try:
            page_count = len(document.pages)
        except Exception as exc:
            raise UnreadableDocumentError(f"Could not read pages of {path}: {exc}") from exc
        if page_count == 0:
            raise UnreadableDocumentError(f"PDF has no pages: {path}")
        yield document
    finally:
        document.close()
