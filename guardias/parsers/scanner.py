"""Column scanning over a single PDF page.

Blocks are produced in reading order: ``TextBlock.y`` is the distance from
the top edge of the page and grows downwards. Each scan window is converted
back to native bottom-left coordinates before it reaches the extractor, so
column geometry stays expressed in the document's own space.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterator, Sequence

import numpy as np

from guardias.parsers.extraction import Rect, extract_text

logger = logging.getLogger("guardias.parser")


@dataclass(frozen=True)
class Margins:
    left: float = 0.0
    right: float = 0.0
    top: float = 0.0
    bottom: float = 0.0


@dataclass(frozen=True)
class ColumnSpec:
    name: str
    x: float
    width: float


@dataclass(frozen=True)
class TextBlock:
    column: str
    y: float
    text: str


def scan_columns(
    page: Any,
    columns: Sequence[ColumnSpec],
    *,
    scan_height: float,
    scan_step: float,
    margins: Margins = Margins(),
) -> Iterator[TextBlock]:
    if scan_step <= 0 or scan_height <= 0 or not columns:
        return

    try:
        page_height = float(page.height)
    except Exception as exc:
        logger.debug("Skipping page without geometry: %s", exc)
        return
    stop = page_height - margins.bottom
    last_text: dict[str, str] = {}

    for offset in np.arange(margins.top, stop, scan_step):
        y = float(offset)
        for column in columns:
            rect = Rect(
                x=column.x,
                y=page_height - y - scan_height,
                width=column.width,
                height=scan_height,
            )
            text = extract_text(page, rect)
            if text is None:
                continue
            if last_text.get(column.name) == text:
                continue
            last_text[column.name] = text
            yield TextBlock(column=column.name, y=y, text=text)
