from __future__ import annotations


class ParseError(RuntimeError):
    pass


class UnreadableDocumentError(ParseError):
    """The PDF is missing, corrupt or has no pages."""


class UnrecognizedLayoutError(ParseError):
    """Extraction finished but no dated entry was recovered from any page."""

    def __init__(self, region_id: str, page_count: int) -> None:
        super().__init__(
            f"No duty dates recognized for region {region_id!r} across {page_count} page(s); "
            "the document layout may have changed"
        )
        self.region_id = region_id
        self.page_count = page_count


class UnknownRegionError(ParseError):
    pass
