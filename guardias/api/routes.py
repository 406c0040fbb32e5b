from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import Response
from pydantic import BaseModel, ConfigDict, Field
from starlette.concurrency import run_in_threadpool

from guardias.core.constants import REGIONS, ZONES
from guardias.core.models import DocumentDescriptor
from guardias.core.serialization import collection_to_payload, schedule_to_payload
from guardias.parsers.errors import (
    ParseError,
    UnknownRegionError,
    UnreadableDocumentError,
    UnrecognizedLayoutError,
)

router = APIRouter()
logger = logging.getLogger("guardias.api")


class DocumentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    path: str
    url: str = ""
    last_modified: str | None = Field(default=None, alias="lastModified")
    content_length: int | None = Field(default=None, alias="contentLength")
    etag: str | None = None
    downloaded_at: datetime | None = Field(default=None, alias="downloadedAt")

    def descriptor(self) -> DocumentDescriptor:
        return DocumentDescriptor(
            url=self.url,
            last_modified=self.last_modified,
            content_length=self.content_length,
            etag=self.etag,
            downloaded_at=self.downloaded_at,
        )


def _http_error(exc: ParseError) -> HTTPException:
    if isinstance(exc, UnknownRegionError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, UnreadableDocumentError):
        code = "unreadable_document"
    elif isinstance(exc, UnrecognizedLayoutError):
        code = "unrecognized_layout"
    else:
        code = "parse_error"
    return HTTPException(status_code=422, detail={"code": code, "message": str(exc)})


@router.get("/healthz")
async def healthz(request: Request) -> dict:
    settings = request.app.state.settings
    return {
        "status": "ok",
        "cache": {
            "backend": settings.cache_backend,
            "enabled": settings.cache_enabled,
        },
    }


@router.get("/readyz")
async def readyz(request: Request) -> dict:
    cache = request.app.state.cache
    try:
        cache.ping()
    except Exception as exc:  # pragma: no cover
        raise HTTPException(status_code=503, detail=f"cache not ready: {exc}") from exc

    return {"status": "ready"}


@router.get("/v1/regions")
async def list_regions() -> dict:
    items = []
    for region in REGIONS.values():
        item = {
            "id": region.id,
            "name": region.name,
            "icon": region.icon,
            "pdfUrl": region.pdf_url,
            "notes": region.metadata.notes,
            "has24h": region.metadata.has_24h,
        }
        if region.id == "rural":
            item["zones"] = [{"id": zone.id, "name": zone.name, "icon": zone.icon} for zone in ZONES]
        items.append(item)
    return {"count": len(items), "items": items}


@router.post("/v1/regions/{region_id}/schedules")
async def parse_region_schedules(region_id: str, body: DocumentRequest, request: Request) -> dict:
    service = request.app.state.service
    try:
        collection = await run_in_threadpool(
            service.load, region_id, body.path, body.descriptor()
        )
    except ParseError as exc:
        logger.warning("Rejected document for %s: %s", region_id, exc)
        raise _http_error(exc) from exc
    return collection_to_payload(region_id, collection)


@router.get("/v1/regions/{region_id}/schedules")
async def cached_region_schedules(
    region_id: str,
    request: Request,
    fingerprint: str = Query(),
) -> dict:
    try:
        collection = request.app.state.service.cached(region_id, fingerprint)
    except ParseError as exc:
        raise _http_error(exc) from exc
    if collection is None:
        raise HTTPException(status_code=404, detail="No cached schedule for this document")
    return collection_to_payload(region_id, collection)


@router.get("/v1/regions/{region_id}/zones/{zone_id}/schedules")
async def zone_schedules(
    region_id: str,
    zone_id: str,
    request: Request,
    fingerprint: str = Query(),
) -> dict:
    try:
        schedules = request.app.state.service.zone_schedules(region_id, zone_id, fingerprint)
    except ParseError as exc:
        raise _http_error(exc) from exc
    if schedules is None:
        raise HTTPException(status_code=404, detail="No cached schedule for this document")
    return {
        "regionId": region_id,
        "zoneId": zone_id,
        "count": len(schedules),
        "schedules": [schedule_to_payload(item) for item in schedules],
    }


@router.delete("/v1/regions/{region_id}/cache")
async def invalidate_region(region_id: str, request: Request) -> dict:
    try:
        request.app.state.service.invalidate(region_id)
    except ParseError as exc:
        raise _http_error(exc) from exc
    return {"regionId": region_id, "status": "invalidated"}


@router.get("/v1/cache")
async def cache_entries(request: Request) -> dict:
    entries = request.app.state.cache.list_entries()
    return {"count": len(entries), "items": entries}


@router.delete("/v1/cache")
async def clear_cache(request: Request) -> dict:
    removed = request.app.state.cache.clear()
    request.app.state.service.zone_cache.clear()
    return {"removed": removed}


@router.get("/metrics")
async def metrics(request: Request) -> Response:
    payload, content_type = request.app.state.metrics.render()
    return Response(content=payload, media_type=content_type)
