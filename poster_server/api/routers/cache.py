# /api/cache
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from poster_backend.poster_cache import (
    PosterCacheGateway,
    PosterResult,
    TitleNotFoundError,
)
from poster_server.api.deps import get_poster_gateway, get_settings
from poster_server.api.services import metrics
from poster_server.api.settings import Settings

router = APIRouter()

MISSING_PARAM_ERROR = "imdb param required"


def _count(result: PosterResult) -> None:
    if result.cache_hit:
        metrics.inc("poster_cache_hit_total", 1)
        return
    metrics.inc("poster_cache_miss_total", 1)
    if result.stored:
        metrics.inc("poster_store_writes_total", 1)
    if result.poster_url is None:
        metrics.inc("poster_unavailable_total", 1)


@router.get("/api/cache")
def get_cached_poster(
    imdb: str | None = Query(None, description="IMDb id (p.ej. tt0133093)"),
    settings: Settings = Depends(get_settings),
    gateway: PosterCacheGateway = Depends(get_poster_gateway),
) -> JSONResponse:
    headers = settings.cors_headers()
    metrics.inc("poster_requests_total", 1)

    imdb_id = (imdb or "").strip()
    if not imdb_id:
        return JSONResponse(status_code=400, content={"error": MISSING_PARAM_ERROR}, headers=headers)

    try:
        result = gateway.get_poster(imdb_id)
    except TitleNotFoundError as exc:
        metrics.inc("poster_title_not_found_total", 1)
        return JSONResponse(status_code=404, content={"error": str(exc)}, headers=headers)

    _count(result)
    return JSONResponse(content=result.to_payload(), headers=headers)
