# /gist: passthrough de texto, sin caché
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from poster_backend.image_fetcher import ImageFetcher
from poster_server.api.deps import get_image_fetcher, get_settings
from poster_server.api.services import metrics
from poster_server.api.settings import Settings

router = APIRouter()


@router.get("/gist", response_class=PlainTextResponse)
def gist(
    settings: Settings = Depends(get_settings),
    fetcher: ImageFetcher = Depends(get_image_fetcher),
) -> PlainTextResponse:
    if not settings.gist_url:
        raise HTTPException(status_code=404, detail="GIST_URL no configurado")

    metrics.inc("gist_requests_total", 1)
    text = fetcher.fetch_text(settings.gist_url)
    return PlainTextResponse(content=text, headers=settings.cors_headers())
