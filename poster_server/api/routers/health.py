from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Response

from poster_backend.object_store import ObjectStore, ObjectStoreError
from poster_backend.poster_cache import UrlMode
from poster_server.api.deps import get_object_store, get_settings
from poster_server.api.services import metrics
from poster_server.api.settings import Settings

router = APIRouter()


@router.get("/health")
def health() -> dict[str, Any]:
    return {"ok": True, "ts": datetime.now(timezone.utc).isoformat()}


@router.get("/ready")
def ready(
    settings: Settings = Depends(get_settings),
    store: ObjectStore = Depends(get_object_store),
) -> dict[str, Any]:
    """
    Readiness:
    - el bucket responde (HEAD bucket).
    - hay API key de OMDb.
    - en modo público hay STORJ_PUBLIC_BASE para construir URLs.
    El arranque no depende de esto: solo se informa.
    """
    issues: dict[str, str] = {}

    if not settings.omdb_api_key:
        issues["omdb"] = "OMDB_API_KEY no configurada"

    if settings.url_mode is UrlMode.PUBLIC and not settings.storj_public_base:
        issues["public_base"] = "STORJ_PUBLIC_BASE no configurada (url_mode=public)"

    try:
        store.ping()
    except ObjectStoreError as exc:
        issues["object_store"] = str(exc)

    if issues:
        raise HTTPException(status_code=503, detail={"ready": False, "issues": issues})

    return {
        "ready": True,
        "url_mode": settings.url_mode.value,
        "metadata_mode": settings.metadata_mode.value,
        "ts": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/metrics")
def metrics_endpoint() -> Response:
    body = metrics.render_prometheus()
    return Response(content=body, media_type="text/plain; version=0.0.4")
