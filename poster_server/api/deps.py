from __future__ import annotations

"""
Wiring de colaboradores (settings, store, OMDb, descargas, gateway).

Se construyen perezosamente y una sola vez por proceso; los tests los
sustituyen con `app.dependency_overrides`.
"""

import threading

from poster_backend.http_session import get_shared_session
from poster_backend.image_fetcher import ImageFetcher
from poster_backend.object_store import (
    InMemoryObjectStore,
    ObjectStore,
    S3ObjectStore,
    build_s3_client,
)
from poster_backend.omdb_client import OmdbClient
from poster_backend.poster_cache import PosterCacheGateway
from poster_server.api.settings import Settings

_SETTINGS = Settings.from_env()

_LOCK = threading.Lock()
_STORE: ObjectStore | None = None
_FETCHER: ImageFetcher | None = None
_GATEWAY: PosterCacheGateway | None = None


def build_object_store(settings: Settings) -> ObjectStore:
    if settings.object_store_backend == "memory":
        return InMemoryObjectStore()

    client = build_s3_client(
        endpoint_url=settings.storj_endpoint or None,
        access_key=settings.storj_access_key or None,
        secret_key=settings.storj_secret_key or None,
        region=settings.storj_region,
    )
    return S3ObjectStore(client=client, bucket=settings.storj_bucket)


def build_gateway(settings: Settings, *, store: ObjectStore, images: ImageFetcher) -> PosterCacheGateway:
    session = get_shared_session(user_agent=settings.http_user_agent)
    omdb = OmdbClient(
        api_key=settings.omdb_api_key,
        session=session,
        base_url=settings.omdb_base_url,
        timeout_s=settings.http_timeout_s,
    )
    return PosterCacheGateway(
        store=store,
        metadata=omdb,
        images=images,
        config=settings.gateway_config(),
    )


def get_settings() -> Settings:
    return _SETTINGS


def get_object_store() -> ObjectStore:
    global _STORE
    with _LOCK:
        if _STORE is None:
            _STORE = build_object_store(_SETTINGS)
        return _STORE


def get_image_fetcher() -> ImageFetcher:
    global _FETCHER
    with _LOCK:
        if _FETCHER is None:
            session = get_shared_session(user_agent=_SETTINGS.http_user_agent)
            _FETCHER = ImageFetcher(session=session, timeout_s=_SETTINGS.http_timeout_s)
        return _FETCHER


def get_poster_gateway() -> PosterCacheGateway:
    global _GATEWAY
    store = get_object_store()
    images = get_image_fetcher()
    with _LOCK:
        if _GATEWAY is None:
            _GATEWAY = build_gateway(_SETTINGS, store=store, images=images)
        return _GATEWAY
