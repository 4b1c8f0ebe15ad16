from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from poster_server.api.deps import get_settings
from poster_server.api.middleware import build_exception_handler, build_request_id_middleware
from poster_server.api.routers.cache import router as cache_router
from poster_server.api.routers.gist import router as gist_router
from poster_server.api.routers.health import router as health_router

_settings = get_settings()


def create_app() -> FastAPI:
    app = FastAPI(title="Poster Cache Gateway", version="1.0.0")

    app.add_middleware(GZipMiddleware, minimum_size=max(0, _settings.gzip_min_size))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_settings.cors_allow_origins(),
        allow_credentials=_settings.cors_allow_credentials,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )

    app.middleware("http")(build_request_id_middleware(_settings))
    app.add_exception_handler(Exception, build_exception_handler(_settings))

    app.include_router(health_router)
    app.include_router(cache_router)
    app.include_router(gist_router)

    return app


app = create_app()
