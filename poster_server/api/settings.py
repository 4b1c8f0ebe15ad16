# lectura de env vars + defaults
from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

from dotenv import load_dotenv

from poster_backend.object_store import DEFAULT_REGION
from poster_backend.omdb_client import OMDB_DEFAULT_BASE_URL
from poster_backend.poster_cache import (
    DEFAULT_KEY_PREFIX,
    DEFAULT_SIGNED_URL_TTL_S,
    GatewayConfig,
    MetadataMode,
    UrlMode,
)

# No sobre-escribimos env vars ya definidas (docker/systemd mandan sobre .env)
load_dotenv(override=False)

E = TypeVar("E", bound=Enum)


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    val = raw.strip()
    return val if val else default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except Exception:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except Exception:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    s = raw.strip().lower()
    if s in ("1", "true", "yes", "on"):
        return True
    if s in ("0", "false", "no", "off"):
        return False
    return default


def _env_enum(name: str, enum_cls: type[E], default: E) -> E:
    raw = _env_str(name, default.value).lower()
    try:
        return enum_cls(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    """
    Settings centralizados (env vars).

    Notas:
    - Ninguna credencial es obligatoria para arrancar; /ready informa de lo
      que falta.
    - CORS: si CORS_ORIGINS="*" -> allow_credentials=False (regla browser).
    - POSTER_KEY_PREFIX="" deja las keys en la raíz del bucket ("<id>.jpg").
    - Un prefijo no vacío termina siempre en "/" ("posters" -> "posters/").
    """

    log_level: str
    log_file_path: str

    cors_origins_raw: str
    cors_allow_credentials: bool
    gzip_min_size: int

    omdb_api_key: str
    omdb_base_url: str
    http_timeout_s: float
    http_user_agent: str

    object_store_backend: str
    storj_endpoint: str
    storj_access_key: str
    storj_secret_key: str
    storj_bucket: str
    storj_region: str
    storj_public_base: str

    poster_key_prefix: str
    url_mode: UrlMode
    metadata_mode: MetadataMode
    signed_url_ttl_s: int

    gist_url: str

    api_host: str
    api_port: int
    api_reload: bool

    def cors_allow_origins(self) -> list[str]:
        raw = self.cors_origins_raw.strip()
        if raw == "*":
            return ["*"]
        parts = [p.strip() for p in raw.split(",")]
        return [p for p in parts if p]

    def cors_headers(self) -> dict[str, str]:
        """Cabeceras CORS fijas para respuestas que no pasan por CORSMiddleware."""
        if self.cors_allow_origins() == ["*"]:
            return {"Access-Control-Allow-Origin": "*"}
        return {}

    def gateway_config(self) -> GatewayConfig:
        return GatewayConfig(
            url_mode=self.url_mode,
            metadata_mode=self.metadata_mode,
            public_base_url=self.storj_public_base,
            key_prefix=self.poster_key_prefix,
            signed_url_ttl_s=self.signed_url_ttl_s,
        )

    @staticmethod
    def from_env() -> "Settings":
        cors_raw = _env_str("CORS_ORIGINS", "*")

        # os.getenv directo: "" es un valor válido (keys en la raíz del bucket)
        prefix = os.getenv("POSTER_KEY_PREFIX")
        if prefix is None:
            prefix = DEFAULT_KEY_PREFIX
        prefix = prefix.strip().lstrip("/")
        if prefix and not prefix.endswith("/"):
            prefix += "/"

        return Settings(
            log_level=_env_str("LOG_LEVEL", "INFO").upper(),
            log_file_path=_env_str("LOG_FILE_PATH", ""),
            cors_origins_raw=cors_raw,
            cors_allow_credentials=cors_raw.strip() != "*",
            gzip_min_size=_env_int("GZIP_MIN_SIZE", 800),
            omdb_api_key=_env_str("OMDB_API_KEY", ""),
            omdb_base_url=_env_str("OMDB_BASE_URL", OMDB_DEFAULT_BASE_URL),
            http_timeout_s=max(0.5, _env_float("OMDB_HTTP_TIMEOUT_SECONDS", 15.0)),
            http_user_agent=_env_str("HTTP_USER_AGENT", "Poster-Cache-Gateway/1.0"),
            object_store_backend=_env_str("OBJECT_STORE_BACKEND", "s3").lower(),
            storj_endpoint=_env_str("STORJ_ENDPOINT", ""),
            storj_access_key=_env_str("STORJ_ACCESS_KEY", ""),
            storj_secret_key=_env_str("STORJ_SECRET_KEY", ""),
            storj_bucket=_env_str("STORJ_BUCKET", ""),
            storj_region=_env_str("STORJ_REGION", DEFAULT_REGION),
            storj_public_base=_env_str("STORJ_PUBLIC_BASE", ""),
            poster_key_prefix=prefix,
            url_mode=_env_enum("POSTER_URL_MODE", UrlMode, UrlMode.PUBLIC),
            metadata_mode=_env_enum("POSTER_METADATA_MODE", MetadataMode, MetadataMode.LIVE),
            signed_url_ttl_s=max(1, _env_int("SIGNED_URL_EXPIRES_SECONDS", DEFAULT_SIGNED_URL_TTL_S)),
            gist_url=_env_str("GIST_URL", ""),
            api_host=_env_str("API_HOST", "127.0.0.1"),
            api_port=_env_int("PORT", 3000),
            api_reload=_env_bool("API_RELOAD", False),
        )
