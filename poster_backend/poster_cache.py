from __future__ import annotations

"""
poster_backend/poster_cache.py

Gateway de caché de pósters: OMDb -> descarga -> object store.

Flujo de get_poster(imdb_id)
----------------------------
1) key = "<prefix><imdb_id>.jpg" (y "<prefix><imdb_id>.json" en modo STORED).
2) HEAD del póster en el store.
   - Un fallo del store (ObjectStoreError) se registra como probe degradado
     y se trata como miss: se sigue sirviendo aunque el store esté inestable.
3) HIT: no se escribe nada. El año sale de OMDb (LIVE) o del objeto de
   metadatos (STORED, con fallback a OMDb si falta o está corrupto).
4) MISS: OMDb -> (sin resultado | sin póster | descarga fallida) => posterUrl
   null sin escribir; en otro caso se escribe el póster (y los metadatos en
   STORED) y se devuelve la referencia.

Modos (en vez de variantes copiadas del mismo handler):
- UrlMode.PUBLIC  -> "<public_base>/<key>" (bucket público)
- UrlMode.SIGNED  -> URL firmada (por defecto 1h)
- MetadataMode.LIVE   -> miss en OMDb = {posterUrl: null, year: ""}
- MetadataMode.STORED -> miss en OMDb = TitleNotFoundError (HTTP 404)

Sin locks: dos requests concurrentes del mismo id pueden descargar y escribir
ambos; gana la última escritura (mismo contenido).
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Final, Protocol
from urllib.parse import quote

from poster_backend.image_fetcher import FetchedImage
from poster_backend.object_store import ObjectStore, ObjectStoreError
from poster_backend.omdb_client import OmdbTitle

DEFAULT_KEY_PREFIX: Final[str] = "posters/"
DEFAULT_SIGNED_URL_TTL_S: Final[int] = 3600
METADATA_CONTENT_TYPE: Final[str] = "application/json"

_log = logging.getLogger(__name__)


class UrlMode(str, Enum):
    PUBLIC = "public"
    SIGNED = "signed"


class MetadataMode(str, Enum):
    LIVE = "live"
    STORED = "stored"


class InvalidIdentifierError(ValueError):
    pass


class TitleNotFoundError(LookupError):
    def __init__(self, imdb_id: str) -> None:
        super().__init__(f"No OMDb match for {imdb_id}")
        self.imdb_id = imdb_id


class MetadataProvider(Protocol):
    def lookup(self, imdb_id: str) -> OmdbTitle | None: ...

    def lookup_year(self, imdb_id: str) -> str: ...


class PosterSource(Protocol):
    def fetch(self, url: str) -> FetchedImage | None: ...


@dataclass(frozen=True)
class GatewayConfig:
    url_mode: UrlMode = UrlMode.PUBLIC
    metadata_mode: MetadataMode = MetadataMode.LIVE
    public_base_url: str = ""
    key_prefix: str = DEFAULT_KEY_PREFIX
    signed_url_ttl_s: int = DEFAULT_SIGNED_URL_TTL_S


@dataclass(frozen=True)
class PosterResult:
    poster_url: str | None
    year: str
    cache_hit: bool = False
    stored: bool = False

    def to_payload(self) -> dict[str, Any]:
        return {"posterUrl": self.poster_url, "year": self.year}


class PosterCacheGateway:
    def __init__(
        self,
        *,
        store: ObjectStore,
        metadata: MetadataProvider,
        images: PosterSource,
        config: GatewayConfig,
    ) -> None:
        self._store = store
        self._metadata = metadata
        self._images = images
        self._config = config

    # ------------------------------------------------------------------
    # Keys / referencias
    # ------------------------------------------------------------------

    def poster_key(self, imdb_id: str) -> str:
        return f"{self._config.key_prefix}{imdb_id}.jpg"

    def metadata_key(self, imdb_id: str) -> str:
        return f"{self._config.key_prefix}{imdb_id}.json"

    def poster_reference(self, key: str) -> str:
        if self._config.url_mode is UrlMode.SIGNED:
            return self._store.presigned_url(key, expires_in=self._config.signed_url_ttl_s)
        base = self._config.public_base_url.rstrip("/")
        return f"{base}/{quote(key)}"

    # ------------------------------------------------------------------
    # Pasos
    # ------------------------------------------------------------------

    def _probe(self, imdb_id: str, key: str) -> bool:
        try:
            return self._store.exists(key)
        except ObjectStoreError as exc:
            _log.warning(
                "poster_probe_degraded: %s",
                exc,
                extra={"imdb_id": imdb_id, "key": key},
            )
            return False

    def _stored_year(self, imdb_id: str) -> str | None:
        key = self.metadata_key(imdb_id)
        try:
            raw = self._store.get(key)
        except ObjectStoreError as exc:
            _log.warning("metadata_read_failed: %s", exc, extra={"imdb_id": imdb_id, "key": key})
            return None
        if raw is None:
            return None

        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            _log.warning("metadata_object_malformed", extra={"imdb_id": imdb_id, "key": key})
            return None
        if not isinstance(data, dict):
            return None

        year = data.get("year")
        return "" if year is None else str(year)

    def _hit_year(self, imdb_id: str) -> str:
        if self._config.metadata_mode is MetadataMode.STORED:
            year = self._stored_year(imdb_id)
            if year is not None:
                return year
        return self._metadata.lookup_year(imdb_id)

    def _store_miss(self, imdb_id: str, key: str, image: FetchedImage, year: str) -> None:
        self._store.put(key, image.content, content_type=image.content_type)
        if self._config.metadata_mode is MetadataMode.STORED:
            body = json.dumps({"year": year}, ensure_ascii=False).encode("utf-8")
            self._store.put(self.metadata_key(imdb_id), body, content_type=METADATA_CONTENT_TYPE)

        _log.info(
            "poster_stored",
            extra={"imdb_id": imdb_id, "key": key, "bytes": len(image.content)},
        )

    # ------------------------------------------------------------------
    # API
    # ------------------------------------------------------------------

    def get_poster(self, imdb_id: str) -> PosterResult:
        ident = (imdb_id or "").strip()
        if not ident:
            raise InvalidIdentifierError("imdb param required")

        key = self.poster_key(ident)

        if self._probe(ident, key):
            year = self._hit_year(ident)
            _log.debug("poster_cache_hit", extra={"imdb_id": ident, "key": key})
            return PosterResult(self.poster_reference(key), year, cache_hit=True)

        _log.debug("poster_cache_miss", extra={"imdb_id": ident, "key": key})

        title = self._metadata.lookup(ident)
        if title is None:
            if self._config.metadata_mode is MetadataMode.STORED:
                raise TitleNotFoundError(ident)
            return PosterResult(None, "")

        if title.poster is None:
            return PosterResult(None, title.year)

        image = self._images.fetch(title.poster)
        if image is None:
            _log.info(
                "poster_download_failed",
                extra={"imdb_id": ident, "poster_src": title.poster},
            )
            return PosterResult(None, title.year)

        self._store_miss(ident, key, image, title.year)
        return PosterResult(self.poster_reference(key), title.year, stored=True)
