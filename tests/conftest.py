from __future__ import annotations

import dataclasses
import threading
from dataclasses import dataclass, field
from typing import Callable

import pytest
import requests

from poster_backend.image_fetcher import FetchedImage
from poster_backend.object_store import InMemoryObjectStore, ObjectStoreError
from poster_backend.omdb_client import OmdbError, OmdbTitle
from poster_backend.poster_cache import (
    GatewayConfig,
    MetadataMode,
    PosterCacheGateway,
    UrlMode,
)
from poster_server.api.settings import Settings

PUBLIC_BASE = "https://link.storjshare.io/raw/jwx/posters-bucket"


# ============================================================
# requests fakes
# ============================================================


@dataclass(slots=True)
class FakeHTTPResponse:
    status_code: int = 200
    payload: object = None
    content: bytes = b""
    text: str = ""
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self) -> object:
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload

    def raise_for_status(self) -> None:
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} error")


@dataclass(slots=True)
class SessionCall:
    url: str
    params: dict[str, str] | None
    timeout: float | None


class FakeSession:
    """
    requests.Session mínimo: enruta por URL y registra las llamadas.
    Si el router devuelve una excepción, se lanza.
    """

    def __init__(self, router: Callable[[str, dict[str, str] | None], object]) -> None:
        self._router = router
        self.calls: list[SessionCall] = []

    def get(self, url: str, params: dict[str, str] | None = None, timeout: float | None = None):
        self.calls.append(SessionCall(url=url, params=params, timeout=timeout))
        out = self._router(url, params)
        if isinstance(out, BaseException):
            raise out
        return out


# ============================================================
# Gateway collaborator fakes
# ============================================================


class FakeMetadata:
    def __init__(self, titles: dict[str, OmdbTitle] | None = None, *, error: OmdbError | None = None) -> None:
        self.titles = dict(titles or {})
        self.error = error
        self.lookups: list[str] = []
        self.year_lookups: list[str] = []

    def lookup(self, imdb_id: str) -> OmdbTitle | None:
        self.lookups.append(imdb_id)
        if self.error is not None:
            raise self.error
        return self.titles.get(imdb_id)

    def lookup_year(self, imdb_id: str) -> str:
        self.year_lookups.append(imdb_id)
        title = self.titles.get(imdb_id)
        return title.year if title is not None else ""


class FakeImages:
    def __init__(self, images: dict[str, FetchedImage | None] | None = None) -> None:
        self.images = dict(images or {})
        self.fetches: list[str] = []
        self.before_fetch: Callable[[], None] | None = None
        self._lock = threading.Lock()

    def fetch(self, url: str) -> FetchedImage | None:
        with self._lock:
            self.fetches.append(url)
        if self.before_fetch is not None:
            self.before_fetch()
        return self.images.get(url)


class RecordingStore(InMemoryObjectStore):
    def __init__(self) -> None:
        super().__init__()
        self.puts: list[str] = []
        self.probes: list[str] = []
        self.probe_error: ObjectStoreError | None = None
        self.put_error: ObjectStoreError | None = None
        self._calls_lock = threading.Lock()

    def exists(self, key: str) -> bool:
        with self._calls_lock:
            self.probes.append(key)
        if self.probe_error is not None:
            raise self.probe_error
        return super().exists(key)

    def put(self, key: str, data: bytes, *, content_type: str) -> None:
        if self.put_error is not None:
            raise self.put_error
        with self._calls_lock:
            self.puts.append(key)
        super().put(key, data, content_type=content_type)


def matrix_title(poster: str | None = "https://m.media-amazon.com/images/M/matrix.jpg") -> OmdbTitle:
    return OmdbTitle(imdb_id="tt0133093", title="The Matrix", year="1999", poster=poster)


MATRIX_IMAGE = FetchedImage(content=b"\xff\xd8\xff-matrix", content_type="image/jpeg")


@dataclass
class GatewayKit:
    gateway: PosterCacheGateway
    store: RecordingStore
    metadata: FakeMetadata
    images: FakeImages


@pytest.fixture()
def make_kit() -> Callable[..., GatewayKit]:
    def _make(
        *,
        titles: dict[str, OmdbTitle] | None = None,
        images: dict[str, FetchedImage | None] | None = None,
        url_mode: UrlMode = UrlMode.PUBLIC,
        metadata_mode: MetadataMode = MetadataMode.LIVE,
        key_prefix: str = "posters/",
    ) -> GatewayKit:
        store = RecordingStore()
        metadata = FakeMetadata(titles)
        fetcher = FakeImages(images)
        gateway = PosterCacheGateway(
            store=store,
            metadata=metadata,
            images=fetcher,
            config=GatewayConfig(
                url_mode=url_mode,
                metadata_mode=metadata_mode,
                public_base_url=PUBLIC_BASE,
                key_prefix=key_prefix,
            ),
        )
        return GatewayKit(gateway=gateway, store=store, metadata=metadata, images=fetcher)

    return _make


# ============================================================
# Settings
# ============================================================


def make_settings(**overrides: object) -> Settings:
    base = Settings(
        log_level="INFO",
        log_file_path="",
        cors_origins_raw="*",
        cors_allow_credentials=False,
        gzip_min_size=0,
        omdb_api_key="test-key",
        omdb_base_url="https://www.omdbapi.com/",
        http_timeout_s=5.0,
        http_user_agent="tests",
        object_store_backend="memory",
        storj_endpoint="",
        storj_access_key="",
        storj_secret_key="",
        storj_bucket="posters-bucket",
        storj_region="us-east-1",
        storj_public_base=PUBLIC_BASE,
        poster_key_prefix="posters/",
        url_mode=UrlMode.PUBLIC,
        metadata_mode=MetadataMode.LIVE,
        signed_url_ttl_s=3600,
        gist_url="",
        api_host="127.0.0.1",
        api_port=3000,
        api_reload=False,
    )
    return dataclasses.replace(base, **overrides)  # type: ignore[arg-type]
