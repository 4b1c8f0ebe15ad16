from __future__ import annotations

"""
poster_backend/image_fetcher.py

Descarga de recursos remotos:
- fetch(url): bytes del póster + content-type. Un status no-2xx devuelve None
  (el gateway degrada a posterUrl=null). Los fallos de red se propagan.
- fetch_text(url): texto crudo (passthrough de /gist).
"""

from dataclasses import dataclass
from typing import Final

import requests  # type: ignore[import-not-found]

DEFAULT_IMAGE_CONTENT_TYPE: Final[str] = "image/jpeg"


@dataclass(frozen=True)
class FetchedImage:
    content: bytes
    content_type: str


class ImageFetcher:
    def __init__(
        self,
        *,
        session: requests.Session,
        timeout_s: float = 15.0,
        default_content_type: str = DEFAULT_IMAGE_CONTENT_TYPE,
    ) -> None:
        self._session = session
        self._timeout_s = max(0.5, float(timeout_s))
        self._default_content_type = default_content_type

    def fetch(self, url: str) -> FetchedImage | None:
        resp = self._session.get(url, timeout=self._timeout_s)
        # Solo 2xx: un 3xx final (304, 300 sin Location) no trae imagen
        if not 200 <= resp.status_code < 300:
            return None

        content_type = (resp.headers.get("Content-Type") or "").strip()
        return FetchedImage(
            content=resp.content,
            content_type=content_type or self._default_content_type,
        )

    def fetch_text(self, url: str) -> str:
        resp = self._session.get(url, timeout=self._timeout_s)
        resp.raise_for_status()
        return resp.text
