from __future__ import annotations

"""
poster_backend/omdb_client.py

Cliente OMDb mínimo (lookup por IMDb id) usado por el gateway de pósters.

Contrato
--------
- lookup(imdb_id):
    - OmdbTitle si OMDb encuentra el título.
    - None si OMDb responde Response="False" (p.ej. "Incorrect IMDb ID.").
    - OmdbError si falla la red, el JSON es inválido o la API key es inválida.
- lookup_year(imdb_id):
    - Año normalizado o "" (nunca lanza). Es el camino "cache hit" y ahí el
      año es secundario: un fallo de OMDb no debe tumbar la respuesta.

Un único intento por llamada (ver poster_backend/http_session.py).
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final

import requests  # type: ignore[import-not-found]
from requests.exceptions import RequestException  # type: ignore[import-not-found]

from poster_backend.year_utils import normalize_year

OMDB_DEFAULT_BASE_URL: Final[str] = "https://www.omdbapi.com/"

# Centinela de OMDb para "sin póster"
POSTER_NOT_AVAILABLE: Final[str] = "N/A"

_INVALID_API_KEY_ERROR: Final[str] = "invalid api key!"

_log = logging.getLogger(__name__)


class OmdbError(RuntimeError):
    """Fallo de transporte/protocolo con OMDb (no incluye 'título no encontrado')."""


@dataclass(frozen=True)
class OmdbTitle:
    imdb_id: str
    title: str
    year: str
    poster: str | None


def _clean_poster(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    s = value.strip()
    if not s or s == POSTER_NOT_AVAILABLE:
        return None
    return s


def _is_false_response(data: Mapping[str, object]) -> bool:
    return str(data.get("Response", "")).strip() == "False"


def _is_invalid_api_key(data: Mapping[str, object]) -> bool:
    return str(data.get("Error", "")).strip().lower() == _INVALID_API_KEY_ERROR


def parse_title(imdb_id: str, data: Mapping[str, object]) -> OmdbTitle | None:
    if _is_false_response(data):
        return None

    return OmdbTitle(
        imdb_id=str(data.get("imdbID") or imdb_id),
        title=str(data.get("Title") or ""),
        year=normalize_year(str(data.get("Year") or "")),
        poster=_clean_poster(data.get("Poster")),
    )


class OmdbClient:
    def __init__(
        self,
        *,
        api_key: str,
        session: requests.Session,
        base_url: str = OMDB_DEFAULT_BASE_URL,
        timeout_s: float = 15.0,
    ) -> None:
        self._api_key = api_key
        self._session = session
        self._base_url = base_url
        self._timeout_s = max(0.5, float(timeout_s))

    def _request(self, imdb_id: str) -> Mapping[str, object]:
        params = {"i": imdb_id, "apikey": self._api_key}
        try:
            resp = self._session.get(self._base_url, params=params, timeout=self._timeout_s)
        except RequestException as exc:
            raise OmdbError(f"OMDb request failed for {imdb_id}: {exc!r}") from exc

        # OMDb contesta JSON también en 401 (API key inválida): se parsea igual.
        try:
            data = resp.json()
        except ValueError as exc:
            raise OmdbError(
                f"OMDb returned malformed JSON for {imdb_id} (status={resp.status_code})"
            ) from exc

        if not isinstance(data, dict):
            raise OmdbError(f"OMDb returned a non-object payload for {imdb_id}")

        if _is_false_response(data) and _is_invalid_api_key(data):
            raise OmdbError("OMDb rejected the configured API key")

        return data

    def lookup(self, imdb_id: str) -> OmdbTitle | None:
        data = self._request(imdb_id)
        title = parse_title(imdb_id, data)
        if title is None:
            _log.info(
                "omdb_not_found",
                extra={"imdb_id": imdb_id, "omdb_error": str(data.get("Error", ""))},
            )
        return title

    def lookup_year(self, imdb_id: str) -> str:
        try:
            title = self.lookup(imdb_id)
        except OmdbError as exc:
            _log.warning("omdb_year_lookup_failed: %s", exc, extra={"imdb_id": imdb_id})
            return ""
        return title.year if title is not None else ""
