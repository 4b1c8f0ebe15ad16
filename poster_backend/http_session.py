from __future__ import annotations

"""
poster_backend/http_session.py

requests.Session compartida para las llamadas salientes (OMDb, descarga de
pósters y /gist).

Política:
- Un único intento por llamada: el Retry de urllib3 va con total=0.
  Un fallo de red se propaga al caller tal cual.
- Pool de conexiones dimensionado para el threadpool del servidor.
"""

import threading

import requests  # type: ignore[import-not-found]
from requests.adapters import HTTPAdapter  # type: ignore[import-not-found]
from urllib3.util.retry import Retry  # type: ignore[import-not-found]

DEFAULT_USER_AGENT = "Poster-Cache-Gateway/1.0"

_SESSION: requests.Session | None = None
_SESSION_LOCK = threading.Lock()


def _cap_int(value: int, *, min_v: int, max_v: int) -> int:
    if value < min_v:
        return min_v
    if value > max_v:
        return max_v
    return value


def build_session(*, user_agent: str = DEFAULT_USER_AGENT, pool_size: int = 16) -> requests.Session:
    session = requests.Session()

    # Sin reintentos; las redirecciones las sigue requests, no urllib3.
    retries = Retry(total=0, raise_on_status=False)
    size = _cap_int(int(pool_size), min_v=1, max_v=64)

    adapter = HTTPAdapter(max_retries=retries, pool_connections=size, pool_maxsize=size)
    session.mount("https://", adapter)
    session.mount("http://", adapter)

    session.headers.update({"User-Agent": (user_agent or "").strip() or DEFAULT_USER_AGENT})
    return session


def get_shared_session(*, user_agent: str = DEFAULT_USER_AGENT) -> requests.Session:
    """Singleton perezoso (thread-safe) para el proceso del servidor."""
    global _SESSION
    if _SESSION is not None:
        return _SESSION

    with _SESSION_LOCK:
        if _SESSION is None:
            _SESSION = build_session(user_agent=user_agent)
        return _SESSION
