# logger del servidor + fichero opcional
from __future__ import annotations

import logging
from pathlib import Path

from poster_server.api.settings import Settings

_FILE_HANDLER_TAG = "_poster_api_file_handler"
_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

LOGGER_NAME = "poster_api"

SERVER_DIR = Path(__file__).resolve().parents[1]


def _resolve_log_path(raw: str) -> Path | None:
    s = (raw or "").strip()
    if not s:
        return None
    p = Path(s).expanduser()
    return (p if p.is_absolute() else (SERVER_DIR / p)).resolve()


def _our_file_handlers(root: logging.Logger) -> list[logging.Handler]:
    return [h for h in root.handlers if getattr(h, _FILE_HANDLER_TAG, False)]


def _ensure_file_handler(root: logging.Logger, *, path: Path, level: str) -> None:
    existing = _our_file_handlers(root)
    if existing:
        for handler in existing:
            handler.setLevel(level)
        return

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, mode="a", encoding="utf-8", delay=True)
    except OSError:
        # Sin fichero seguimos con los handlers de uvicorn
        logging.getLogger(LOGGER_NAME).warning("log_file_unavailable", extra={"log_path": str(path)})
        return

    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    setattr(handler, _FILE_HANDLER_TAG, True)
    root.addHandler(handler)


def configure_logging(settings: Settings) -> logging.Logger:
    """
    Configuración mínima e idempotente:
    - Respetamos handlers/format de quien ejecute (uvicorn, gunicorn, etc.).
    - Nivel global según LOG_LEVEL.
    - LOG_FILE_PATH añade (una vez) un FileHandler al root logger.
    """
    root = logging.getLogger()
    root.setLevel(settings.log_level)

    path = _resolve_log_path(settings.log_file_path)
    if path is not None:
        _ensure_file_handler(root, path=path, level=settings.log_level)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(settings.log_level)
    return logger
