import logging

from conftest import make_settings
from poster_server.api import logging_config


def _drop_our_handlers(root: logging.Logger) -> None:
    for handler in logging_config._our_file_handlers(root):
        root.removeHandler(handler)
        handler.close()


def test_resolve_log_path(tmp_path):
    assert logging_config._resolve_log_path("") is None
    assert logging_config._resolve_log_path("   ") is None
    assert logging_config._resolve_log_path(str(tmp_path / "a.log")) == (tmp_path / "a.log").resolve()
    assert logging_config._resolve_log_path("logs/a.log") == (logging_config.SERVER_DIR / "logs/a.log").resolve()


def test_configure_logging_without_file():
    root = logging.getLogger()
    _drop_our_handlers(root)

    logger = logging_config.configure_logging(make_settings(log_level="WARNING"))

    assert logger.name == logging_config.LOGGER_NAME
    assert logger.level == logging.WARNING
    assert logging_config._our_file_handlers(root) == []


def test_configure_logging_adds_file_handler_once(tmp_path):
    root = logging.getLogger()
    _drop_our_handlers(root)
    settings = make_settings(log_level="DEBUG", log_file_path=str(tmp_path / "logs" / "api.log"))

    try:
        logger = logging_config.configure_logging(settings)
        logging_config.configure_logging(settings)

        assert logger.level == logging.DEBUG
        assert len(logging_config._our_file_handlers(root)) == 1
        assert (tmp_path / "logs").is_dir()
    finally:
        _drop_our_handlers(root)
        root.setLevel(logging.WARNING)
