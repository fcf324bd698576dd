import logging

import pytest

from watchwatch.core import Settings
from watchwatch.core.logging import _parse_level, configure_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)


def test_defaults(monkeypatch) -> None:
    monkeypatch.delenv("PORT", raising=False)
    cfg = Settings(_env_file=None)
    assert cfg.PORT == 4000
    assert cfg.DEBOUNCE_MS == 300
    assert cfg.MAX_UPLOAD_BYTES == 100 * 1024 * 1024


def test_port_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("PORT", "8123")
    assert Settings(_env_file=None).PORT == 8123


@pytest.mark.parametrize(
    "value, expected",
    [(None, logging.INFO), ("debug", logging.DEBUG), ("WARN", logging.WARNING), ("15", 15), ("loud", logging.INFO)],
)
def test_parse_level(value, expected) -> None:
    assert _parse_level(value, logging.INFO) == expected


def test_configure_logging_writes_file(tmp_path, restore_root_logger) -> None:
    log_file = tmp_path / "logs" / "server.log"
    configure_logging(Settings(_env_file=None, LOG_LEVEL="DEBUG", LOG_FILE=str(log_file)))

    assert restore_root_logger.level == logging.DEBUG
    logging.getLogger("watchwatch.test").debug("hello from test")
    for h in restore_root_logger.handlers:
        h.flush()
    assert "hello from test" in log_file.read_text()


def test_create_app_configures_logging(tmp_path, restore_root_logger) -> None:
    from watchwatch.main import create_app

    create_app(Settings(
        _env_file=None,
        LOG_LEVEL="WARNING",
        STORAGE_DIR=str(tmp_path / "uploads"),
        STATIC_DIR=str(tmp_path / "public"),
    ))
    assert restore_root_logger.level == logging.WARNING
    assert len(restore_root_logger.handlers) == 1
