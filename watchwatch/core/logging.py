from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from watchwatch.core.config import Settings


def _parse_level(value: Any, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, int):
        return value
    text = str(value).strip().upper()
    if not text:
        return default

    mapping: dict[str, int] = {
        "CRITICAL": logging.CRITICAL,
        "ERROR": logging.ERROR,
        "WARN": logging.WARNING,
        "WARNING": logging.WARNING,
        "INFO": logging.INFO,
        "DEBUG": logging.DEBUG,
        "NOTSET": logging.NOTSET,
    }
    if text in mapping:
        return mapping[text]

    try:
        return int(text)
    except ValueError:
        return default


def configure_logging(cfg: Settings, *, override_level: str | None = None) -> None:
    """Configure Python logging for the watchwatch server.

    Safe to call more than once (tests build several apps in one process).
    """

    level = _parse_level(override_level or cfg.LOG_LEVEL, logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler()]

    log_file = (cfg.LOG_FILE or "").strip()
    if log_file:
        p = Path(os.path.expanduser(log_file))
        p.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(p, encoding="utf-8"))

    fmt = cfg.LOG_FORMAT.strip() or "%(asctime)s %(levelname)s %(name)s: %(message)s"
    formatter = logging.Formatter(fmt=fmt)
    for h in handlers:
        h.setFormatter(formatter)

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)

    for h in handlers:
        root.addHandler(h)

    root.setLevel(level)

    # uvicorn's access log is noisy for websocket-heavy traffic
    logging.getLogger("uvicorn.access").setLevel(max(level, logging.WARNING))

    logging.captureWarnings(True)
