from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from tollgate.core.config.loader import ClientSettings, load_settings

from .json_formatter import JSONFormatter

_LOGGER_NAME = "tollgate"
_HTTP_LOGGER_NAME = "tollgate.http"
_CONFIGURED_ATTR = "_tollgate_json_logging"
_LOG_FILE_NAME = "tollgate.log"


def _parse_level(raw: str) -> int:
    normalized = raw.strip().upper()
    return getattr(logging, normalized, logging.INFO)


def apply_component_levels(settings: ClientSettings) -> None:
    """Set per-component levels without touching handlers owned by the host app."""
    if settings.http_log_level:
        logging.getLogger(_HTTP_LOGGER_NAME).setLevel(_parse_level(settings.http_log_level))


def _has_handler(logger: logging.Logger, kind: type[logging.Handler], log_path: Path | None = None) -> bool:
    for handler in logger.handlers:
        if not isinstance(handler, kind) or not getattr(handler, _CONFIGURED_ATTR, False):
            continue
        if log_path is None or Path(getattr(handler, "baseFilename", "")) == log_path:
            return True
    return False


def _attach(logger: logging.Logger, handler: logging.Handler) -> None:
    handler.setFormatter(JSONFormatter())
    setattr(handler, _CONFIGURED_ATTR, True)
    logger.addHandler(handler)


def configure_logging(settings: ClientSettings | None = None, log_dir: Path | None = None) -> logging.Logger:
    """JSON logging for the ``tollgate`` logger tree; safe to call repeatedly."""
    settings = settings or load_settings()
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(_parse_level(settings.log_level))
    logger.propagate = False
    apply_component_levels(settings)

    # file handlers subclass StreamHandler, so only count plain stream handlers here
    if not any(
        type(handler) is logging.StreamHandler and getattr(handler, _CONFIGURED_ATTR, False)
        for handler in logger.handlers
    ):
        _attach(logger, logging.StreamHandler(stream=sys.stdout))

    if settings.log_to_file:
        target_dir = Path(settings.log_dir) if settings.log_dir else (log_dir or Path.cwd() / "logs")
        target_dir.mkdir(parents=True, exist_ok=True)
        log_path = target_dir / _LOG_FILE_NAME
        if not _has_handler(logger, RotatingFileHandler, log_path):
            _attach(
                logger,
                RotatingFileHandler(
                    filename=log_path,
                    maxBytes=settings.log_max_bytes,
                    backupCount=settings.log_backup_count,
                    encoding="utf-8",
                ),
            )

    return logger
