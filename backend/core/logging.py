from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from core.config import BACKEND_DIR, Settings


LOG_FILE_NAME = "timetable-api.log"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Loggers the service writes to; they follow the configured level.
APP_LOGGERS = (
    "api.routes.auth",
    "api.routes.rooms",
    "api.routes.students",
    "api.routes.teachers",
    "services.timetable_service",
    "services.term_service",
    "core.bootstrap",
)

# Third-party loggers never log below these levels.
QUIET_LOGGERS = {
    "sqlalchemy.engine": logging.WARNING,
    "uvicorn.access": logging.INFO,
}


def resolve_log_level(settings: Settings) -> int:
    """LOG_LEVEL wins; otherwise INFO in production and DEBUG elsewhere."""

    if settings.log_level:
        level = logging.getLevelName(settings.log_level)
        if isinstance(level, int):
            return level
    return logging.INFO if settings.is_production else logging.DEBUG


def log_file_path(settings: Settings) -> Path:
    log_dir = Path(settings.log_dir)
    if not log_dir.is_absolute():
        log_dir = Path(BACKEND_DIR) / log_dir
    return log_dir / LOG_FILE_NAME


def setup_logging(settings: Settings) -> int:
    """Install console logging, plus a rotating file in production.

    Returns the level in effect. A second call leaves existing handlers alone.
    """

    level = resolve_log_level(settings)
    root = logging.getLogger()
    if not root.handlers:
        formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z")
        handlers: list[logging.Handler] = [logging.StreamHandler()]

        if settings.is_production:
            path = log_file_path(settings)
            path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(
                logging.handlers.RotatingFileHandler(
                    path,
                    maxBytes=10 * 1024 * 1024,
                    backupCount=5,
                    encoding="utf-8",
                )
            )

        for handler in handlers:
            handler.setFormatter(formatter)
        logging.basicConfig(level=level, handlers=handlers)

    for name in APP_LOGGERS:
        logging.getLogger(name).setLevel(level)
    for name, cap in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(max(level, cap))
    return level
