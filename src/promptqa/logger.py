"""Unified logging for PromptQA.

Modules obtain loggers via::

    from promptqa.logger import get_logger
    logger = get_logger(__name__)

Only the root ``promptqa`` logger owns handlers; child loggers propagate to it,
so configuration happens once no matter how many modules ask for a logger.

Environment overrides (read through ``Config``):
    PROMPTQA_LOG_LEVEL  console level name or number (default WARNING)
    PROMPTQA_LOG_DIR    when set, also write a daily rotating DEBUG log there
    PROMPTQA_LOG_JSON   truthy -> JSON lines on the console
"""

import json
import logging
import time
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Optional

from .config import Config

_ROOT_LOGGER_NAME = "promptqa"

FORMAT = "%(asctime)s | %(name)s | %(levelname)-8s | %(message)s"
DTFMT = "%Y-%m-%d %H:%M:%S"


def _parse_level(val: Optional[str], default: int = logging.WARNING) -> int:
    """Parse a level given as a name ("INFO") or an integer ("20")."""
    if not val or not val.strip():
        return default
    s = val.strip()
    if s.isdigit():
        return int(s)
    level = logging.getLevelName(s.upper())
    return level if isinstance(level, int) else default


class _JsonFormatter(logging.Formatter):
    """Minimal JSON line formatter."""

    def format(self, record: logging.LogRecord) -> str:
        data = {
            "ts": time.strftime("%Y-%m-%dT%H:%M:%S%z", time.localtime(record.created)),
            "name": record.name,
            "level": record.levelname,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False)


def _make_console_handler() -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(_parse_level(Config.LOG_LEVEL))
    if Config.LOG_JSON:
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(fmt=FORMAT, datefmt=DTFMT))
    return handler


def _make_file_handler(log_dir: Path) -> Optional[logging.Handler]:
    """Rotating file handler in *log_dir*, or None if the directory is unusable."""
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = TimedRotatingFileHandler(
            filename=log_dir / "promptqa.log",
            when="midnight",
            backupCount=Config.LOG_BACKUPS,
            encoding="utf-8",
        )
    except OSError:
        return None
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(fmt=FORMAT, datefmt=DTFMT))
    return handler


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger under the ``promptqa`` root, configuring the root once.

    Args:
        name: Dotted logger name, usually ``__name__``. None returns the root.
    """
    root = logging.getLogger(_ROOT_LOGGER_NAME)

    if not root.handlers:
        root.setLevel(logging.DEBUG)
        root.addHandler(_make_console_handler())
        if Config.LOG_DIR:
            file_handler = _make_file_handler(Path(Config.LOG_DIR).expanduser())
            if file_handler is not None:
                root.addHandler(file_handler)
        root.propagate = False
        root.debug("Logger initialised | console=%s | dir=%s", Config.LOG_LEVEL, Config.LOG_DIR)

    if not name or name == _ROOT_LOGGER_NAME:
        return root
    if not name.startswith(_ROOT_LOGGER_NAME + "."):
        name = f"{_ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
