"""
Logging setup shared by batchrun, im-update-scripts and the UI runner.

 - Everything goes to stderr; stdout is reserved for the --json summary line
 - IM_LOG_FILE adds a rotating file next to the console
 - IM_LOG_JSON=1 switches both to one JSON object per line
 - configure_logging() is idempotent; force=True rebuilds our handlers only
"""

from __future__ import annotations

import json
import logging
import os
import threading
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler

from .settings import SETTINGS, LoggingConfig

_LOCK = threading.Lock()
_CONFIGURED = False
_HANDLERS: list[logging.Handler] = []

TEXT_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
TEXT_DATEFMT = "%Y-%m-%d %H:%M:%S"

# LogRecord attributes that are not `extra=` fields
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime", "taskName"}


class JsonFormatter(logging.Formatter):
    """One JSON object per record; `extra=` fields are copied as top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload = {
            "ts": ts.isoformat(timespec="seconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        for key, value in vars(record).items():
            if key in _RECORD_ATTRS or key.startswith("_"):
                continue
            try:
                json.dumps(value)
            except (TypeError, ValueError):
                value = str(value)
            payload[key] = value
        return json.dumps(payload, ensure_ascii=False)


def _resolve_level(raw_level: str | None) -> int:
    if not raw_level:
        return logging.INFO
    return getattr(logging, str(raw_level).upper(), logging.INFO)


def _make_formatter(conf: LoggingConfig) -> logging.Formatter:
    if conf.json:
        return JsonFormatter()
    return logging.Formatter(TEXT_FORMAT, TEXT_DATEFMT)


def _file_handler(conf: LoggingConfig) -> logging.Handler | None:
    if not conf.log_file:
        return None
    folder = os.path.dirname(conf.log_file)
    try:
        if folder:
            os.makedirs(folder, exist_ok=True)
        return RotatingFileHandler(
            conf.log_file, maxBytes=conf.max_bytes, backupCount=conf.backup_count, encoding="utf-8"
        )
    except OSError as e:
        logging.getLogger(__name__).warning("Could not open log file %s: %s", conf.log_file, e)
        return None


def configure_logging(level: str | None = None, force: bool = False):
    global _CONFIGURED
    with _LOCK:
        if _CONFIGURED and not force:
            return
        conf = SETTINGS.logging
        chosen_level = _resolve_level(level or conf.level)
        formatter = _make_formatter(conf)

        root = logging.getLogger()
        root.setLevel(chosen_level)
        while _HANDLERS:
            old = _HANDLERS.pop()
            root.removeHandler(old)
            old.close()

        for handler in (logging.StreamHandler(), _file_handler(conf)):
            if handler is None:
                continue
            handler.setLevel(chosen_level)
            handler.setFormatter(formatter)
            root.addHandler(handler)
            _HANDLERS.append(handler)

        _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name)
