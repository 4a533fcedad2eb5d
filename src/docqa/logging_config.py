"""JSON logging: console records plus a rotating audit trail of uploads and chats."""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from docqa.config import Settings, get_settings


def _json_default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, BaseException):
        return f"{type(value).__name__}: {value}"
    return repr(value)


class MinimalJSONFormatter(logging.Formatter):
    """Serialize log records to one compact JSON object per line.

    Dict messages (the telemetry events) are merged into the top level; any
    ``extra=`` attributes follow them.
    """

    _RESERVED_KEYS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - inherited
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat().replace("+00:00", "Z")
        log_record: dict[str, Any] = {"ts": timestamp, "level": record.levelname, "logger": record.name}

        if isinstance(record.msg, dict):
            log_record.update(record.msg)
        else:
            message = record.getMessage()
            if message:
                log_record["message"] = message

        if record.exc_info and "exc" not in log_record:
            log_record["exc_info"] = self.formatException(record.exc_info)

        log_record.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in self._RESERVED_KEYS and not key.startswith("_")
        )
        return json.dumps(log_record, ensure_ascii=False, default=_json_default)


def build_logging_config(settings: Settings) -> dict[str, Any]:
    """Return the ``dictConfig`` mapping for ``settings`` without applying it."""

    audit_path = Path(settings.log_dir) / settings.audit_log_file
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"json": {"()": MinimalJSONFormatter}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
            },
            "audit": {
                "class": "logging.handlers.RotatingFileHandler",
                "filename": str(audit_path),
                "maxBytes": settings.audit_max_bytes,
                "backupCount": settings.audit_backup_count,
                "encoding": "utf-8",
                "formatter": "json",
            },
        },
        "root": {"level": settings.log_level.upper(), "handlers": ["console"]},
        "loggers": {
            settings.audit_logger: {
                "level": "INFO",
                "handlers": ["audit"],
                "propagate": False,
            }
        },
    }


def configure_logging(settings: Settings | None = None) -> Path:
    """Apply the JSON logging setup and return the audit log path."""

    settings = settings or get_settings()
    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(build_logging_config(settings))
    return log_dir / settings.audit_log_file


def get_audit_logger(settings: Settings | None = None) -> logging.Logger:
    return logging.getLogger((settings or get_settings()).audit_logger)
