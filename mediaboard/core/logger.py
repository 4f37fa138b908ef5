# mediaboard/core/logger.py
from __future__ import annotations

"""
Mediaboard — Logging (Loguru)
-----------------------------
Every module logs through the stdlib `logging` API; records are forwarded to
Loguru, which owns formatting and sinks.

- Console sink: colorized line format, or one JSON object per line (`LOG_JSON=1`)
- Each record carries the `request_id` bound by `RequestIDMiddleware`
- Image store, query and service events land at INFO/DEBUG; cleanup failures
  at WARNING; unhandled errors at ERROR with traceback
- Optional rotating file sink

Env
---
LOG_LEVEL=INFO|DEBUG|WARNING|ERROR   (default: INFO)
LOG_JSON=1                           structured output
LOG_TO_FILE=1                        also write `$LOG_DIR/$LOG_FILE` (default: off)
LOG_DIR=logs, LOG_FILE=mediaboard.log, LOG_ROTATION="10 MB"
APP_DEBUG=1                          Loguru backtrace/diagnose on the console
"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Iterable

from dotenv import load_dotenv
from loguru import logger

load_dotenv()

_TRUE = {"1", "true", "yes", "on"}


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in _TRUE


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper()
LOG_JSON = _flag("LOG_JSON")
APP_DEBUG = _flag("APP_DEBUG")
LOG_TO_FILE = _flag("LOG_TO_FILE")
LOG_PATH = Path(os.getenv("LOG_DIR", "logs")) / os.getenv("LOG_FILE", "mediaboard.log")
LOG_ROTATION = os.getenv("LOG_ROTATION", "10 MB")

# stdlib loggers forwarded into Loguru; "sqlalchemy" is capped at WARNING
INTERCEPTED = ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi", "starlette", "sqlalchemy", "mediaboard")


# ─────────────────────────────────────────────────────────────
# 🧾 Formatters
# ─────────────────────────────────────────────────────────────
def _escape(text: str) -> str:
    # Loguru treats <...> as color markup
    return (text or "").replace("<", r"\<")


def _line_format(record) -> str:
    record["extra"].setdefault("request_id", "-")
    where = f"{_escape(record['name'])}:{_escape(record['function'])}"
    return (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> "
        "<level>{level:<7}</level> "
        f"<cyan>{where}</cyan>:<cyan>{{line}}</cyan> "
        "[{extra[request_id]}] <level>{message}</level>\n{exception}"
    )


def _as_json(record) -> str:
    body: Dict[str, Any] = {
        "time": record["time"].isoformat(),
        "level": record["level"].name,
        "logger": record["name"],
        "line": record["line"],
        "message": record["message"],
        "request_id": record["extra"].get("request_id"),
    }
    body.update({k: v for k, v in record["extra"].items() if k not in body and k != "_json"})
    if record["exception"] is not None:
        body["exception"] = repr(record["exception"].value)
    return json.dumps(body, ensure_ascii=False, default=str)


def _json_format(record) -> str:
    record["extra"]["_json"] = _as_json(record)
    return "{extra[_json]}\n"


# ─────────────────────────────────────────────────────────────
# 🔁 stdlib → Loguru bridge
# ─────────────────────────────────────────────────────────────
class InterceptHandler(logging.Handler):
    """Hand a stdlib `LogRecord` to Loguru, preserving level and call site."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: Any = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # walk out of the logging module so Loguru reports the real caller
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def install_intercept(names: Iterable[str] = INTERCEPTED) -> None:
    """Point the named stdlib loggers at Loguru (safe to call repeatedly)."""
    for name in names:
        std = logging.getLogger(name)
        std.handlers = [InterceptHandler()]
        std.setLevel("WARNING" if name == "sqlalchemy" else LOG_LEVEL)
        std.propagate = False


def configure_logging() -> None:
    """(Re)install the Loguru sinks and the stdlib intercept."""
    fmt = _json_format if LOG_JSON else _line_format
    logger.remove()
    logger.add(sys.stdout, level=LOG_LEVEL, format=fmt, backtrace=APP_DEBUG, diagnose=APP_DEBUG)
    if LOG_TO_FILE:
        LOG_PATH.parent.mkdir(parents=True, exist_ok=True)
        logger.add(str(LOG_PATH), level=LOG_LEVEL, format=fmt, rotation=LOG_ROTATION, enqueue=True)
    install_intercept()


configure_logging()

__all__ = ["logger", "InterceptHandler", "install_intercept", "configure_logging"]
