"""
Logging setup for the server and the CLI.

Two loggers are used:
- ``ai_news``: pipeline and request events, to a rich console and optionally
  a JSONL (or plain) file
- ``ai_news.llm``: raw model responses (and optionally prompts), JSONL only,
  written through the redaction helpers below

Every record carries a ``request_id`` so the lines of one /api/news call
can be grouped; outside a request it is "-".
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
import re
from typing import Any, Iterator
import uuid

from rich.logging import RichHandler

from .config import LoggingConfig


_URL_RE = re.compile(r"https?://\S+")
_REQUEST_ID: ContextVar[str] = ContextVar("ai_news_request_id", default="-")


class RequestIdFilter(logging.Filter):
    """Stamp the current request id onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _REQUEST_ID.get()
        return True


@contextmanager
def request_context(request_id: str | None = None) -> Iterator[str]:
    """Bind a request id for the duration of the block."""
    rid = request_id or uuid.uuid4().hex[:12]
    token = _REQUEST_ID.set(rid)
    try:
        yield rid
    finally:
        _REQUEST_ID.reset(token)


def current_request_id() -> str:
    return _REQUEST_ID.get()


def setup_logging(cfg: LoggingConfig) -> logging.Logger:
    level = _level_from_string(cfg.level)
    logger = _fresh_logger("ai_news", level)

    if cfg.console:
        console_handler = RichHandler(rich_tracebacks=True, show_time=True, show_level=True, show_path=False)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter("[%(request_id)s] %(message)s"))
        logger.addHandler(console_handler)

    if cfg.file:
        file_handler = _file_handler(cfg, cfg.filename)
        file_handler.setLevel(level)
        file_handler.setFormatter(_build_file_formatter(cfg.format))
        logger.addHandler(file_handler)

    return logger


def setup_llm_logger(cfg: LoggingConfig) -> logging.Logger | None:
    if not cfg.llm_log_enabled:
        return None

    logger = _fresh_logger("ai_news.llm", _level_from_string(cfg.level))
    file_handler = _file_handler(cfg, cfg.llm_log_file)
    file_handler.setFormatter(JsonlFormatter())
    logger.addHandler(file_handler)
    return logger


def log_event(logger: logging.Logger | None, message: str, level: int = logging.INFO, **fields: Any) -> None:
    if logger is None:
        return
    logger.log(level, message, extra=fields)


def redact_text(text: str, mode: str) -> str:
    """Apply a redaction mode to prompt or response text.

    ``redact_content`` drops the text entirely; ``redact_urls`` keeps it but
    masks every http(s) URL (article links in prompts and in generated
    fragments). Unknown modes leave the text unchanged.
    """
    if mode == "redact_content":
        return ""
    if mode == "redact_urls":
        return _URL_RE.sub("[REDACTED_URL]", text)
    return text


def truncate_text(text: str, max_chars: int = 20000) -> str:
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "...(truncated)"


class JsonlFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, logger, message, request_id and extras."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", _REQUEST_ID.get()),
        }
        payload.update(_extract_extras(record))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


# LogRecord attributes that are not user-supplied extras.
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
    "request_id",
    "taskName",
}


def _extract_extras(record: logging.LogRecord) -> dict[str, Any]:
    return {key: value for key, value in record.__dict__.items() if key not in _RESERVED_ATTRS}


def _fresh_logger(name: str, level: int) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers = []
    logger.filters = []
    logger.propagate = False
    logger.addFilter(RequestIdFilter())
    return logger


def _file_handler(cfg: LoggingConfig, filename: str) -> logging.FileHandler:
    log_dir = Path(cfg.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(log_dir / filename, encoding="utf-8")


def _build_file_formatter(fmt: str) -> logging.Formatter:
    if fmt == "jsonl":
        return JsonlFormatter()
    return logging.Formatter("%(asctime)s %(levelname)s [%(request_id)s] %(message)s")


def _level_from_string(level: str) -> int:
    return getattr(logging, level.upper(), logging.INFO)
