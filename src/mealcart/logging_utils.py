"""Root logging setup for the CLI and API server.

Every handler installed here carries a ``SensitiveDataFilter`` so LLM API keys and
bearer tokens never reach the log stream, whatever format is selected.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from typing import Iterable, Sequence

REDACTED = "[redacted]"

# Each pattern keeps its first group (the label) and masks the second.
_SECRET_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"(Bearer\s+)([A-Za-z0-9\-._~+/=]+)", re.IGNORECASE),
    re.compile(r"\b(sk-)([A-Za-z0-9\-_]{8,})"),
    re.compile(r"(api_key=)([^&\s]+)", re.IGNORECASE),
)

PLAIN_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
PLAIN_DATEFMT = "%Y-%m-%dT%H:%M:%S%z"

# Record attributes copied into JSON output when present.
JSON_EXTRA_FIELDS: tuple[str, ...] = ("request_id",)

_LIBRARY_LOGGERS: tuple[str, ...] = ("uvicorn", "uvicorn.error", "uvicorn.access", "httpx")


def redact(text: str, secrets: Sequence[str] = ()) -> str:
    """Mask token-shaped substrings and every configured secret in ``text``."""

    for pattern in _SECRET_PATTERNS:
        text = pattern.sub(lambda match: match.group(1) + REDACTED, text)
    for secret in secrets:
        text = text.replace(secret, REDACTED)
    return text


class SensitiveDataFilter(logging.Filter):
    """Redact secrets from the rendered message and from string record attributes.

    Token patterns are masked even when no secrets are configured.
    """

    def __init__(self, secrets: Iterable[str]):
        super().__init__()
        self._secrets = tuple(secret.strip() for secret in secrets if secret and secret.strip())

    def filter(self, record: logging.LogRecord) -> bool:
        rendered = record.getMessage()
        cleaned = redact(rendered, self._secrets)
        if cleaned != rendered:
            # Args are already folded into the message.
            record.msg, record.args = cleaned, ()

        for key, value in list(vars(record).items()):
            if key == "msg" or not isinstance(value, str):
                continue
            setattr(record, key, redact(value, self._secrets))
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in JSON_EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value:
                payload[field] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True)


def _build_formatter(fmt: str) -> logging.Formatter:
    if (fmt or "plain").lower() == "json":
        return JsonFormatter()
    return logging.Formatter(PLAIN_FORMAT, datefmt=PLAIN_DATEFMT)


def configure_logging(level_name: str, fmt: str, secrets: Iterable[str]) -> None:
    """Replace root handlers with one redacting stream handler.

    Library loggers are reset to propagate to it at the same level.
    """

    level = getattr(logging, level_name.upper(), logging.INFO)
    redactor = SensitiveDataFilter(secrets)

    handler = logging.StreamHandler()
    handler.setFormatter(_build_formatter(fmt))
    handler.addFilter(redactor)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)
    logging.captureWarnings(True)

    for name in _LIBRARY_LOGGERS:
        library_logger = logging.getLogger(name)
        library_logger.handlers = []
        library_logger.setLevel(level)
        library_logger.propagate = True
        library_logger.filters = [
            existing for existing in library_logger.filters if not isinstance(existing, SensitiveDataFilter)
        ]
        library_logger.addFilter(redactor)
