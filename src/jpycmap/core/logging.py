"""
Logging configuration.

We use a YAML logging config (`src/jpycmap/config/logging.yaml`) and then apply
runtime overrides from settings (e.g., `JPYCMAP_LOG_LEVEL`).

Store errors and HTTP failures can quote request headers. Every handler in the packaged
config runs `RedactSecretsFilter`, so Supabase access tokens and API keys never reach
the log output.
"""

from __future__ import annotations

import copy
import logging
import logging.config
import re

from jpycmap.config.settings import get_logging_config, get_settings

REDACTED = "[REDACTED]"

_SECRET_PATTERNS = [
    # `Authorization: Bearer <token>` and bare `Bearer <token>`.
    (re.compile(r"(?i)\b(bearer\s+)[A-Za-z0-9._~+/=-]+"), rf"\g<1>{REDACTED}"),
    # `apikey: <key>`, `apikey=<key>`, `'apikey': '<key>'`.
    (re.compile(r"(?i)(\bapikey['\"]?\s*[:=]\s*['\"]?)[A-Za-z0-9._~+/=-]+"), rf"\g<1>{REDACTED}"),
    # Any JWT that is left (Supabase anon keys and user tokens are both JWTs).
    (re.compile(r"\beyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+"), REDACTED),
]


def redact_secrets(text: str) -> str:
    for pattern, replacement in _SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


class RedactSecretsFilter(logging.Filter):
    """Rewrite the record's message (and exception text) with secrets masked."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact_secrets(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        if record.exc_info and not record.exc_text:
            record.exc_text = logging.Formatter().formatException(record.exc_info)
        if record.exc_text:
            record.exc_text = redact_secrets(record.exc_text)
        return True


def configure_logging() -> None:
    """Configure the Python logging system based on packaged YAML config + settings."""
    settings = get_settings()
    config = copy.deepcopy(get_logging_config())

    level = settings.app.log_level.upper()
    config.setdefault("root", {})["level"] = level
    for handler in config.get("handlers", {}).values():
        if isinstance(handler, dict) and "level" in handler:
            handler["level"] = level

    logging.config.dictConfig(config)
