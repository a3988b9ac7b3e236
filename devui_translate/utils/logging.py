# FILE: devui_translate/utils/logging.py
"""
Unified logging helpers for devui-translate

- Creates one stderr logger for the whole tool (configured once, reused).
- Honors log level from the settings file ("log_level") or DEVUI_TRANSLATE_LOG_LEVEL.
- Provides small helpers to mask API keys and compact JSON for log lines.
- Tiny HTTP request/response logging helpers for consistent translation-client traces.
"""

import json
import logging
import os
from contextlib import contextmanager
from typing import Any, Dict, Optional

LOG_LEVEL_ENV = "DEVUI_TRANSLATE_LOG_LEVEL"
LOG_FORMAT = "%(levelname)s: %(message)s"


# ---------------------------
# Level helpers
# ---------------------------

def level_from_string(level_str: Optional[str], default: int = logging.INFO) -> int:
    """Map string level to logging constant; returns `default` on unknown."""
    if not level_str:
        return default
    level = logging.getLevelName(str(level_str).strip().upper())
    return level if isinstance(level, int) else default


def _level_from_env(default: int = logging.INFO) -> int:
    """Read desired log level from the environment (DEVUI_TRANSLATE_LOG_LEVEL)."""
    return level_from_string(os.environ.get(LOG_LEVEL_ENV), default)


# ---------------------------
# Public logger factory
# ---------------------------

def get_translate_logger(
    name: str = "devui_translate",
    *,
    default_level: int = logging.INFO,
) -> logging.Logger:
    """
    Create or return the tool logger.

    Child loggers (devui_translate.rewriter, ...) propagate here, so only the
    root tool logger carries a handler.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
    logger.setLevel(_level_from_env(default=default_level))
    return logger


def configure_level(level: Optional[str]) -> None:
    """Apply a level coming from the settings file; env var still wins."""
    if os.environ.get(LOG_LEVEL_ENV):
        return
    translate_logger.setLevel(level_from_string(level, translate_logger.level))


# Singleton logger used across the tool
translate_logger = get_translate_logger()


# ---------------------------
# Mask/format utilities
# ---------------------------

def mask_token(tok: Optional[str], *, keep: int = 6) -> str:
    """Mask a token/secret for logs, keeping first `keep` chars."""
    if not tok:
        return "<none>"
    t = str(tok)
    if len(t) <= keep:
        return "*" * len(t)
    return t[:keep] + "…" + ("*" * max(0, len(t) - keep - 1))


def compact_json(obj: Any, limit: int = 1200) -> str:
    """Compact JSON string for logging; truncate if too long."""
    try:
        s = json.dumps(obj, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError):
        s = str(obj)
    return s if len(s) <= limit else s[:limit] + "…(truncated)"


# ---------------------------
# HTTP trace helpers
# ---------------------------

def log_http_request(
    logger: logging.Logger,
    *,
    method: str,
    url: str,
    payload: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, Any]] = None,
) -> None:
    """Consistent request breadcrumb."""
    logger.debug("HTTP %s %s payload=%s", method.upper(), url, compact_json(payload or {}))
    if headers:
        logger.debug(
            "Headers=%s",
            compact_json({k: (mask_token(v) if k.lower() == "authorization" else v) for k, v in headers.items()}),
        )


def log_http_response(
    logger: logging.Logger,
    *,
    url: str,
    status: int,
    body: Any,
) -> None:
    """Consistent response breadcrumb."""
    level = logging.DEBUG if 200 <= status < 400 else logging.ERROR
    logger.log(level, "HTTP %s status=%s body=%s", url, status, compact_json(body))


# ---------------------------
# Temporary level override
# ---------------------------

@contextmanager
def temporarily(level: int):
    """
    Temporarily raise/lower the tool logger level.

    Example:
        with temporarily(logging.DEBUG):
            # noisy section
            ...
    """
    logger = translate_logger
    old = logger.level
    try:
        logger.setLevel(level)
        yield logger
    finally:
        logger.setLevel(old)
