# -*- coding: utf-8 -*-
"""Exception hierarchy shared by the extraction, resource and CLI layers."""

from __future__ import annotations

from typing import Optional

__all__ = [
    "DevUITranslateError",
    "ConfigError",
    "ResourceIOError",
]


class DevUITranslateError(Exception):
    """Base exception for devui-translate."""


class ConfigError(DevUITranslateError):
    """Raised when the settings file is missing required values or malformed."""


class ResourceIOError(DevUITranslateError):
    """Raised on fatal file-system failures (read, write, directory creation)."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path
