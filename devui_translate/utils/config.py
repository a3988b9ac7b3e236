"""Settings resolution for devui-translate.

Precedence (lowest first): built-in defaults, JSON settings file, environment,
command-line flags. The settings file lives next to the extension as
``devui-translate.json`` unless ``--config`` points elsewhere.
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

from devui_translate.errors import ConfigError
from .logging import mask_token, translate_logger as LOG

SETTINGS_FILE_NAME = "devui-translate.json"

SETTINGS_DEFAULTS: Dict[str, Any] = {
    "openai_base_url": "https://api.openai.com/v1",
    "model": "gpt-4o-mini",
    "timeout_seconds": 60,
    "temperature": 0.0,
    "localization_module": "localization",
    "template_module": "@lit/localize",
    "languages": [],
    "dialects": [],
    "ignore": [],
    "log_level": "INFO",
}

ENV_OVERRIDES = {
    "openai_api_key": "OPENAI_API_KEY",
    "openai_base_url": "OPENAI_BASE_URL",
    "model": "DEVUI_TRANSLATE_MODEL",
    "log_level": "DEVUI_TRANSLATE_LOG_LEVEL",
}


@dataclass
class TranslateSettings:
    openai_api_key: Optional[str] = None
    openai_base_url: str = SETTINGS_DEFAULTS["openai_base_url"]
    model: str = SETTINGS_DEFAULTS["model"]
    timeout_seconds: int = SETTINGS_DEFAULTS["timeout_seconds"]
    temperature: float = SETTINGS_DEFAULTS["temperature"]
    localization_module: str = SETTINGS_DEFAULTS["localization_module"]
    template_module: str = SETTINGS_DEFAULTS["template_module"]
    languages: List[str] = field(default_factory=list)
    dialects: List[str] = field(default_factory=list)
    ignore: List[str] = field(default_factory=list)
    log_level: str = SETTINGS_DEFAULTS["log_level"]

    def with_overrides(self, **overrides: Any) -> "TranslateSettings":
        """Return a copy with every non-empty override applied."""
        values = {k: v for k, v in overrides.items() if v not in (None, "", [])}
        return replace(self, **values)


def _read_settings_file(path: Path) -> Dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
        data = json.loads(raw or "{}")
    except OSError as e:
        raise ConfigError(f"Failed to read settings file {path}: {e}") from e
    except ValueError as e:
        raise ConfigError(f"Malformed settings file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Settings file {path} must contain a JSON object")
    known = {f.name for f in fields(TranslateSettings)}
    unknown = sorted(set(data) - known)
    if unknown:
        LOG.warning("Ignoring unknown settings in %s: %s", path, ", ".join(unknown))
    return {k: v for k, v in data.items() if k in known}


def _split_list(value: Any) -> List[str]:
    if isinstance(value, str):
        value = value.split(",")
    return [str(v).strip() for v in value or [] if str(v).strip()]


def load_settings(
    extension_root: Optional[Path] = None,
    config_path: Optional[Path] = None,
    environ: Optional[Dict[str, str]] = None,
) -> TranslateSettings:
    """Resolve settings from defaults, the settings file and the environment.

    An explicit ``config_path`` must exist; the implicit file in the extension
    root is optional.
    """
    env = os.environ if environ is None else environ
    cfg: Dict[str, Any] = dict(SETTINGS_DEFAULTS)

    path = config_path
    if path is None and extension_root is not None:
        candidate = Path(extension_root) / SETTINGS_FILE_NAME
        path = candidate if candidate.exists() else None
    elif path is not None and not Path(path).exists():
        raise ConfigError(f"Settings file not found: {path}")

    if path is not None:
        cfg.update(_read_settings_file(Path(path)))
        LOG.debug("load_settings: read %s", path)

    for key, var in ENV_OVERRIDES.items():
        if env.get(var):
            cfg[key] = env[var]

    for key in ("languages", "dialects", "ignore"):
        cfg[key] = _split_list(cfg.get(key))

    try:
        cfg["timeout_seconds"] = int(cfg["timeout_seconds"])
        cfg["temperature"] = float(cfg["temperature"])
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid numeric setting: {e}") from e

    settings = TranslateSettings(**cfg)
    LOG.debug(
        "load_settings: base_url=%r model=%r api_key=%s",
        settings.openai_base_url,
        settings.model,
        mask_token(settings.openai_api_key),
    )
    return settings
