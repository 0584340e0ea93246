# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
# Purpose: Defines the config unit so this responsibility stays isolated, testable, and easy to evolve.

"""
Configuration loading utilities for AssistantChat.

Conventions:
- Optional JSON config file (path from argument or ASSISTANTCHAT_CONFIG).
- Environment variables override JSON values.
- JSON values can reference environment variables using ${VAR_NAME} placeholders.

The result is a frozen ``AppConfig`` built once at startup and handed to the
app factory; nothing reads configuration from module globals afterwards.
"""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from assistantchat.core.messages import DEFAULT_LOCALE, supported_locales
from assistantchat.services.exceptions import ConfigurationError

DEFAULT_BASE_URL = "https://api.deepseek.com/v1"
DEFAULT_MODEL = "deepseek-chat"
DEFAULT_TIMEOUT_S = 60

CONFIG_PATH_ENV = "ASSISTANTCHAT_CONFIG"


class AppConfig(BaseModel):
    """Process-wide, read-only settings for the proxy and the chat client."""

    model_config = ConfigDict(frozen=True)

    api_key: str
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    timeout_s: float = DEFAULT_TIMEOUT_S
    locale: str = DEFAULT_LOCALE
    static_dir: Optional[str] = None
    # exposes the upstream exchange log over HTTP; off unless asked for
    debug: bool = False


_ENV_PATTERN = re.compile(r"\$\{([A-Z0-9_]+)\}")


def _interpolate_env(value: Any) -> Any:
    """Interpolate ${VAR} placeholders within strings using environment variables.

    Non-string types are returned unchanged.
    """
    if isinstance(value, str):

        def replace(match: re.Match[str]) -> str:
            var = match.group(1)
            return os.getenv(var, match.group(0))  # leave placeholder if unset

        return _ENV_PATTERN.sub(replace, value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(v) for v in value]
    return value


def _deep_merge(base: Dict[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Deeply merge mapping 'override' into dict 'base'. Returns new dict."""
    result: Dict[str, Any] = dict(base)
    for k, v in override.items():
        if isinstance(v, Mapping) and isinstance(result.get(k), Mapping):
            result[k] = _deep_merge(dict(result[k]), v)  # type: ignore[index]
        else:
            result[k] = v
    return result


def load_json_file(path: os.PathLike[str] | str | None) -> Dict[str, Any]:
    """Load JSON from path if it exists; return empty dict if missing.

    Raises ConfigurationError for malformed JSON.
    """
    if path is None:
        return {}
    p = Path(path)
    if not p.exists():
        return {}
    try:
        with p.open("r", encoding="utf-8") as f:
            data = json.load(f)
        return data if isinstance(data, dict) else {}
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON at {p}: {e}") from e


def _env_overrides() -> Dict[str, Any]:
    """Collect supported environment variables into config keys.

    Supported variables:
    - DEEPSEEK_API_KEY -> api_key
    - DEEPSEEK_BASE_URL -> base_url
    - DEEPSEEK_MODEL -> model
    - DEEPSEEK_TIMEOUT_S -> timeout_s (float if parseable)
    - ASSISTANTCHAT_LOCALE -> locale
    - ASSISTANTCHAT_DEBUG -> debug
    """
    result: Dict[str, Any] = {}
    mapping = {
        "DEEPSEEK_API_KEY": "api_key",
        "DEEPSEEK_BASE_URL": "base_url",
        "DEEPSEEK_MODEL": "model",
        "ASSISTANTCHAT_LOCALE": "locale",
        "ASSISTANTCHAT_DEBUG": "debug",
    }
    for env_name, key in mapping.items():
        value = os.getenv(env_name)
        if value is not None:
            result[key] = value

    timeout_s = os.getenv("DEEPSEEK_TIMEOUT_S")
    if timeout_s is not None:
        try:
            result["timeout_s"] = float(timeout_s)
        except ValueError:
            result["timeout_s"] = timeout_s
    return result


def load_app_config(
    path: os.PathLike[str] | str | None = None,
    defaults: Optional[Mapping[str, Any]] = None,
) -> AppConfig:
    """Build the application config applying precedence and interpolation.

    Precedence: env overrides > JSON file > defaults.

    Raises ConfigurationError when the credential is missing or blank, when
    the locale is unknown, or when a value has the wrong type.
    """
    if path is None:
        path = os.getenv(CONFIG_PATH_ENV)
    merged = _deep_merge(dict(defaults or {}), _interpolate_env(load_json_file(path)))
    merged = _deep_merge(merged, _env_overrides())

    api_key = merged.get("api_key")
    if not isinstance(api_key, str) or not api_key.strip() or _ENV_PATTERN.search(
        api_key
    ):
        raise ConfigurationError(
            "Missing API credential: set DEEPSEEK_API_KEY or api_key in the config file"
        )

    locale = merged.get("locale", DEFAULT_LOCALE)
    if locale not in supported_locales():
        raise ConfigurationError(
            f"Unsupported locale {locale!r}; expected one of {supported_locales()}"
        )

    try:
        return AppConfig(**merged)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
