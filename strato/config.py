"""TOML-based client configuration.

Loads ~/.strato/config.toml (global) and strato.toml (project), merges
them, and applies STRATO_* environment variables on top.

    [api]
    token = "..."
    url = "https://api.cloudportal.run/strato/"
    timeout = 30
    poll_interval = 10
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from strato.api.client import DEFAULT_API_URL
from strato.convergence.budget import POLL_INTERVAL
from strato.core.exceptions import ConfigurationError

type RawConfig = dict[str, Any]

GLOBAL_CONFIG_PATH = Path.home() / ".strato" / "config.toml"
PROJECT_CONFIG_NAME = "strato.toml"

TOKEN_ENV = "STRATO_TOKEN"
URL_ENV = "STRATO_API_URL"


@dataclass(frozen=True, slots=True)
class Settings:
    token: str
    url: str = DEFAULT_API_URL
    timeout: float = 30.0
    poll_interval: float = POLL_INTERVAL

    def __repr__(self) -> str:
        return (
            f"Settings(token=***, url={self.url!r}, timeout={self.timeout}, "
            f"poll_interval={self.poll_interval})"
        )


def _deep_merge(base: RawConfig, override: RawConfig) -> RawConfig:
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_toml(path: Path) -> RawConfig:
    if not path.is_file():
        return {}
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in {path}: {e}") from e


def load_config(
    *,
    project_dir: Path | None = None,
    global_path: Path | None = None,
) -> RawConfig:
    global_cfg = _read_toml(global_path or GLOBAL_CONFIG_PATH)
    project_cfg = _read_toml((project_dir or Path.cwd()) / PROJECT_CONFIG_NAME)

    merged = _deep_merge(global_cfg, project_cfg)
    merged.setdefault("api", {})
    return merged


def load_settings(
    *,
    project_dir: Path | None = None,
    global_path: Path | None = None,
    env: Mapping[str, str] | None = None,
    token: str | None = None,
) -> Settings:
    """Resolve settings from explicit arguments, environment and TOML files.

    Precedence, highest first: ``token`` argument, environment, project
    file, global file.

    Raises:
        ConfigurationError: No token anywhere, or a malformed value.
    """
    env = os.environ if env is None else env
    api = dict(load_config(project_dir=project_dir, global_path=global_path)["api"])

    if env.get(TOKEN_ENV):
        api["token"] = env[TOKEN_ENV]
    if env.get(URL_ENV):
        api["url"] = env[URL_ENV]
    if token:
        api["token"] = token

    if not api.get("token"):
        raise ConfigurationError(
            f"No API token configured. Set {TOKEN_ENV} or add 'token' under [api] "
            f"in {PROJECT_CONFIG_NAME} or {GLOBAL_CONFIG_PATH}."
        )

    unknown = set(api) - {"token", "url", "timeout", "poll_interval"}
    if unknown:
        raise ConfigurationError(f"Unknown [api] settings: {', '.join(sorted(unknown))}")

    try:
        return Settings(
            token=str(api["token"]),
            url=str(api.get("url", DEFAULT_API_URL)),
            timeout=float(api.get("timeout", 30.0)),
            poll_interval=float(api.get("poll_interval", POLL_INTERVAL)),
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid [api] settings: {e}") from e
