"""Client configuration: YAML file, then environment, then CLI flags."""
from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from aimy_client.common.errors import ConfigError
from aimy_client.common.options import Options, default_options
from aimy_client.common.templates import load_template

LOGGER = logging.getLogger("aimy.common.config")

DEFAULT_CONFIG_PATH = "configs/client.yaml"

# Environment variable -> config key, read with os.getenv.
ENV_OVERRIDES = {
    "AIMY_HOST": "host",
    "AIMY_PATH": "path",
    "AIMY_MODEL": "model",
    "AIMY_LOG_LEVEL": "log_level",
}


class ClientConfig(BaseModel):
    host: str = "127.0.0.1:6666"
    path: str = "/api/generate"
    model: str = Field(default="AIMY3", min_length=1)
    system: str = ""
    system_path: str | None = None
    template: str = ""
    template_path: str | None = None
    format: str = ""
    options: dict[str, Any] = Field(default_factory=dict)
    max_buffer_size: int = Field(default=65535, gt=0)
    timeout: float | None = None
    fail_fast: bool = True
    log_level: str = "WARNING"

    def build_options(self) -> Options:
        """Default options with the configured overrides applied."""
        try:
            return default_options().derive(**self.options)
        except ValidationError as e:
            raise ConfigError(f"invalid options override: {e}") from e

    def system_prompt(self) -> str:
        if self.system_path:
            return _read(self.system_path)
        return self.system

    def template_text(self) -> str:
        if self.template_path:
            return _read(self.template_path)
        return self.template


def _read(path: str) -> str:
    try:
        return load_template(path)
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e}") from e


def load_cfg(path: str | Path) -> dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"cannot read config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"malformed config {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"config {path} must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: str | Path | None = None, **overrides: Any) -> ClientConfig:
    """
    Load the client configuration.

    The file is ``path``, else ``$AIMY_CONFIG``, else ``configs/client.yaml``
    when it exists; with none of them the built-in defaults apply. Environment
    variables (``AIMY_HOST``, ``AIMY_PATH``, ``AIMY_MODEL``, ``AIMY_LOG_LEVEL``)
    override the file, and non-None ``overrides`` override both.

    Raises:
        ConfigError: If a requested file is missing or the result is invalid.
    """
    cfg_path = path or os.getenv("AIMY_CONFIG")
    data: dict[str, Any] = {}
    if cfg_path:
        data = load_cfg(cfg_path)
    elif Path(DEFAULT_CONFIG_PATH).exists():
        cfg_path = DEFAULT_CONFIG_PATH
        data = load_cfg(cfg_path)
    LOGGER.debug("Config source: %s", cfg_path or "<defaults>")

    for env, key in ENV_OVERRIDES.items():
        value = os.getenv(env)
        if value:
            data[key] = value
    data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return ClientConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"invalid config: {e}") from e
