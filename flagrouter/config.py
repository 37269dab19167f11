# Flagrouter CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""config.py
Configuration model and loader for flagrouter routers.

A router's configuration controls the separators that `sep` tags override and how
help text is rendered. It can be built in code or loaded from a TOML or YAML file,
either at the top level or under a `flagrouter` table:

    # tool.toml
    [flagrouter]
    list_separator = "|"
    show_defaults = false
"""
from __future__ import annotations

from pathlib import Path
from typing import Any

import toml
import yaml
from pydantic import BaseModel, ConfigDict, field_validator

from flagrouter.logger import logger
from flagrouter.separators import (
    DEFAULT_KEY_VALUE_SEPARATOR,
    DEFAULT_LIST_SEPARATOR,
    DEFAULT_OUTER_SEPARATOR,
    Separators,
)

CONFIG_TABLE = "flagrouter"


class RouterConfig(BaseModel):
    """Settings shared by every scope of a router."""

    list_separator: str = DEFAULT_LIST_SEPARATOR
    key_value_separator: str = DEFAULT_KEY_VALUE_SEPARATOR
    outer_separator: str = DEFAULT_OUTER_SEPARATOR
    show_defaults: bool = True
    program: str | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator(
        "list_separator", "key_value_separator", "outer_separator", mode="before"
    )
    @classmethod
    def validate_separator(cls, value: Any) -> str:
        if not isinstance(value, str) or len(value) != 1 or value.isspace():
            raise ValueError(f"separator must be a single visible character, got {value!r}")
        return value

    @property
    def separators(self) -> Separators:
        return Separators(
            item=self.list_separator,
            key_value=self.key_value_separator,
            outer=self.outer_separator,
        )


def load_config(path: Path | str) -> RouterConfig:
    """
    Load a `RouterConfig` from a TOML or YAML file.

    Args:
        path (Path | str): A `.toml`, `.yaml` or `.yml` file.

    Returns:
        RouterConfig: The validated configuration.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the suffix is not supported.
        pydantic.ValidationError: If the settings are invalid.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"No such config file: {path}")

    suffix = path.suffix.lower()
    with path.open(encoding="UTF-8") as config_file:
        if suffix == ".toml":
            loaded = toml.load(config_file)
        elif suffix in (".yaml", ".yml"):
            loaded = yaml.safe_load(config_file)
        else:
            raise ValueError(f"Unsupported config file type: {suffix}")

    loaded = loaded or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    settings = loaded.get(CONFIG_TABLE, loaded)
    logger.debug("Loaded router config from %s: %s", path, settings)
    return RouterConfig(**settings)
