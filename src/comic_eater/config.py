"""YAML configuration loading."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from comic_eater.errors import ConfigError
from comic_eater.schemas import ConversionConfig

logger = logging.getLogger(__name__)


def load_config(path: Path | None = None, **overrides: object) -> ConversionConfig:
    """Load a conversion config from YAML and apply keyword overrides.

    Parameters
    ----------
    path : Path | None, default=None
        YAML file to read. When omitted, defaults are used.
    **overrides : object
        Field values taking precedence over the file. ``None`` values are
        ignored so unset CLI options do not clobber the file.

    Returns
    -------
    ConversionConfig
        Validated configuration.

    Raises
    ------
    ConfigError
        If the file cannot be read or parsed, or validation fails.
    """
    raw: dict[str, object] = {}
    if path is not None:
        try:
            loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"Unable to read config file {path}: {exc}") from exc
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigError(f"Config file {path} must contain a mapping.")
        raw.update(loaded)
        logger.debug("Loaded config file %s: %s", path, raw)

    raw.update({key: value for key, value in overrides.items() if value is not None})
    try:
        return ConversionConfig(**raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
