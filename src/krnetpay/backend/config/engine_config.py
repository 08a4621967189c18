"""Configuration loader wrapping the shared schema models."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .schema import (
    AgeBracket,
    ConfigurationError,
    DeductionRates,
    EngineConfiguration,
    IncomeTaxBracket,
    PercentileTier,
    RankingConfig,
    ReferenceSourceConfig,
    SolverConfig,
)

CONFIG_DIRECTORY = Path(__file__).resolve().parent / "data"
ENGINE_FILE = CONFIG_DIRECTORY / "engine.yaml"


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration file must define a mapping at the top level")
    return data


@lru_cache(maxsize=1)
def load_engine_configuration() -> EngineConfiguration:
    """Load and cache the engine configuration from disk."""

    if not ENGINE_FILE.exists():
        raise FileNotFoundError(f"Engine configuration missing: {ENGINE_FILE.name}")

    raw_config = _load_yaml(ENGINE_FILE)

    try:
        return EngineConfiguration.model_validate(raw_config)
    except ValidationError as error:
        raise ConfigurationError(f"Configuration validation failed: {error}") from error


def resolve_data_path(value: str | None) -> Path | None:
    """Resolve ``value`` relative to the bundled data directory."""

    if not value:
        return None
    path = Path(value)
    if not path.is_absolute():
        path = CONFIG_DIRECTORY / path
    return path


__all__ = [
    "AgeBracket",
    "CONFIG_DIRECTORY",
    "ConfigurationError",
    "DeductionRates",
    "ENGINE_FILE",
    "EngineConfiguration",
    "IncomeTaxBracket",
    "PercentileTier",
    "RankingConfig",
    "ReferenceSourceConfig",
    "SolverConfig",
    "load_engine_configuration",
    "resolve_data_path",
]
