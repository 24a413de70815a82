"""Configuration loader with 3-tier parameter precedence."""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import structlog
import yaml

from ..errors import ConfigurationError
from .defaults import (
    DecisionParams,
    EngineConfig,
    ForecastParams,
    IndicatorParams,
    RegimeParams,
    TargetParams,
    TimeframeParams,
    get_default_config,
)

logger = structlog.get_logger(__name__)

_SECTIONS = {
    "indicators": IndicatorParams,
    "regime": RegimeParams,
    "forecast": ForecastParams,
    "timeframes": TimeframeParams,
    "decision": DecisionParams,
    "targets": TargetParams,
}


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_dir: Path
    defaults: EngineConfig

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=config_dir,
            defaults=get_default_config(),
        )

    def load_symbol_config(self, symbol: str) -> dict[str, Any]:
        """Load symbol-specific configuration overrides."""
        symbols_file = self.config_dir / "symbols.yaml"

        if not symbols_file.exists():
            return {}

        with open(symbols_file) as f:
            symbols_config = yaml.safe_load(f) or {}

        return symbols_config.get("symbols", {}).get(symbol, {}) or {}

    def merge_config(
        self,
        symbol: str,
        overrides: Optional[dict[str, Any]] = None
    ) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Call-site overrides (highest priority)
        2. Symbol-specific overrides
        3. Global defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)

        symbol_config = self.load_symbol_config(symbol)
        config = self._deep_merge(config, symbol_config)

        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    def load(self, symbol: str, overrides: Optional[dict[str, Any]] = None) -> EngineConfig:
        """Merge all tiers for a symbol and build an EngineConfig."""
        merged = self.merge_config(symbol, overrides)
        logger.debug("config_loaded", symbol=symbol, config_dir=str(self.config_dir))
        return config_from_dict(merged)

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name in obj.__dataclass_fields__:
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result


def _freeze(value: Any) -> Any:
    """Turn YAML lists into tuples so frozen sections stay hashable."""
    if isinstance(value, list):
        return tuple(_freeze(item) for item in value)
    return value


def config_from_dict(data: dict[str, Any]) -> EngineConfig:
    """
    Build an EngineConfig from a (possibly partial) nested dictionary.

    Missing sections and keys fall back to defaults.

    Raises:
        ConfigurationError: If a section or key is not recognized
    """
    sections: dict[str, Any] = {}
    for name, section_type in _SECTIONS.items():
        values = data.get(name) or {}
        if not isinstance(values, dict):
            raise ConfigurationError(f"Section '{name}' must be a mapping", field=name, value=values)

        known = {f.name for f in fields(section_type)}
        unknown = set(values) - known
        if unknown:
            raise ConfigurationError(
                f"Unknown keys in section '{name}': {sorted(unknown)}",
                field=name,
                value=sorted(unknown),
            )
        sections[name] = section_type(**{key: _freeze(value) for key, value in values.items()})

    unknown_sections = set(data) - set(_SECTIONS) - {"min_bars"}
    if unknown_sections:
        raise ConfigurationError(
            f"Unknown configuration sections: {sorted(unknown_sections)}",
            value=sorted(unknown_sections),
        )

    if "min_bars" in data:
        return EngineConfig(min_bars=data["min_bars"], **sections)
    return EngineConfig(**sections)
