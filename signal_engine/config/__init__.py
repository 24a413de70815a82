"""Engine configuration: frozen defaults, YAML overrides and validation."""

from .defaults import EngineConfig, get_default_config
from .loader import ConfigLoader, config_from_dict
from .validation import ConfigValidator, ValidationError, ensure_valid_config, validate_config

__all__ = [
    "EngineConfig",
    "get_default_config",
    "ConfigLoader",
    "config_from_dict",
    "ConfigValidator",
    "ValidationError",
    "ensure_valid_config",
    "validate_config",
]
