"""Configuration objects for hookflow."""

from .composer_config import (
    ComposerConfig,
    get_default_composer_config,
    load_composer_config_from_env,
)

__all__ = [
    "ComposerConfig",
    "get_default_composer_config",
    "load_composer_config_from_env",
]
