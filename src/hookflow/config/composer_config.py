"""
Composer configuration definitions.

Purpose:
    Provide a typed configuration object for the middleware composer so
    hosts can depend on validated settings instead of loose dictionaries.
External Dependencies:
    None. This module relies exclusively on the Python standard library.
Fallback Semantics:
    When no explicit configuration is provided, callers should use
    `get_default_composer_config()` which validates every ``on`` query
    against the packaged webhook event schema.
Environment:
    `load_composer_config_from_env()` reads ``HOOKFLOW_VALIDATE_QUERIES``,
    ``HOOKFLOW_SCHEMA_PATH`` and ``HOOKFLOW_LOG_LEVEL``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from hookflow.core.utils.logging import configure_logger

_LOG_LEVELS = frozenset({"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"})
_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True)
class ComposerConfig:
    """Immutable configuration values for composer construction.

    Parameters:
        validate_queries (bool): Whether ``Composer.on`` rejects queries that
            name events or actions missing from the event schema.
        schema_path (str | None): Optional path to a YAML event schema used
            instead of the packaged default.
        log_level (str): Level name applied to the ``hookflow`` logger tree
            by :meth:`configure_logging`.
    Raises:
        ValueError: When ``log_level`` is not a standard level name or
            ``schema_path`` is an empty string.
    """

    validate_queries: bool = True
    schema_path: Optional[str] = None
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        normalized = str(self.log_level).strip().upper()
        if normalized not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}, got {self.log_level!r}")
        object.__setattr__(self, "log_level", normalized)
        if self.schema_path is not None and not str(self.schema_path).strip():
            raise ValueError("schema_path cannot be an empty string")

    def configure_logging(self, name: str = "hookflow") -> logging.Logger:
        """Attach the standard handler to ``name`` at ``log_level``.

        Hosts call this once at startup; the composer never configures
        logging on its own. A logger that already has handlers is returned
        unchanged.
        """

        return configure_logger(name, self.log_level)


def get_default_composer_config() -> ComposerConfig:
    """Build the default composer configuration."""

    return ComposerConfig()


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {raw!r}")


def load_composer_config_from_env(environ: Optional[Mapping[str, str]] = None) -> ComposerConfig:
    """Build a configuration from ``HOOKFLOW_*`` environment variables.

    Parameters:
        environ: Mapping to read instead of ``os.environ``.
    Returns:
        ComposerConfig: Configuration with unset variables left at defaults.
    Raises:
        ValueError: When a variable holds a value that cannot be parsed.
    """

    env = os.environ if environ is None else environ
    defaults = get_default_composer_config()

    validate_raw = env.get("HOOKFLOW_VALIDATE_QUERIES")
    validate_queries = (
        defaults.validate_queries
        if validate_raw is None
        else _parse_bool("HOOKFLOW_VALIDATE_QUERIES", validate_raw)
    )

    return ComposerConfig(
        validate_queries=validate_queries,
        schema_path=env.get("HOOKFLOW_SCHEMA_PATH") or defaults.schema_path,
        log_level=env.get("HOOKFLOW_LOG_LEVEL", defaults.log_level),
    )


__all__ = [
    "ComposerConfig",
    "get_default_composer_config",
    "load_composer_config_from_env",
]
