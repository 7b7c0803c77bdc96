"""Event schema used to validate ``Composer.on`` queries.

The schema is a closed mapping from event names to the action qualifiers their
payloads may carry. It is consulted only when a query is registered; matching
at dispatch time is plain string comparison.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from importlib import resources
from pathlib import Path
from typing import Any, Dict, FrozenSet, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from hookflow.core.exceptions import QueryValidationError, SchemaLoadError

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA_RESOURCE = "webhook_events.yaml"

_default_schema: Optional["EventSchema"] = None


def parse_query(query: str) -> Tuple[str, Optional[str]]:
    """Split ``"<event>"`` or ``"<event>.<action>"`` into its parts.

    Raises:
        QueryValidationError: When the query is not a string or either part
            is empty.
    """

    if not isinstance(query, str):
        raise QueryValidationError(str(query), f"Event query must be a string, got {type(query)}")
    event, separator, action = query.partition(".")
    if not event or (separator and not action):
        raise QueryValidationError(query, f"Malformed event query '{query}'")
    return event, (action if separator else None)


class EventSchema(BaseModel):
    """Closed mapping of event names to their valid action qualifiers."""

    model_config = ConfigDict(frozen=True)

    events: Dict[str, FrozenSet[str]] = Field(default_factory=dict)

    @field_validator("events", mode="before")
    @classmethod
    def _normalize_events(cls, value: Any) -> Dict[str, FrozenSet[str]]:
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise ValueError(f"events must be a mapping of event names to actions, got {type(value).__name__}")

        normalized: Dict[str, FrozenSet[str]] = {}
        for name, actions in value.items():
            name = str(name).strip()
            if not name or "." in name:
                raise ValueError(f"invalid event name {name!r}")
            if isinstance(actions, str):
                actions = [actions]
            normalized[name] = frozenset(str(action) for action in (actions or ()))
        return normalized

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "EventSchema":
        """Build a schema from ``{event_name: [actions...]}``."""

        return cls(events=mapping)

    @classmethod
    def from_yaml(cls, source: Union[str, Path]) -> "EventSchema":
        """Load a schema from a YAML file with a top-level ``events`` key.

        Raises:
            SchemaLoadError: When the file cannot be read, parsed or validated.
        """

        path = Path(source)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as error:
            raise SchemaLoadError(str(path), cause=error) from error
        return cls._from_yaml_text(text, str(path))

    @classmethod
    def _from_yaml_text(cls, text: str, source: str) -> "EventSchema":
        try:
            document = yaml.safe_load(text) or {}
        except yaml.YAMLError as error:
            raise SchemaLoadError(source, cause=error) from error

        if not isinstance(document, Mapping) or "events" not in document:
            raise SchemaLoadError(source, f"Event schema '{source}' must define a top-level 'events' mapping")

        try:
            schema = cls(events=document["events"])
        except ValidationError as error:
            raise SchemaLoadError(source, cause=error) from error

        logger.debug("Loaded event schema from %s with %d events", source, len(schema.events))
        return schema

    def actions_for(self, event_name: str) -> Optional[FrozenSet[str]]:
        """Return the valid actions for ``event_name``, or ``None`` when unknown."""

        return self.events.get(event_name)

    def is_valid_query(self, query: str) -> bool:
        """Return whether ``query`` names a known event and action."""

        try:
            self.validate_query(query)
        except QueryValidationError:
            return False
        return True

    def validate_query(self, query: str) -> Tuple[str, Optional[str]]:
        """Check ``query`` against the schema and return its parsed parts.

        Raises:
            QueryValidationError: When the event is unknown or the action is
                not one the event carries.
        """

        event, action = parse_query(query)
        actions = self.actions_for(event)
        if actions is None:
            raise QueryValidationError(query, f"Unknown event '{event}' in query '{query}'")
        if action is not None and action not in actions:
            if not actions:
                raise QueryValidationError(query, f"Event '{event}' does not carry actions; got query '{query}'")
            raise QueryValidationError(
                query,
                f"Unknown action '{action}' for event '{event}'; valid actions: {', '.join(sorted(actions))}",
                valid_actions=actions,
            )
        return event, action


def load_schema(schema_path: Optional[str] = None) -> EventSchema:
    """Return the schema at ``schema_path``, or the packaged default."""

    if schema_path:
        return EventSchema.from_yaml(schema_path)
    return get_default_schema()


def get_default_schema() -> EventSchema:
    """Return the packaged webhook event schema, loading it on first use."""

    global _default_schema

    if _default_schema is None:
        resource = resources.files(__package__).joinpath(DEFAULT_SCHEMA_RESOURCE)
        try:
            text = resource.read_text(encoding="utf-8")
        except OSError as error:
            raise SchemaLoadError(DEFAULT_SCHEMA_RESOURCE, cause=error) from error
        _default_schema = EventSchema._from_yaml_text(text, DEFAULT_SCHEMA_RESOURCE)

    return _default_schema


def reset_default_schema() -> None:
    """Forget the cached default schema (for testing)."""

    global _default_schema
    _default_schema = None


__all__ = [
    "DEFAULT_SCHEMA_RESOURCE",
    "EventSchema",
    "get_default_schema",
    "load_schema",
    "parse_query",
    "reset_default_schema",
]
