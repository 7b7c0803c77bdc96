"""Per-event context handed to every middleware during a dispatch.

The :class:`Context` pairs the name of a webhook event with its payload. The
host builds one instance per incoming event and hands it to
``Composer.handle``; middleware borrow it for the duration of the dispatch.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Context:
    """Immutable holder of one event's name and payload.

    Attributes:
        event_name: Kind of the event, e.g. ``"push"`` or ``"issues"``.
        event: Payload delivered with the event. The binding is fixed but the
            mapping itself may be mutated by middleware, and such changes are
            visible to everything that runs later in the same dispatch.
    """

    event_name: str
    event: Mapping[str, Any]

    def __post_init__(self) -> None:
        if not isinstance(self.event_name, str) or not self.event_name:
            raise ValueError(f"event_name must be a non-empty string, got {self.event_name!r}")

    @property
    def action(self) -> Optional[Any]:
        """Return the payload's ``action`` field, or ``None`` when absent."""

        if isinstance(self.event, Mapping):
            return self.event.get("action")
        return getattr(self.event, "action", None)


__all__ = ["Context"]
