"""Event dispatch infrastructure: contexts, schema and composers."""

from .composer import (
    Composer,
    DispatchError,
    FunctionMiddleware,
    MiddlewareObj,
    ThrownValue,
    run,
)
from .context import Context
from .logging_middleware import LoggingMiddleware
from .schema import EventSchema, get_default_schema, parse_query

__all__ = [
    "Composer",
    "Context",
    "DispatchError",
    "EventSchema",
    "FunctionMiddleware",
    "LoggingMiddleware",
    "MiddlewareObj",
    "ThrownValue",
    "get_default_schema",
    "parse_query",
    "run",
]
