"""
Core Exceptions for hookflow.

This module defines the exception classes raised by the event-dispatch
engine. They give callers specific error types for composition bugs, query
validation problems and schema loading failures.

The exceptions are organized into categories:
- Composition Exceptions
- Query Schema Exceptions

Each exception includes a descriptive message and a details mapping to aid in
troubleshooting.
"""

import logging
from typing import Any, Dict, Iterable, Optional

logger = logging.getLogger(__name__)


class HookflowError(Exception):
    """Base exception class for all hookflow errors."""

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        """
        Initialize a hookflow error.

        Args:
            message: Human-readable error message
            error_code: Optional error code for programmatic handling
            details: Optional details for debugging
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

        logger.debug(f"HookflowError: {message}", extra={
            "error_code": error_code,
            "details": details
        })


# Composition Exceptions

class CompositionError(HookflowError):
    """Base exception for errors in how middleware was composed."""
    pass


class DoubleContinuationError(CompositionError):
    """Raised when a middleware invokes its ``next`` continuation twice."""

    def __init__(self, message: Optional[str] = None):
        """
        Initialize a double continuation error.

        Args:
            message: Optional custom message
        """
        super().__init__(
            message or "`next` already called before!",
            error_code="DOUBLE_CONTINUATION",
        )


# Query Schema Exceptions

class SchemaError(HookflowError):
    """Base exception for event schema errors."""
    pass


class QueryValidationError(SchemaError):
    """Raised when an ``on`` query names an unknown event or action."""

    def __init__(
        self,
        query: str,
        message: Optional[str] = None,
        valid_actions: Optional[Iterable[str]] = None,
    ):
        """
        Initialize a query validation error.

        Args:
            query: The query string that failed validation
            message: Optional custom message
            valid_actions: Actions the event accepts, when the event is known
        """
        self.query = query
        self.valid_actions = sorted(valid_actions) if valid_actions is not None else None

        default_message = f"Invalid event query '{query}'"
        if self.valid_actions:
            default_message += f"; valid actions: {', '.join(self.valid_actions)}"

        super().__init__(
            message or default_message,
            error_code="INVALID_QUERY",
            details={"query": query, "valid_actions": self.valid_actions},
        )


class SchemaLoadError(SchemaError):
    """Raised when an event schema file cannot be read or parsed."""

    def __init__(self, source: str, message: Optional[str] = None, cause: Optional[Exception] = None):
        """
        Initialize a schema load error.

        Args:
            source: Path or identifier of the schema that failed to load
            message: Optional custom message
            cause: Optional underlying exception that caused this error
        """
        self.source = source
        self.cause = cause
        default_message = f"Failed to load event schema from '{source}'"
        if cause:
            default_message += f": {str(cause)}"

        super().__init__(
            message or default_message,
            error_code="SCHEMA_LOAD_FAILED",
            details={"source": source, "cause": str(cause) if cause else None}
        )


__all__ = [
    "CompositionError",
    "DoubleContinuationError",
    "HookflowError",
    "QueryValidationError",
    "SchemaError",
    "SchemaLoadError",
]
