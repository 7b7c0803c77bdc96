"""
hookflow - composable middleware for dispatching webhook events.

Usage:
    from hookflow import Composer, Context

    bot = Composer()
    bot.on("issues.opened", greet)
    await bot.handle(Context("issues", payload))
"""

__version__ = "0.1.0"

from hookflow.config import ComposerConfig
from hookflow.core.events import (
    Composer,
    Context,
    DispatchError,
    EventSchema,
    FunctionMiddleware,
    LoggingMiddleware,
    MiddlewareObj,
    ThrownValue,
    run,
)
from hookflow.core.exceptions import (
    DoubleContinuationError,
    HookflowError,
    QueryValidationError,
    SchemaLoadError,
)
from hookflow.core.utils import configure_logger

__all__ = [
    "Composer",
    "ComposerConfig",
    "Context",
    "DispatchError",
    "DoubleContinuationError",
    "EventSchema",
    "FunctionMiddleware",
    "HookflowError",
    "LoggingMiddleware",
    "MiddlewareObj",
    "QueryValidationError",
    "SchemaLoadError",
    "ThrownValue",
    "configure_logger",
    "run",
]
