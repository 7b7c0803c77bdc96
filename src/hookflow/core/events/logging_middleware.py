"""Middleware that logs events flowing through a composer."""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

from .composer.middleware import MiddlewareFn, MiddlewareObj, NextFunction
from .context import Context

logger = logging.getLogger(__name__)


class LoggingMiddleware(MiddlewareObj):
    """Middleware that records basic event telemetry to the logger.

    Args:
        log: Logger to write to. Defaults to this module's logger.
    """

    def __init__(self, log: Optional[logging.Logger] = None) -> None:
        self._logger = log or logger

    def middleware(self) -> MiddlewareFn:
        return self.process

    async def process(self, ctx: Context, next_: NextFunction) -> Any:
        """Log the inbound event, delegate, and log the outcome.

        Args:
            ctx: Context currently being dispatched.
            next_: Continuation running everything registered after this
                middleware.

        Returns:
            Whatever the continuation produced.
        """

        start_time = time.perf_counter()
        action = ctx.action
        label = f"{ctx.event_name}.{action}" if action else ctx.event_name
        self._logger.info("Event received: %s", label)
        try:
            result = await next_()
        except Exception as error:
            self._logger.error("Error processing event %s: %s", label, error, exc_info=True)
            raise
        self._logger.info(
            "Event %s processed in %.4fs",
            label,
            time.perf_counter() - start_time,
        )
        return result


__all__ = ["LoggingMiddleware"]
