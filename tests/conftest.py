"""Global pytest configuration for hookflow.

The module ensures the ``src`` tree is importable regardless of how the
repository is cloned, and provides shared fixtures for building contexts and
recording middleware calls.
"""

import sys
from pathlib import Path
from typing import Any, Callable, List

import pytest

# Add the src directory to the Python path so imports can work correctly
# without needing to install the package first
project_root = Path(__file__).parent.parent
src_dir = project_root / 'src'

if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

from hookflow.core.events.context import Context  # noqa: E402
from hookflow.core.events.schema import reset_default_schema  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_default_schema():
    """Drop the cached default schema between tests."""

    reset_default_schema()
    yield
    reset_default_schema()


@pytest.fixture
def make_context() -> Callable[..., Context]:
    """Build a context for ``event_name`` with ``payload`` fields."""

    def factory(event_name: str = "push", **payload: Any) -> Context:
        return Context(event_name, dict(payload))

    return factory


@pytest.fixture
def calls() -> List[str]:
    """Ordered log that recording middleware append to."""

    return []


@pytest.fixture
def record(calls: List[str]) -> Callable[..., Callable]:
    """Create an async middleware that logs ``name`` and optionally continues."""

    def factory(name: str, proceed: bool = True) -> Callable:
        async def middleware(ctx: Context, next_) -> None:
            calls.append(name)
            if proceed:
                await next_()

        middleware.__name__ = f"record_{name}"
        return middleware

    return factory
