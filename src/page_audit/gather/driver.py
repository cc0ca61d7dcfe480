"""The page capabilities gathering relies on."""

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class PageHandle(Protocol):
    """Subset of a Playwright ``Page`` used by gatherers.

    A Playwright page satisfies this protocol as-is; tests use fakes.
    """

    @property
    def url(self) -> str: ...

    async def goto(self, url: str, *, timeout: float | None = None, wait_until: Any = None) -> Any:
        """Navigate to ``url``."""
        ...

    async def wait_for_load_state(self, state: Any = None, *, timeout: float | None = None) -> None:
        """Wait until the page reaches a load state."""
        ...

    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        """Evaluate a JavaScript expression in the page."""
        ...

    def on(self, event: Any, f: Callable[..., Any]) -> None:
        """Subscribe to a page event."""
        ...

    def remove_listener(self, event: Any, f: Callable[..., Any]) -> None:
        """Unsubscribe from a page event."""
        ...
