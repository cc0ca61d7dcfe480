"""Collects console output and uncaught page errors."""

from typing import Any

from ...core.types import GatherMode
from ..base import GatherContext, Gatherer, GathererMeta


class ConsoleMessages(Gatherer):
    """Listens for ``console`` and ``pageerror`` events while instrumented."""

    meta = GathererMeta(supported_modes=frozenset({GatherMode.NAVIGATION, GatherMode.TIMESPAN}))

    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []

    def _on_console(self, message: Any) -> None:
        location = getattr(message, "location", None) or {}
        self.messages.append(
            {
                "source": "console",
                "level": getattr(message, "type", "log"),
                "text": getattr(message, "text", ""),
                "url": location.get("url", ""),
                "line_number": location.get("lineNumber"),
            }
        )

    def _on_page_error(self, error: Any) -> None:
        self.messages.append(
            {
                "source": "exception",
                "level": "error",
                "text": str(getattr(error, "message", None) or error),
                "url": "",
                "line_number": None,
            }
        )

    async def start_instrumentation(self, context: GatherContext) -> None:
        context.page.on("console", self._on_console)
        context.page.on("pageerror", self._on_page_error)

    async def stop_instrumentation(self, context: GatherContext) -> None:
        context.page.remove_listener("console", self._on_console)
        context.page.remove_listener("pageerror", self._on_page_error)

    async def get_artifact(self, context: GatherContext) -> list[dict[str, Any]]:
        return list(self.messages)
