"""Records network activity observed through page events."""

import logging
import time
from typing import Any

from ...core.types import GatherMode
from ..base import GatherContext, Gatherer, GathererMeta

logger = logging.getLogger(__name__)


def _header(headers: Any, name: str) -> str | None:
    if not isinstance(headers, dict):
        return None
    for key, value in headers.items():
        if key.lower() == name:
            return str(value)
    return None


class NetworkLog(Gatherer):
    """Collects request, response, finish and failure events in arrival order."""

    meta = GathererMeta(supported_modes=frozenset({GatherMode.NAVIGATION, GatherMode.TIMESPAN}))

    def __init__(self) -> None:
        self.events: list[dict[str, Any]] = []
        self._request_ids: dict[int, int] = {}
        # Keeps request objects alive so their id() is not reused mid-gather.
        self._requests: list[Any] = []
        self._page: Any = None

    def _request_id(self, request: Any) -> int:
        key = id(request)
        if key not in self._request_ids:
            self._request_ids[key] = len(self._request_ids) + 1
            self._requests.append(request)
        return self._request_ids[key]

    def _record(self, event: str, request: Any, **fields: Any) -> None:
        self.events.append(
            {
                "event": event,
                "request_id": self._request_id(request),
                "timestamp": time.monotonic() * 1000,
                "url": getattr(request, "url", ""),
                **fields,
            }
        )

    def _on_request(self, request: Any) -> None:
        self._record(
            "request",
            request,
            method=getattr(request, "method", "GET"),
            resource_type=getattr(request, "resource_type", "other"),
            is_navigation_request=bool(_call_or_value(request, "is_navigation_request")),
        )

    def _on_response(self, response: Any) -> None:
        headers = getattr(response, "headers", {})
        content_length = _header(headers, "content-length")
        content_type = _header(headers, "content-type") or ""
        self._record(
            "response",
            getattr(response, "request", response),
            status=getattr(response, "status", 0),
            mime_type=content_type.split(";")[0].strip(),
            transfer_size=int(content_length) if content_length and content_length.isdigit() else 0,
        )

    def _on_request_finished(self, request: Any) -> None:
        self._record("finished", request)

    def _on_request_failed(self, request: Any) -> None:
        self._record("failed", request, failure=_call_or_value(request, "failure") or "")

    def _handlers(self) -> dict[str, Any]:
        return {
            "request": self._on_request,
            "response": self._on_response,
            "requestfinished": self._on_request_finished,
            "requestfailed": self._on_request_failed,
        }

    async def start_instrumentation(self, context: GatherContext) -> None:
        self._page = context.page
        for event, handler in self._handlers().items():
            context.page.on(event, handler)

    async def stop_instrumentation(self, context: GatherContext) -> None:
        for event, handler in self._handlers().items():
            context.page.remove_listener(event, handler)
        logger.debug(f"Recorded {len(self.events)} network events")

    async def get_artifact(self, context: GatherContext) -> list[dict[str, Any]]:
        return list(self.events)


def _call_or_value(obj: Any, name: str) -> Any:
    value = getattr(obj, name, None)
    return value() if callable(value) else value
