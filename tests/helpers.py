"""Shared test helpers."""

import asyncio
from collections import defaultdict
from collections.abc import Callable
from typing import Any

from page_audit.core.artifacts import Artifacts
from page_audit.gather.base import GatherContext, Gatherer, GathererMeta
from page_audit.gather.gatherers.accessibility import ACCESSIBILITY_SCRIPT
from page_audit.gather.gatherers.dom_stats import DOM_STATS_SCRIPT
from page_audit.gather.gatherers.main_document_content import DOCUMENT_CONTENT_SCRIPT
from page_audit.gather.gatherers.meta_elements import META_ELEMENTS_SCRIPT
from page_audit.gather.gatherers.performance_timeline import (
    PERFORMANCE_TIMELINE_SCRIPT,
    TIME_ORIGIN_SCRIPT,
)

TEST_URL = "https://www.example.com/products"
TEST_USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64) HeadlessChrome/120.0.0.0"


def default_scripts() -> dict[str, Any]:
    """Evaluate results for a small, healthy page."""
    return {
        TIME_ORIGIN_SCRIPT: 0,
        PERFORMANCE_TIMELINE_SCRIPT: [
            {"entry_type": "navigation", "name": TEST_URL, "start_time": 0, "response_start": 120},
            {"entry_type": "paint", "name": "first-paint", "start_time": 850},
            {"entry_type": "paint", "name": "first-contentful-paint", "start_time": 900},
            {"entry_type": "largest-contentful-paint", "name": "", "start_time": 1200},
            {"entry_type": "largest-contentful-paint", "name": "", "start_time": 1500},
            {"entry_type": "resource", "name": "https://www.example.com/app.js", "start_time": 200},
        ],
        DOCUMENT_CONTENT_SCRIPT: "<html lang=\"en\"><head><title>Example</title></head></html>",
        DOM_STATS_SCRIPT: {"total_elements": 300, "max_depth": 8, "max_children": 20},
        META_ELEMENTS_SCRIPT: [
            {"name": "description", "content": "Example products page"},
            {"name": "viewport", "content": "width=device-width, initial-scale=1"},
        ],
        ACCESSIBILITY_SCRIPT: {
            "document_title": "Example",
            "html_lang": "en",
            "images": [{"src": "logo.png", "alt": "Example logo", "role": None, "aria_hidden": False}],
        },
    }


class FakeRequest:
    """Stands in for a Playwright Request."""

    def __init__(
        self,
        url: str,
        resource_type: str = "document",
        navigation: bool = False,
        method: str = "GET",
    ):
        self.url = url
        self.resource_type = resource_type
        self.method = method
        self._navigation = navigation
        self.failure: str | None = None

    def is_navigation_request(self) -> bool:
        return self._navigation


class FakeResponse:
    """Stands in for a Playwright Response."""

    def __init__(self, request: FakeRequest, status: int = 200, size: int = 0, mime: str = "text/html"):
        self.request = request
        self.url = request.url
        self.status = status
        self.headers = {"content-type": f"{mime}; charset=utf-8", "content-length": str(size)}


class FakeMessage:
    """Stands in for a Playwright ConsoleMessage."""

    def __init__(self, text: str, type: str = "log", url: str = ""):
        self.text = text
        self.type = type
        self.location = {"url": url, "lineNumber": 1}


class FakePage:
    """In-memory page handle.

    ``evaluate`` answers from ``scripts`` (keyed by the exact script text);
    a value that is an exception is raised instead. Navigations emit the
    network events of a single document load unless ``on_navigate`` is
    replaced.
    """

    def __init__(
        self,
        url: str = "about:blank",
        scripts: dict[str, Any] | None = None,
        status: int = 200,
        document_size: int = 20_000,
        goto_delay: float = 0,
        load_delay: float = 0,
        goto_error: BaseException | None = None,
        redirect_to: str | None = None,
        user_agent: str = TEST_USER_AGENT,
    ):
        self.url = url
        self.scripts = default_scripts()
        if scripts:
            self.scripts.update(scripts)
        self.status = status
        self.document_size = document_size
        self.goto_delay = goto_delay
        self.load_delay = load_delay
        self.goto_error = goto_error
        self.redirect_to = redirect_to
        self.user_agent = user_agent
        self.handlers: dict[str, list[Callable[..., Any]]] = defaultdict(list)
        self.calls: list[tuple[str, Any]] = []
        self.on_navigate: Callable[["FakePage", str], None] = emit_document_load

    @property
    def listener_count(self) -> int:
        return sum(len(handlers) for handlers in self.handlers.values())

    def on(self, event: str, f: Callable[..., Any]) -> None:
        self.handlers[event].append(f)

    def remove_listener(self, event: str, f: Callable[..., Any]) -> None:
        self.handlers[event].remove(f)

    def emit(self, event: str, payload: Any) -> None:
        for handler in list(self.handlers[event]):
            handler(payload)

    async def goto(self, url: str, *, timeout: float | None = None, wait_until: Any = None) -> Any:
        self.calls.append(("goto", url))
        if url == "about:blank":
            self.url = url
            return None
        if self.goto_error is not None:
            raise self.goto_error
        if self.goto_delay:
            await asyncio.sleep(self.goto_delay)

        self.url = self.redirect_to or url
        return self.on_navigate(self, self.url)

    async def wait_for_load_state(self, state: Any = None, *, timeout: float | None = None) -> None:
        self.calls.append(("wait_for_load_state", state))
        if self.load_delay:
            await asyncio.sleep(self.load_delay)

    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        self.calls.append(("evaluate", expression))
        if expression == "navigator.userAgent":
            return self.user_agent
        value = self.scripts.get(expression)
        if isinstance(value, BaseException):
            raise value
        return value


def emit_document_load(page: FakePage, url: str) -> FakeResponse:
    """Emit request, response and finish events for a document and one script."""
    document = FakeRequest(url, resource_type="document", navigation=True)
    page.emit("request", document)
    response = FakeResponse(document, status=page.status, size=page.document_size)
    page.emit("response", response)
    page.emit("requestfinished", document)

    script = FakeRequest(url.rstrip("/") + "/app.js", resource_type="script")
    page.emit("request", script)
    page.emit("response", FakeResponse(script, size=5_000, mime="application/javascript"))
    page.emit("requestfinished", script)
    return response


def make_artifacts(**overrides: Any) -> Artifacts:
    """Artifacts as a navigation of TEST_URL would produce them."""
    data: dict[str, Any] = {
        "fetch_time": "2024-01-01T00:00:00+00:00",
        "URL": {
            "requested_url": TEST_URL,
            "main_document_url": TEST_URL,
            "final_displayed_url": TEST_URL,
        },
        "GatherContext": {"gather_mode": "navigation"},
        "HostUserAgent": TEST_USER_AGENT,
        "RunWarnings": [],
        "PageLoadError": None,
        "Timing": [],
        "NetworkLog": [
            {"event": "request", "request_id": 1, "timestamp": 1000.0, "url": TEST_URL,
             "method": "GET", "resource_type": "document", "is_navigation_request": True},
            {"event": "response", "request_id": 1, "timestamp": 1150.0, "url": TEST_URL,
             "status": 200, "mime_type": "text/html", "transfer_size": 20_000},
            {"event": "finished", "request_id": 1, "timestamp": 1300.0, "url": TEST_URL},
        ],
        "ConsoleMessages": [],
        "PerformanceTimeline": {
            "window_start": 0.0,
            "entries": default_scripts()[PERFORMANCE_TIMELINE_SCRIPT],
        },
        "DOMStats": {"total_elements": 300, "max_depth": 8, "max_children": 20},
        "MetaElements": default_scripts()[META_ELEMENTS_SCRIPT],
        "Accessibility": default_scripts()[ACCESSIBILITY_SCRIPT],
    }
    data.update(overrides)
    return Artifacts(data)


class PageTitle(Gatherer):
    """Test gatherer depending on the Accessibility artifact."""

    meta = GathererMeta(dependencies=("Accessibility",))

    async def get_artifact(self, context: GatherContext) -> str:
        return context.dependencies["Accessibility"]["document_title"].upper()


class RecordingGatherer(Gatherer):
    """Test gatherer that logs every lifecycle call into a shared list."""

    log: list[str] = []

    async def start_instrumentation(self, context: GatherContext) -> None:
        self.log.append(f"{type(self).__name__}:start_instrumentation")

    async def start_sensitive_instrumentation(self, context: GatherContext) -> None:
        self.log.append(f"{type(self).__name__}:start_sensitive_instrumentation")

    async def stop_sensitive_instrumentation(self, context: GatherContext) -> None:
        self.log.append(f"{type(self).__name__}:stop_sensitive_instrumentation")

    async def stop_instrumentation(self, context: GatherContext) -> None:
        self.log.append(f"{type(self).__name__}:stop_instrumentation")

    async def get_artifact(self, context: GatherContext) -> str:
        self.log.append(f"{type(self).__name__}:get_artifact")
        return type(self).__name__


class FirstRecorder(RecordingGatherer):
    pass


class SecondRecorder(RecordingGatherer):
    pass


class BrokenGatherer(Gatherer):
    """Test gatherer that fails when instrumentation stops."""

    async def stop_instrumentation(self, context: GatherContext) -> None:
        raise RuntimeError("instrumentation exploded")

    async def get_artifact(self, context: GatherContext) -> str:
        raise AssertionError("get_artifact must not run after a failed phase")
