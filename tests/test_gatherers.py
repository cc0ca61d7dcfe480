"""Tests for the built-in gatherers."""

import pytest

from page_audit.core.types import ConfigSettings, GatherMode
from page_audit.gather.base import GatherContext
from page_audit.gather.gatherers import (
    GATHERERS,
    Accessibility,
    ConsoleMessages,
    DOMStats,
    MainDocumentContent,
    MetaElements,
    NetworkLog,
)
from page_audit.gather.gatherers.accessibility import ACCESSIBILITY_SCRIPT
from page_audit.gather.gatherers.dom_stats import DOM_STATS_SCRIPT
from tests.helpers import TEST_URL, FakeMessage, FakePage, FakeRequest, FakeResponse


def make_context(page, mode=GatherMode.NAVIGATION):
    return GatherContext(page=page, gather_mode=mode, settings=ConfigSettings(gather_mode=mode))


@pytest.mark.unit
def test_registry():
    assert set(GATHERERS) == {
        "NetworkLog",
        "ConsoleMessages",
        "PerformanceTimeline",
        "MainDocumentContent",
        "DOMStats",
        "MetaElements",
        "Accessibility",
    }
    assert GatherMode.SNAPSHOT not in NetworkLog.meta.supported_modes
    assert GatherMode.TIMESPAN not in DOMStats.meta.supported_modes


class TestNetworkLog:
    """Network events recorded from page listeners."""

    async def test_records_events_in_order(self):
        page = FakePage(url=TEST_URL)
        context = make_context(page)
        gatherer = NetworkLog()

        await gatherer.start_instrumentation(context)
        document = FakeRequest(TEST_URL, navigation=True)
        image = FakeRequest("https://www.example.com/hero.png", resource_type="image")
        image.failure = "net::ERR_ABORTED"
        page.emit("request", document)
        page.emit("request", image)
        page.emit("response", FakeResponse(document, size=1234))
        page.emit("requestfailed", image)
        page.emit("requestfinished", document)
        await gatherer.stop_instrumentation(context)
        page.emit("request", FakeRequest("https://www.example.com/late.js"))

        events = await gatherer.get_artifact(context)

        assert [(e["event"], e["request_id"]) for e in events] == [
            ("request", 1),
            ("request", 2),
            ("response", 1),
            ("failed", 2),
            ("finished", 1),
        ]
        assert events[0]["is_navigation_request"] is True
        assert events[1]["resource_type"] == "image"
        assert events[2]["transfer_size"] == 1234
        assert events[2]["mime_type"] == "text/html"
        assert events[3]["failure"] == "net::ERR_ABORTED"
        assert all(a["timestamp"] <= b["timestamp"] for a, b in zip(events, events[1:]))

    async def test_missing_content_length(self):
        page = FakePage()
        context = make_context(page)
        gatherer = NetworkLog()
        request = FakeRequest(TEST_URL)
        response = FakeResponse(request)
        response.headers = {}

        await gatherer.start_instrumentation(context)
        page.emit("request", request)
        page.emit("response", response)

        events = await gatherer.get_artifact(context)
        assert events[1]["transfer_size"] == 0
        assert events[1]["mime_type"] == ""


class TestConsoleMessages:
    async def test_console_and_page_errors(self):
        page = FakePage()
        context = make_context(page)
        gatherer = ConsoleMessages()

        await gatherer.start_instrumentation(context)
        page.emit("console", FakeMessage("hello", url="https://www.example.com/app.js"))
        page.emit("pageerror", ValueError("Uncaught ReferenceError: foo is not defined"))
        await gatherer.stop_instrumentation(context)
        page.emit("console", FakeMessage("after the window"))

        messages = await gatherer.get_artifact(context)

        assert len(messages) == 2
        assert messages[0]["level"] == "log"
        assert messages[0]["url"] == "https://www.example.com/app.js"
        assert messages[1] == {
            "source": "exception",
            "level": "error",
            "text": "Uncaught ReferenceError: foo is not defined",
            "url": "",
            "line_number": None,
        }


class TestDocumentGatherers:
    """Gatherers that evaluate a script against the current document."""

    async def test_dom_stats(self):
        page = FakePage(scripts={DOM_STATS_SCRIPT: {"total_elements": 12.0, "max_depth": 3}})
        stats = await DOMStats().get_artifact(make_context(page))
        assert stats == {"total_elements": 12, "max_depth": 3, "max_children": 0}

    async def test_accessibility_defaults(self):
        page = FakePage(scripts={ACCESSIBILITY_SCRIPT: None})
        result = await Accessibility().get_artifact(make_context(page))
        assert result == {"document_title": "", "html_lang": None, "images": []}

    async def test_meta_elements(self):
        result = await MetaElements().get_artifact(make_context(FakePage()))
        assert {element["name"] for element in result} == {"description", "viewport"}

    async def test_main_document_content(self):
        content = await MainDocumentContent().get_artifact(make_context(FakePage()))
        assert content.startswith("<html")
