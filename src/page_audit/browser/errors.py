"""Classification of Playwright errors raised while driving a page."""

import asyncio
from enum import Enum

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..core.errors import GatherRuntimeError, RuntimeErrorCode


class BrowserErrorKind(str, Enum):
    """Broad classes of browser failures."""

    TIMEOUT = "timeout"
    PAGE_CLOSED = "page_closed"
    BROWSER_DEAD = "browser_dead"
    NAVIGATION = "navigation"
    PERMANENT = "permanent"


def classify_error(exc: BaseException) -> BrowserErrorKind:
    """Classify an exception raised by a page operation.

    Args:
        exc: The exception to classify.

    Returns:
        The corresponding BrowserErrorKind.
    """
    if isinstance(exc, PlaywrightTimeoutError | asyncio.TimeoutError):
        return BrowserErrorKind.TIMEOUT

    if isinstance(exc, PlaywrightError):
        msg = str(exc).lower()
        if "target page, context or browser has been closed" in msg:
            return BrowserErrorKind.BROWSER_DEAD
        if "browser has been closed" in msg or "context has been closed" in msg:
            return BrowserErrorKind.BROWSER_DEAD
        if "navigation" in msg or "net::" in msg:
            return BrowserErrorKind.NAVIGATION
        if "page has been closed" in msg or "page closed" in msg:
            return BrowserErrorKind.PAGE_CLOSED
        return BrowserErrorKind.PERMANENT

    return BrowserErrorKind.PERMANENT


def to_runtime_error(exc: BaseException) -> GatherRuntimeError:
    """Convert a navigation failure into the runtime error recorded for it.

    Args:
        exc: Exception raised while loading the page.

    Returns:
        A GatherRuntimeError whose message keeps the underlying detail.
    """
    if isinstance(exc, GatherRuntimeError):
        return exc

    kind = classify_error(exc)
    if kind == BrowserErrorKind.TIMEOUT:
        return GatherRuntimeError(RuntimeErrorCode.LOAD_TIMEOUT)
    if kind in (BrowserErrorKind.PAGE_CLOSED, BrowserErrorKind.BROWSER_DEAD):
        return GatherRuntimeError(
            RuntimeErrorCode.PROTOCOL_TIMEOUT, f"The browser stopped responding: {exc}"
        )
    return GatherRuntimeError(
        RuntimeErrorCode.FAILED_DOCUMENT_REQUEST, f"The page could not be loaded: {exc}"
    )
