"""Browser automation module."""

from .errors import BrowserErrorKind, classify_error, to_runtime_error
from .playwright_client import PlaywrightPageSession

__all__ = [
    "BrowserErrorKind",
    "PlaywrightPageSession",
    "classify_error",
    "to_runtime_error",
]
