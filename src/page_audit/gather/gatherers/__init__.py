"""Built-in gatherers, registered by name."""

from ..base import Gatherer
from .accessibility import Accessibility
from .console_messages import ConsoleMessages
from .dom_stats import DOMStats
from .main_document_content import MainDocumentContent
from .meta_elements import MetaElements
from .network_log import NetworkLog
from .performance_timeline import PerformanceTimeline

GATHERERS: dict[str, type[Gatherer]] = {
    cls.__name__: cls
    for cls in (
        NetworkLog,
        ConsoleMessages,
        PerformanceTimeline,
        MainDocumentContent,
        DOMStats,
        MetaElements,
        Accessibility,
    )
}

__all__ = [
    "GATHERERS",
    "Accessibility",
    "ConsoleMessages",
    "DOMStats",
    "MainDocumentContent",
    "MetaElements",
    "NetworkLog",
    "PerformanceTimeline",
]
