"""Gather strategies and gatherer plumbing."""

from .base import GatherContext, Gatherer, GathererMeta
from .driver import PageHandle
from .helpers import GatherResult
from .navigation import NavigationGather, navigation_gather
from .snapshot import SnapshotGather, snapshot_gather
from .timespan import TimespanGather, TimespanSession, start_timespan_gather

__all__ = [
    "GatherContext",
    "GatherResult",
    "Gatherer",
    "GathererMeta",
    "NavigationGather",
    "PageHandle",
    "SnapshotGather",
    "TimespanGather",
    "TimespanSession",
    "navigation_gather",
    "snapshot_gather",
    "start_timespan_gather",
]
