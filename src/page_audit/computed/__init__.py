"""Built-in computed artifacts."""

from ..core.computed import ComputedArtifact
from .main_resource import MainResource
from .network_records import NetworkRecords, NetworkRequest
from .processed_timeline import ProcessedTimeline, ProcessedTimelineData

COMPUTED_ARTIFACTS: dict[str, type[ComputedArtifact]] = {
    cls.name: cls for cls in (NetworkRecords, MainResource, ProcessedTimeline)
}

__all__ = [
    "COMPUTED_ARTIFACTS",
    "MainResource",
    "NetworkRecords",
    "NetworkRequest",
    "ProcessedTimeline",
    "ProcessedTimelineData",
]
