"""Key moments extracted from the performance timeline."""

from dataclasses import dataclass
from typing import Any

from ..core.computed import ComputedArtifact, ComputedArtifactCache


@dataclass(frozen=True)
class ProcessedTimelineData:
    """Timings in milliseconds, relative to the start of the observed window."""

    time_to_first_byte: float | None
    first_contentful_paint: float | None
    largest_contentful_paint: float | None
    resource_count: int


class ProcessedTimeline(ComputedArtifact):
    name = "ProcessedTimeline"

    @classmethod
    def compute(cls, source: Any, cache: ComputedArtifactCache) -> ProcessedTimelineData:
        timeline = source.require("PerformanceTimeline")
        origin = float(timeline.get("window_start") or 0)
        entries = timeline.get("entries") or []

        def relative(value: float | None) -> float | None:
            return None if value is None else max(float(value) - origin, 0.0)

        ttfb = None
        fcp = None
        lcp = None
        resources = 0
        for entry in entries:
            entry_type = entry.get("entry_type")
            if entry_type == "navigation" and entry.get("response_start") is not None:
                ttfb = relative(entry["response_start"])
            elif entry_type == "paint" and entry.get("name") == "first-contentful-paint":
                fcp = relative(entry.get("start_time"))
            elif entry_type == "largest-contentful-paint":
                # The last candidate reported is the final LCP.
                lcp = relative(entry.get("start_time"))
            elif entry_type == "resource":
                resources += 1

        return ProcessedTimelineData(
            time_to_first_byte=ttfb,
            first_contentful_paint=fcp,
            largest_contentful_paint=lcp,
            resource_count=resources,
        )
