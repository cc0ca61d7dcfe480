"""Reads paint, navigation and resource entries from the Performance API."""

from typing import Any

from ...core.types import GatherMode
from ..base import GatherContext, Gatherer, GathererMeta

TIME_ORIGIN_SCRIPT = "() => performance.now()"

PERFORMANCE_TIMELINE_SCRIPT = """async () => {
  const lcpEntries = await new Promise((resolve) => {
    const found = [];
    try {
      const observer = new PerformanceObserver((list) => found.push(...list.getEntries()));
      observer.observe({type: 'largest-contentful-paint', buffered: true});
      setTimeout(() => { observer.disconnect(); resolve(found); }, 0);
    } catch (e) {
      resolve(found);
    }
  });
  return [...performance.getEntries(), ...lcpEntries].map((e) => ({
    entry_type: e.entryType,
    name: e.name || '',
    start_time: e.startTime,
    duration: e.duration || 0,
    size: e.size ?? null,
    response_start: e.responseStart ?? null,
    request_start: e.requestStart ?? null,
    transfer_size: e.transferSize ?? null,
  }));
}"""


class PerformanceTimeline(Gatherer):
    """Timeline entries, limited to the observed window in timespan mode."""

    meta = GathererMeta(supported_modes=frozenset({GatherMode.NAVIGATION, GatherMode.TIMESPAN}))

    def __init__(self) -> None:
        self.window_start = 0.0

    async def start_instrumentation(self, context: GatherContext) -> None:
        if context.gather_mode == GatherMode.TIMESPAN:
            origin = await context.page.evaluate(TIME_ORIGIN_SCRIPT)
            self.window_start = float(origin or 0)

    async def get_artifact(self, context: GatherContext) -> dict[str, Any]:
        entries = await context.page.evaluate(PERFORMANCE_TIMELINE_SCRIPT) or []
        if self.window_start:
            entries = [e for e in entries if e.get("start_time", 0) >= self.window_start]
        return {"window_start": self.window_start, "entries": entries}
