"""Network requests reconstructed from the raw network log."""

from dataclasses import dataclass
from typing import Any

from ..core.computed import ComputedArtifact, ComputedArtifactCache


@dataclass(frozen=True)
class NetworkRequest:
    """One request with its response and completion state."""

    request_id: int
    url: str
    method: str = "GET"
    resource_type: str = "other"
    is_navigation_request: bool = False
    start_time: float = 0.0
    response_time: float | None = None
    end_time: float | None = None
    status: int | None = None
    mime_type: str = ""
    transfer_size: int = 0
    failed: bool = False
    failure_text: str = ""

    @property
    def finished(self) -> bool:
        return self.end_time is not None

    @property
    def duration(self) -> float | None:
        if self.end_time is None:
            return None
        return self.end_time - self.start_time


class NetworkRecords(ComputedArtifact):
    """Folds request/response/finished/failed events into NetworkRequest objects."""

    name = "NetworkRecords"

    @classmethod
    def compute(cls, source: Any, cache: ComputedArtifactCache) -> tuple[NetworkRequest, ...]:
        events = source.require("NetworkLog")
        records: dict[int, dict[str, Any]] = {}

        for event in events:
            request_id = event["request_id"]
            kind = event["event"]
            if kind == "request":
                records[request_id] = {
                    "request_id": request_id,
                    "url": event.get("url", ""),
                    "method": event.get("method", "GET"),
                    "resource_type": event.get("resource_type", "other"),
                    "is_navigation_request": event.get("is_navigation_request", False),
                    "start_time": event.get("timestamp", 0.0),
                }
                continue

            record = records.get(request_id)
            if record is None:
                # Response for a request issued before instrumentation began.
                continue
            if kind == "response":
                record.update(
                    response_time=event.get("timestamp"),
                    status=event.get("status"),
                    mime_type=event.get("mime_type", ""),
                    transfer_size=event.get("transfer_size", 0),
                )
            elif kind == "finished":
                record["end_time"] = event.get("timestamp")
            elif kind == "failed":
                record.update(
                    end_time=event.get("timestamp"),
                    failed=True,
                    failure_text=event.get("failure", ""),
                )

        return tuple(NetworkRequest(**record) for record in records.values())
