"""Audits over network activity."""

from ..computed.main_resource import MainResource
from ..computed.network_records import NetworkRecords
from ..core.artifacts import Artifacts
from ..core.types import GatherMode, ScoreDisplayMode
from .base import Audit, AuditContext, AuditMeta, AuditProduct, compute_log_normal_score

NETWORK_MODES = frozenset({GatherMode.NAVIGATION, GatherMode.TIMESPAN})


class NetworkRequests(Audit):
    meta = AuditMeta(
        id="network-requests",
        title="Network Requests",
        description="Lists the network requests made during the gather.",
        required_artifacts=("NetworkLog",),
        required_computed=(NetworkRecords.name,),
        supported_modes=NETWORK_MODES,
        score_display_mode=ScoreDisplayMode.INFORMATIVE,
    )

    @classmethod
    def audit(cls, artifacts: Artifacts, context: AuditContext) -> AuditProduct:
        records = context.computed[NetworkRecords.name]
        origin = min((r.start_time for r in records), default=0.0)
        items = [
            {
                "url": r.url,
                "resource_type": r.resource_type,
                "status": r.status,
                "mime_type": r.mime_type,
                "transfer_size": r.transfer_size,
                "start_time": round(r.start_time - origin, 2),
                "end_time": None if r.end_time is None else round(r.end_time - origin, 2),
                "failed": r.failed,
            }
            for r in records
        ]
        return AuditProduct(numeric_value=len(items), details={"items": items})


class TotalByteWeight(Audit):
    meta = AuditMeta(
        id="total-byte-weight",
        title="Avoids enormous network payloads",
        failure_title="Avoid enormous network payloads",
        description="Large network payloads cost users money and are highly correlated with long load times.",
        required_artifacts=("NetworkLog",),
        required_computed=(NetworkRecords.name,),
        supported_modes=NETWORK_MODES,
        score_display_mode=ScoreDisplayMode.NUMERIC,
        default_options={"p10": 2667 * 1024, "median": 4000 * 1024},
    )

    @classmethod
    def audit(cls, artifacts: Artifacts, context: AuditContext) -> AuditProduct:
        records = context.computed[NetworkRecords.name]
        total = sum(r.transfer_size for r in records)
        largest = sorted(records, key=lambda r: r.transfer_size, reverse=True)[:10]
        return AuditProduct(
            score=compute_log_normal_score(context.options, total),
            numeric_value=total,
            numeric_unit="byte",
            display_value=f"Total size was {round(total / 1024):,} KiB",
            details={"items": [{"url": r.url, "transfer_size": r.transfer_size} for r in largest]},
        )


class ServerResponseTime(Audit):
    meta = AuditMeta(
        id="server-response-time",
        title="Initial server response time was short",
        failure_title="Reduce initial server response time",
        description="Keep the server response time for the main document short.",
        required_artifacts=("NetworkLog", "URL"),
        required_computed=(MainResource.name,),
        supported_modes=frozenset({GatherMode.NAVIGATION}),
        default_options={"threshold_ms": 600},
    )

    @classmethod
    def audit(cls, artifacts: Artifacts, context: AuditContext) -> AuditProduct:
        main_resource = context.computed[MainResource.name]
        if main_resource.response_time is None:
            return AuditProduct(score=0, explanation="The main document received no response.")

        response_time = round(main_resource.response_time - main_resource.start_time, 2)
        passed = response_time < context.options["threshold_ms"]
        return AuditProduct(
            score=1 if passed else 0,
            numeric_value=response_time,
            numeric_unit="millisecond",
            display_value=f"Root document took {round(response_time):,} ms",
            details={"url": main_resource.url, "response_time": response_time},
        )
