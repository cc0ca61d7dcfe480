"""Best-practice audits."""

from ..core.artifacts import Artifacts
from ..core.types import GatherMode
from .base import Audit, AuditContext, AuditMeta, AuditProduct


class ErrorsInConsole(Audit):
    meta = AuditMeta(
        id="errors-in-console",
        title="No browser errors logged to the console",
        failure_title="Browser errors were logged to the console",
        description="Errors logged to the console indicate unresolved problems.",
        required_artifacts=("ConsoleMessages",),
        supported_modes=frozenset({GatherMode.NAVIGATION, GatherMode.TIMESPAN}),
        default_options={"ignored_patterns": []},
    )

    @classmethod
    def audit(cls, artifacts: Artifacts, context: AuditContext) -> AuditProduct:
        ignored = context.options.get("ignored_patterns") or []
        errors = [
            message
            for message in artifacts.require("ConsoleMessages")
            if message.get("level") == "error"
            and not any(pattern in message.get("text", "") for pattern in ignored)
        ]
        return AuditProduct(
            score=0 if errors else 1,
            numeric_value=len(errors),
            details={
                "items": [
                    {"source": e.get("source"), "description": e.get("text"), "url": e.get("url")}
                    for e in errors
                ]
            },
        )
