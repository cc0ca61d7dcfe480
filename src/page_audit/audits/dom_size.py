"""Audit of DOM tree size."""

from ..core.artifacts import Artifacts
from ..core.types import GatherMode, ScoreDisplayMode
from .base import Audit, AuditContext, AuditMeta, AuditProduct, compute_log_normal_score


class DomSize(Audit):
    meta = AuditMeta(
        id="dom-size",
        title="Avoids an excessive DOM size",
        failure_title="Avoid an excessive DOM size",
        description="A large DOM increases memory usage and style calculation cost.",
        required_artifacts=("DOMStats",),
        supported_modes=frozenset({GatherMode.NAVIGATION, GatherMode.SNAPSHOT}),
        score_display_mode=ScoreDisplayMode.NUMERIC,
        default_options={"p10": 818, "median": 1400},
    )

    @classmethod
    def audit(cls, artifacts: Artifacts, context: AuditContext) -> AuditProduct:
        stats = artifacts.require("DOMStats")
        total = stats["total_elements"]
        return AuditProduct(
            score=compute_log_normal_score(context.options, total),
            numeric_value=total,
            numeric_unit="element",
            display_value=f"{total:,} elements",
            details={
                "total_elements": total,
                "max_depth": stats["max_depth"],
                "max_children": stats["max_children"],
            },
        )
