"""Paint timing metrics."""

from ..computed.processed_timeline import ProcessedTimeline
from ..core.artifacts import Artifacts
from ..core.errors import GatherRuntimeError, RuntimeErrorCode
from ..core.types import GatherMode, ScoreDisplayMode
from .base import Audit, AuditContext, AuditMeta, AuditProduct, compute_log_normal_score


class _PaintMetric(Audit):
    attribute: str
    missing_code: RuntimeErrorCode

    @classmethod
    def audit(cls, artifacts: Artifacts, context: AuditContext) -> AuditProduct:
        timeline = context.computed[ProcessedTimeline.name]
        value = getattr(timeline, cls.attribute)
        if value is None:
            raise GatherRuntimeError(cls.missing_code)

        control_points = context.options[context.settings.form_factor]
        return AuditProduct(
            score=compute_log_normal_score(control_points, value),
            numeric_value=value,
            numeric_unit="millisecond",
            display_value=f"{value / 1000:.1f} s",
        )


class FirstContentfulPaint(_PaintMetric):
    attribute = "first_contentful_paint"
    missing_code = RuntimeErrorCode.NO_FCP
    meta = AuditMeta(
        id="first-contentful-paint",
        title="First Contentful Paint",
        description="Marks the time at which the first text or image is painted.",
        required_artifacts=("PerformanceTimeline",),
        required_computed=(ProcessedTimeline.name,),
        supported_modes=frozenset({GatherMode.NAVIGATION}),
        score_display_mode=ScoreDisplayMode.NUMERIC,
        default_options={
            "mobile": {"p10": 1800, "median": 3000},
            "desktop": {"p10": 934, "median": 1600},
        },
    )


class LargestContentfulPaint(_PaintMetric):
    attribute = "largest_contentful_paint"
    missing_code = RuntimeErrorCode.NO_LCP
    meta = AuditMeta(
        id="largest-contentful-paint",
        title="Largest Contentful Paint",
        description="Marks the time at which the largest text or image is painted.",
        required_artifacts=("PerformanceTimeline",),
        required_computed=(ProcessedTimeline.name,),
        supported_modes=frozenset({GatherMode.NAVIGATION}),
        score_display_mode=ScoreDisplayMode.NUMERIC,
        default_options={
            "mobile": {"p10": 2500, "median": 4000},
            "desktop": {"p10": 1200, "median": 2400},
        },
    )
