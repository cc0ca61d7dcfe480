"""Base class and helpers for audits."""

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar

from ..core.artifacts import Artifacts
from ..core.computed import ComputedArtifactCache
from ..core.types import AuditResult, ConfigSettings, GatherMode, ScoreDisplayMode

# erfcinv(1/5), used to place the p10 control point of log-normal scoring.
INVERSE_ERFC_ONE_FIFTH = 0.9061938024368232


@dataclass(frozen=True)
class AuditMeta:
    """Static description of an audit and what it depends on."""

    id: str
    title: str
    description: str = ""
    failure_title: str | None = None
    required_artifacts: tuple[str, ...] = ()
    required_computed: tuple[str, ...] = ()
    supported_modes: frozenset[GatherMode] | None = None
    score_display_mode: ScoreDisplayMode = ScoreDisplayMode.BINARY
    default_options: Mapping[str, Any] = field(default_factory=dict)


@dataclass
class AuditContext:
    """What an audit sees besides the artifacts."""

    options: Mapping[str, Any]
    settings: ConfigSettings
    computed_cache: ComputedArtifactCache
    computed: Mapping[str, Any] = field(default_factory=dict)


@dataclass
class AuditProduct:
    """Raw output of ``Audit.audit``, turned into an AuditResult by the runner."""

    score: float | None = None
    numeric_value: float | None = None
    numeric_unit: str | None = None
    display_value: str | None = None
    explanation: str | None = None
    details: dict[str, Any] | None = None
    warnings: list[str] = field(default_factory=list)
    not_applicable: bool = False
    score_display_mode: ScoreDisplayMode | None = None


def compute_log_normal_score(control_points: Mapping[str, float], value: float) -> float:
    """Score ``value`` on a log-normal curve through the given control points.

    ``p10`` maps to a score of 0.9 and ``median`` to 0.5; lower values are
    better.

    Args:
        control_points: Mapping with ``p10`` and ``median``
        value: Measured value

    Returns:
        Score in 0..1
    """
    p10 = control_points["p10"]
    median = control_points["median"]
    if median <= 0:
        raise ValueError("median must be greater than zero")
    if p10 <= 0 or p10 >= median:
        raise ValueError("p10 must be greater than zero and less than the median")
    if value <= 0:
        return 1.0

    x_log_ratio = math.log(max(value / median, 5e-324))
    p10_log_ratio = -math.log(max(p10 / median, 5e-324))
    standardized = x_log_ratio * INVERSE_ERFC_ONE_FIFTH / p10_log_ratio
    complementary_percentile = math.erfc(standardized) / 2

    if value <= p10:
        return max(0.9, min(1.0, complementary_percentile))
    if value <= median:
        return max(0.5, min(0.8999999999999999, complementary_percentile))
    return max(0.0, min(0.4999999999999999, complementary_percentile))


def clamp_score(score: float) -> float:
    return round(min(max(score, 0.0), 1.0), 2)


class Audit:
    """An independent check over artifacts.

    Subclasses set ``meta`` and implement ``audit``. Audits must be pure:
    the same artifacts and options always produce the same product.
    """

    meta: ClassVar[AuditMeta]

    @classmethod
    def audit(cls, artifacts: Artifacts, context: AuditContext) -> AuditProduct:
        raise NotImplementedError

    @classmethod
    def generate_result(cls, product: AuditProduct) -> AuditResult:
        """Build the AuditResult for a product."""
        meta = cls.meta
        mode = product.score_display_mode or meta.score_display_mode
        score = product.score

        if product.not_applicable:
            mode = ScoreDisplayMode.NOT_APPLICABLE
            score = None
        elif mode in (ScoreDisplayMode.MANUAL, ScoreDisplayMode.INFORMATIVE):
            score = None
        elif score is not None:
            score = clamp_score(score)

        title = meta.title
        if meta.failure_title and score is not None and score < 0.9:
            title = meta.failure_title

        return AuditResult(
            id=meta.id,
            title=title,
            description=meta.description,
            score=score,
            score_display_mode=mode,
            numeric_value=product.numeric_value,
            numeric_unit=product.numeric_unit,
            display_value=product.display_value,
            explanation=product.explanation,
            warnings=list(product.warnings),
            details=product.details,
        )

    @classmethod
    def generate_error_result(cls, message: str) -> AuditResult:
        """Build the informational result for an audit that could not run."""
        return AuditResult(
            id=cls.meta.id,
            title=cls.meta.title,
            description=cls.meta.description,
            score=None,
            score_display_mode=ScoreDisplayMode.ERROR,
            error_message=message,
        )
