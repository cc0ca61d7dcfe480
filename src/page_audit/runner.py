"""Runs the audit suite over gathered artifacts."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .audits.base import AuditContext, clamp_score
from .core.artifacts import ArtifactError, Artifacts
from .core.computed import ComputedArtifactCache
from .core.config import AuditDefn, CategoryDefn, EffectiveConfig
from .core.errors import GatherRuntimeError
from .core.timing import RunTimer
from .core.types import (
    AuditResult,
    CategoryResult,
    ResultRecord,
    RunTiming,
    RuntimeErrorInfo,
    TimingEntry,
)

logger = logging.getLogger(__name__)


@dataclass
class RunnerOptions:
    """Resolved configuration and the computed-artifact cache for one run."""

    config: EffectiveConfig
    computed_cache: ComputedArtifactCache


@dataclass
class RunnerResult:
    """Artifacts, the scored result, and the rendered report."""

    lhr: ResultRecord
    artifacts: Artifacts
    report: str | None = None


def _error_message(exc: BaseException) -> str:
    if isinstance(exc, GatherRuntimeError):
        return exc.friendly_message
    return str(exc) or type(exc).__name__


def score_categories(
    categories: Mapping[str, CategoryDefn], audits: Mapping[str, AuditResult]
) -> dict[str, CategoryResult]:
    """Weighted mean of member audit scores per category.

    Audits without a score are left out. A category with no scored member
    is not applicable and has no score.

    Args:
        categories: Category definitions
        audits: Audit results by id

    Returns:
        Category results by id, in definition order
    """
    results = {}
    for category_id, category in categories.items():
        scored = []
        for ref in category.audit_refs:
            result = audits.get(ref.id)
            if result is not None and result.score is not None:
                scored.append((result.score, ref.weight))

        if not scored:
            score = None
        else:
            total_weight = sum(weight for _, weight in scored)
            if total_weight == 0:
                score = 0.0
            else:
                score = clamp_score(sum(s * w for s, w in scored) / total_weight)

        results[category_id] = CategoryResult(
            id=category_id,
            title=category.title,
            description=category.description,
            score=score,
            not_applicable=not scored,
            audit_refs=list(category.audit_refs),
        )
    return results


class Runner:
    """Audit executor: one result per configured audit, in configured order."""

    @classmethod
    def audit(
        cls, artifacts: Artifacts, options: RunnerOptions, render_report: bool = True
    ) -> RunnerResult:
        """Run all audits and assemble the result record.

        Never raises for audit failures; each becomes an error result.

        Args:
            artifacts: Artifacts from a gather
            options: Config and computed-artifact cache for this run
            render_report: Render the report in the configured output format

        Returns:
            RunnerResult with the result record and rendered report
        """
        config = options.config
        timer = RunTimer()

        with timer.mark("runner:audit"):
            audit_results = cls.run_audits(artifacts, options)
        with timer.mark("runner:categories"):
            categories = score_categories(config.categories, audit_results)

        lhr = cls._build_result(artifacts, config, audit_results, categories, timer)
        errored = sum(1 for r in audit_results.values() if r.error_message)
        logger.info(
            f"Audited {len(audit_results)} audits ({errored} errored) "
            f"for {lhr.final_url or 'page'}"
        )

        report = None
        if render_report:
            from .report.generator import generate_report

            report = generate_report(lhr, config.settings.output)
        return RunnerResult(lhr=lhr, artifacts=artifacts, report=report)

    @classmethod
    def run_audits(cls, artifacts: Artifacts, options: RunnerOptions) -> dict[str, AuditResult]:
        """Run each configured audit in order, isolating failures."""
        results: dict[str, AuditResult] = {}
        for defn in options.config.audits:
            results[defn.id] = cls._run_audit(defn, artifacts, options)
        return results

    @classmethod
    def _run_audit(
        cls, defn: AuditDefn, artifacts: Artifacts, options: RunnerOptions
    ) -> AuditResult:
        audit = defn.audit
        meta = audit.meta
        page_load_error = artifacts.get("PageLoadError")

        for name in meta.required_artifacts:
            if name not in artifacts:
                if isinstance(page_load_error, GatherRuntimeError):
                    message = f"No data: {page_load_error.friendly_message}"
                else:
                    message = f"Required {name} gatherer did not run."
                return audit.generate_error_result(message)
            value = artifacts[name]
            if isinstance(value, ArtifactError):
                return audit.generate_error_result(str(value.to_exception()))

        computed: dict[str, Any] = {}
        for name in meta.required_computed:
            try:
                computed[name] = options.computed_cache.get(name, artifacts)
            except Exception as e:
                logger.debug(f"Computed artifact {name} failed for {meta.id}: {e}")
                return audit.generate_error_result(
                    f"Required computed artifact {name} failed: {_error_message(e)}"
                )

        context = AuditContext(
            options=defn.options,
            settings=options.config.settings,
            computed_cache=options.computed_cache,
            computed=computed,
        )
        try:
            product = audit.audit(artifacts, context)
            return audit.generate_result(product)
        except Exception as e:
            logger.warning(f"Audit {meta.id} failed: {e}")
            return audit.generate_error_result(f"Audit error: {_error_message(e)}")

    @staticmethod
    def _build_result(
        artifacts: Artifacts,
        config: EffectiveConfig,
        audits: dict[str, AuditResult],
        categories: dict[str, CategoryResult],
        timer: RunTimer,
    ) -> ResultRecord:
        url = artifacts.get("URL") or {}
        page_load_error = artifacts.get("PageLoadError")
        runtime_error = None
        if isinstance(page_load_error, GatherRuntimeError):
            runtime_error = RuntimeErrorInfo(
                code=page_load_error.code.value, message=page_load_error.friendly_message
            )

        audit_timing = timer.summary()
        gather_entries = [TimingEntry(**entry) for entry in artifacts.get("Timing") or []]
        gather_total = sum(entry.duration for entry in gather_entries)

        return ResultRecord(
            requested_url=url.get("requested_url"),
            main_document_url=url.get("main_document_url"),
            final_url=url.get("final_displayed_url"),
            fetch_time=artifacts.get("fetch_time", ""),
            gather_mode=config.gather_mode,
            user_agent=artifacts.get("HostUserAgent"),
            runtime_error=runtime_error,
            run_warnings=list(artifacts.get("RunWarnings") or []),
            audits=audits,
            categories=categories,
            config_settings=config.settings,
            timing=RunTiming(
                entries=gather_entries + audit_timing.entries,
                total=round(gather_total + audit_timing.total, 2),
            ),
        )


def get_audit_list() -> list[str]:
    """Ids of all built-in audits."""
    from .audits import AUDITS

    return sorted(AUDITS)
