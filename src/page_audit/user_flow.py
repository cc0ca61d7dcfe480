"""Multi-step flows: several gathers on one page, audited together."""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from .core.artifacts import Artifacts, GatherStep
from .core.computed import ComputedArtifactCache
from .core.config import EffectiveConfig, resolve_config
from .core.errors import UsageError
from .core.types import FlowResult, FlowStepResult, GatherMode
from .gather.driver import PageHandle
from .gather.navigation import NavigationGather, NavigationRequestor
from .gather.snapshot import SnapshotGather
from .gather.timespan import TimespanGather, TimespanSession
from .runner import Runner, RunnerOptions

logger = logging.getLogger(__name__)

ConfigInput = Mapping[str, Any] | str | Path | None


@dataclass(frozen=True)
class FlowArtifacts:
    """The gather steps of a flow, ready to be audited later."""

    name: str
    gather_steps: tuple[GatherStep, ...]


@dataclass
class _PendingTimespan:
    session: TimespanSession
    name: str | None
    config: EffectiveConfig
    flags: dict[str, Any]


def _short_url(url: str) -> str:
    parsed = urlparse(url)
    if not parsed.netloc:
        return url
    return f"{parsed.netloc}{parsed.path}"


def _default_step_name(mode: GatherMode, artifacts: Artifacts) -> str:
    url = (artifacts.get("URL") or {}).get("final_displayed_url") or ""
    return f"{mode.value.capitalize()} report ({_short_url(url)})"


def _default_flow_name(gather_steps: Sequence[GatherStep]) -> str:
    url = (gather_steps[0].artifacts.get("URL") or {}).get("final_displayed_url") or ""
    host = urlparse(url).netloc or url
    return f"User flow ({host})"


class UserFlow:
    """Records gather steps on one page in call order.

    All steps share one computed-artifact cache. Cache entries are keyed by
    the identity of each step's artifacts, so steps never see each other's
    computed values.
    """

    def __init__(
        self,
        page: PageHandle,
        name: str | None = None,
        config: ConfigInput = None,
        flags: Mapping[str, Any] | None = None,
    ):
        """Initialize a flow.

        Args:
            page: Page driven by every step
            name: Flow name (default derived from the first step's URL)
            config: Config document shared by all steps
            flags: Settings overrides shared by all steps
        """
        self.page = page
        self.name = name
        self._config = config
        self._flags = dict(flags or {})
        self._gather_steps: list[GatherStep] = []
        self._timespan: _PendingTimespan | None = None
        self._computed_cache = ComputedArtifactCache()

    @property
    def gather_steps(self) -> tuple[GatherStep, ...]:
        return tuple(self._gather_steps)

    def _step_settings(
        self, mode: GatherMode, step_options: Mapping[str, Any] | None
    ) -> tuple[str | None, dict[str, Any], EffectiveConfig]:
        step_options = step_options or {}
        unknown = set(step_options) - {"name", "flags"}
        if unknown:
            raise UsageError(f"Unknown step options: {', '.join(sorted(unknown))}")

        flags = {**self._flags, **(step_options.get("flags") or {})}
        config = resolve_config(self._config, flags, mode)
        return step_options.get("name"), flags, config

    def _ensure_no_timespan(self) -> None:
        if self._timespan is not None:
            raise UsageError("Timespan already in progress")

    def _add_step(
        self,
        name: str | None,
        mode: GatherMode,
        artifacts: Artifacts,
        config: EffectiveConfig,
        flags: dict[str, Any],
    ) -> GatherStep:
        step = GatherStep(
            name=name or _default_step_name(mode, artifacts),
            gather_mode=mode,
            artifacts=artifacts,
            config=config,
            flags=flags,
        )
        self._gather_steps.append(step)
        logger.info(f"Recorded step {len(self._gather_steps)}: {step.name}")
        return step

    async def navigate(
        self, requestor: NavigationRequestor, step_options: Mapping[str, Any] | None = None
    ) -> GatherStep:
        """Gather a navigation step."""
        self._ensure_no_timespan()
        name, flags, config = self._step_settings(GatherMode.NAVIGATION, step_options)
        artifacts = await NavigationGather(requestor).produce(self.page, config)
        return self._add_step(name, GatherMode.NAVIGATION, artifacts, config, flags)

    async def snapshot(self, step_options: Mapping[str, Any] | None = None) -> GatherStep:
        """Gather a snapshot step."""
        self._ensure_no_timespan()
        name, flags, config = self._step_settings(GatherMode.SNAPSHOT, step_options)
        artifacts = await SnapshotGather().produce(self.page, config)
        return self._add_step(name, GatherMode.SNAPSHOT, artifacts, config, flags)

    async def start_timespan(self, step_options: Mapping[str, Any] | None = None) -> None:
        """Begin a timespan step; it is recorded by ``end_timespan``."""
        self._ensure_no_timespan()
        name, flags, config = self._step_settings(GatherMode.TIMESPAN, step_options)
        session = await TimespanGather().start(self.page, config)
        self._timespan = _PendingTimespan(session, name, config, flags)

    async def end_timespan(self) -> GatherStep:
        """Finish the timespan begun by ``start_timespan``.

        Raises:
            UsageError: If no timespan is in progress
        """
        if self._timespan is None:
            raise UsageError("No timespan in progress")

        pending = self._timespan
        self._timespan = None
        artifacts = await pending.session.stop()
        return self._add_step(
            pending.name, GatherMode.TIMESPAN, artifacts, pending.config, pending.flags
        )

    def create_flow_artifacts(self) -> FlowArtifacts:
        if not self._gather_steps:
            raise UsageError("Flow has no steps")
        return FlowArtifacts(
            name=self.name or _default_flow_name(self._gather_steps),
            gather_steps=tuple(self._gather_steps),
        )

    async def get_flow_result(self) -> FlowResult:
        """Audit every recorded step and assemble the flow result."""
        if self._timespan is not None:
            raise UsageError("End the timespan in progress before auditing the flow")
        flow_artifacts = self.create_flow_artifacts()
        return audit_gather_steps(
            flow_artifacts.gather_steps,
            name=flow_artifacts.name,
            computed_cache=self._computed_cache,
        )

    async def generate_report(self, output_mode: str = "html") -> str:
        from .report.generator import generate_report

        return generate_report(await self.get_flow_result(), output_mode)


def audit_gather_steps(
    gather_steps: Sequence[GatherStep],
    name: str | None = None,
    config: ConfigInput = None,
    computed_cache: ComputedArtifactCache | None = None,
) -> FlowResult:
    """Audit each gather step independently, preserving step order.

    Args:
        gather_steps: Steps in the order they were gathered
        name: Flow name
        config: Config document to re-resolve each step with; defaults to
            the config each step was gathered with
        computed_cache: Cache shared across steps

    Returns:
        FlowResult with one step result per gather step

    Raises:
        UsageError: If there are no steps
    """
    if not gather_steps:
        raise UsageError("Need at least one gather step to audit a flow")

    cache = computed_cache if computed_cache is not None else ComputedArtifactCache()
    steps = []
    for step in gather_steps:
        step_config = step.config
        if config is not None:
            step_config = resolve_config(config, step.flags, step.gather_mode)
        result = Runner.audit(step.artifacts, RunnerOptions(step_config, cache), render_report=False)
        steps.append(FlowStepResult(name=step.name, lhr=result.lhr, gather_step=step))

    return FlowResult(name=name or _default_flow_name(gather_steps), steps=steps)
