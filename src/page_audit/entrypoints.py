"""Public entry points: gather a page in one of the three modes and audit it."""

import logging
from collections.abc import Awaitable, Callable, Mapping
from pathlib import Path
from typing import Any

from .core.config import EffectiveConfig, resolve_config
from .core.types import FlowResult, GatherMode, ResultRecord
from .gather.driver import PageHandle
from .gather.navigation import NavigationRequestor, navigation_gather
from .gather.snapshot import snapshot_gather
from .gather.timespan import start_timespan_gather
from .report.generator import generate_report as _render_report
from .runner import Runner, RunnerResult
from .runner import get_audit_list as _runner_audit_list
from .user_flow import FlowArtifacts, UserFlow, audit_gather_steps

logger = logging.getLogger(__name__)

ConfigInput = Mapping[str, Any] | str | Path | None


async def navigation(
    page: PageHandle,
    requestor: NavigationRequestor,
    config: ConfigInput = None,
    flags: Mapping[str, Any] | None = None,
) -> RunnerResult:
    """Load a page and audit the load.

    Args:
        page: Page to drive
        requestor: Target URL, or an async callable that triggers the navigation
        config: Config document, path or preset name
        flags: Settings overrides

    Returns:
        RunnerResult with the result record, artifacts and rendered report

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    gather_result = await navigation_gather(page, requestor, config, flags)
    return Runner.audit(gather_result.artifacts, gather_result.runner_options)


async def snapshot(
    page: PageHandle,
    config: ConfigInput = None,
    flags: Mapping[str, Any] | None = None,
) -> RunnerResult:
    """Audit the page as it is right now."""
    gather_result = await snapshot_gather(page, config, flags)
    return Runner.audit(gather_result.artifacts, gather_result.runner_options)


class Timespan:
    """Handle for a timespan in progress; call ``end_timespan`` once."""

    def __init__(self, end_gather: Callable[[], Awaitable[Any]]):
        self._end_gather = end_gather

    async def end_timespan(self) -> RunnerResult:
        gather_result = await self._end_gather()
        return Runner.audit(gather_result.artifacts, gather_result.runner_options)


async def start_timespan(
    page: PageHandle,
    config: ConfigInput = None,
    flags: Mapping[str, Any] | None = None,
) -> Timespan:
    """Begin observing the page; everything until ``end_timespan`` is audited."""
    pending = await start_timespan_gather(page, config, flags)
    return Timespan(pending.end_timespan_gather)


async def start_flow(
    page: PageHandle,
    name: str | None = None,
    config: ConfigInput = None,
    flags: Mapping[str, Any] | None = None,
) -> UserFlow:
    """Create a user flow recording steps on ``page``."""
    return UserFlow(page, name=name, config=config, flags=flags)


async def audit_flow_artifacts(
    flow_artifacts: FlowArtifacts, config: ConfigInput = None
) -> FlowResult:
    """Audit previously gathered flow steps, optionally under a new config."""
    return audit_gather_steps(
        flow_artifacts.gather_steps, name=flow_artifacts.name, config=config
    )


def generate_report(result: ResultRecord | FlowResult, output_mode: str = "html") -> str:
    """Render a result record or flow result as json, html or csv."""
    return _render_report(result, output_mode)


def generate_config(
    config: ConfigInput = None,
    flags: Mapping[str, Any] | None = None,
    gather_mode: GatherMode | str = GatherMode.NAVIGATION,
) -> EffectiveConfig:
    """Resolve a config without gathering anything."""
    return resolve_config(config, flags, gather_mode)


def get_audit_list() -> list[str]:
    return _runner_audit_list()
