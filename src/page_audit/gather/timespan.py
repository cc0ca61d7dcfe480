"""Timespan gather: observe the page over a caller-controlled window."""

import logging
from collections.abc import Awaitable, Callable, Mapping
from pathlib import Path
from typing import Any

from ..core.artifacts import Artifacts
from ..core.computed import ComputedArtifactCache
from ..core.config import EffectiveConfig, resolve_config
from ..core.errors import UsageError
from ..core.types import GatherMode
from .driver import PageHandle
from .helpers import INSTRUMENTATION_PHASES, GatherResult, GatherSession

logger = logging.getLogger(__name__)

_START_TOKEN = object()


class TimespanSession:
    """An open timespan, obtainable only from ``TimespanGather.start``.

    The window has no internal timeout; ending (or abandoning) it is up to
    the caller.
    """

    def __init__(self, session: GatherSession, token: object):
        if token is not _START_TOKEN:
            raise UsageError("Timespans must be started with TimespanGather.start()")
        self._session = session
        self._ended = False

    @property
    def ended(self) -> bool:
        return self._ended

    async def stop(self) -> Artifacts:
        """Finalize the artifacts observed since the timespan started.

        Raises:
            UsageError: If the timespan was already stopped
        """
        if self._ended:
            raise UsageError("Timespan has already ended")
        self._ended = True

        session = self._session
        for phase in INSTRUMENTATION_PHASES[2:]:
            await session.run_phase(phase)
        await session.collect_artifacts()

        url = session.page.url
        logger.info(f"Timespan ended on {url}")
        return session.finalize(
            {"requested_url": None, "main_document_url": None, "final_displayed_url": url}
        )


class TimespanGather:
    """Starts passive collectors and hands back a session to stop later."""

    async def start(self, page: PageHandle, config: EffectiveConfig) -> TimespanSession:
        session = GatherSession(page, config)
        await session.collect_base_artifacts()
        logger.info(f"Starting timespan on {page.url}")
        for phase in INSTRUMENTATION_PHASES[:2]:
            await session.run_phase(phase)
        return TimespanSession(session, _START_TOKEN)

    async def produce(
        self,
        page: PageHandle,
        config: EffectiveConfig,
        action: Callable[[], Awaitable[Any]] | None = None,
    ) -> Artifacts:
        """Start a timespan, run ``action`` inside it, and stop."""
        timespan = await self.start(page, config)
        if action is not None:
            await action()
        return await timespan.stop()


class PendingTimespan:
    """A started timespan gather waiting for ``end_timespan_gather``."""

    def __init__(self, timespan: TimespanSession, config: EffectiveConfig):
        self._timespan = timespan
        self.config = config

    async def end_timespan_gather(self) -> GatherResult:
        from ..runner import RunnerOptions

        artifacts = await self._timespan.stop()
        return GatherResult(
            artifacts=artifacts,
            runner_options=RunnerOptions(
                config=self.config, computed_cache=ComputedArtifactCache()
            ),
        )


async def start_timespan_gather(
    page: PageHandle,
    config: Mapping[str, Any] | str | Path | None = None,
    flags: Mapping[str, Any] | None = None,
) -> PendingTimespan:
    """Resolve config and begin a timespan gather."""
    effective = resolve_config(config, flags, GatherMode.TIMESPAN)
    timespan = await TimespanGather().start(page, effective)
    return PendingTimespan(timespan, effective)
