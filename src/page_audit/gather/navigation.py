"""Navigation gather: load a page and instrument it across the load."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Mapping
from pathlib import Path
from typing import Any

from ..browser.errors import BrowserErrorKind, classify_error, to_runtime_error
from ..core.artifacts import Artifacts
from ..core.computed import ComputedArtifactCache
from ..core.config import EffectiveConfig, resolve_config
from ..core.errors import GatherRuntimeError, RuntimeErrorCode
from ..core.types import GatherMode
from .driver import PageHandle
from .helpers import INSTRUMENTATION_PHASES, GatherResult, GatherSession

logger = logging.getLogger(__name__)

NavigationRequestor = str | Callable[[], Awaitable[Any]]

SLOW_LOAD_WARNING = (
    "The page loaded too slowly to finish within the time limit. "
    "Results may be incomplete."
)


class NetworkMonitor:
    """Tracks requests in flight on a page."""

    def __init__(self, page: PageHandle, poll_interval: float = 0.05):
        self.page = page
        self.poll_interval = poll_interval
        self.inflight: set[Any] = set()
        self.last_activity = time.monotonic()

    def _on_request(self, request: Any) -> None:
        self.inflight.add(request)
        self.last_activity = time.monotonic()

    def _on_request_done(self, request: Any) -> None:
        self.inflight.discard(request)
        self.last_activity = time.monotonic()

    def attach(self) -> None:
        self.page.on("request", self._on_request)
        self.page.on("requestfinished", self._on_request_done)
        self.page.on("requestfailed", self._on_request_done)

    def detach(self) -> None:
        self.page.remove_listener("request", self._on_request)
        self.page.remove_listener("requestfinished", self._on_request_done)
        self.page.remove_listener("requestfailed", self._on_request_done)

    async def wait_for_quiet(self, quiet_ms: int) -> None:
        """Return once no request has been in flight for ``quiet_ms``."""
        while True:
            idle_ms = (time.monotonic() - self.last_activity) * 1000
            if not self.inflight and idle_ms >= quiet_ms:
                return
            await asyncio.sleep(self.poll_interval)


class NavigationGather:
    """Drives the page to a target and gathers across the load lifecycle.

    The load is judged complete when the page reports network idle, or when
    ``max_wait_for_load`` elapses. A timeout is recorded as a runtime error
    and every artifact is still collected; any other navigation failure
    leaves only the baseline artifacts.
    """

    def __init__(self, requestor: NavigationRequestor):
        self.requestor = requestor

    async def produce(self, page: PageHandle, config: EffectiveConfig) -> Artifacts:
        session = GatherSession(page, config)
        await session.collect_base_artifacts()
        requested_url = self.requestor if isinstance(self.requestor, str) else None

        await self._load_blank_page(page, config)

        for phase in INSTRUMENTATION_PHASES[:2]:
            await session.run_phase(phase)

        with session.timer.mark("gather:navigate"):
            error = await self._navigate(page, config)

        for phase in INSTRUMENTATION_PHASES[2:]:
            await session.run_phase(phase)

        fatal = error is not None and error.code != RuntimeErrorCode.LOAD_TIMEOUT
        if error is not None:
            logger.warning(f"Page load error: {error}")
            session.page_load_error = error
            if error.code == RuntimeErrorCode.LOAD_TIMEOUT:
                session.run_warnings.append(SLOW_LOAD_WARNING)

        if fatal:
            logger.info("Skipping artifact collection after a failed navigation")
        else:
            await session.collect_artifacts()

        final_url = page.url
        return session.finalize(
            {
                "requested_url": requested_url or final_url,
                "main_document_url": final_url,
                "final_displayed_url": final_url,
            }
        )

    async def _load_blank_page(self, page: PageHandle, config: EffectiveConfig) -> None:
        blank_page = config.settings.blank_page
        if not blank_page or not isinstance(self.requestor, str):
            return
        try:
            await page.goto(blank_page, timeout=config.settings.max_wait_for_load)
        except Exception as e:
            logger.debug(f"Could not load {blank_page} before navigating: {e}")

    async def _navigate(
        self, page: PageHandle, config: EffectiveConfig
    ) -> GatherRuntimeError | None:
        """Navigate and wait for load, returning the runtime error if any."""
        settings = config.settings
        max_wait = settings.max_wait_for_load

        async def load() -> Any:
            if isinstance(self.requestor, str):
                logger.info(f"Navigating to {self.requestor}")
                response = await page.goto(
                    self.requestor, wait_until="domcontentloaded", timeout=max_wait
                )
            else:
                logger.info("Waiting for a user-triggered navigation")
                response = await self.requestor()
            await page.wait_for_load_state("networkidle", timeout=max_wait)
            if settings.network_quiet_threshold:
                await monitor.wait_for_quiet(settings.network_quiet_threshold)
            return response

        monitor = NetworkMonitor(page)
        monitor.attach()
        try:
            response = await asyncio.wait_for(load(), timeout=max_wait / 1000)
        except Exception as e:
            if classify_error(e) == BrowserErrorKind.TIMEOUT:
                logger.warning(f"Page did not load within {max_wait}ms")
            return to_runtime_error(e)
        finally:
            monitor.detach()

        status = getattr(response, "status", None)
        if isinstance(status, int) and status >= 400:
            return GatherRuntimeError(
                RuntimeErrorCode.ERRORED_DOCUMENT_REQUEST,
                f"The page returned status code {status}.",
            )

        if settings.pause_after_load:
            await asyncio.sleep(settings.pause_after_load / 1000)
        return None


async def navigation_gather(
    page: PageHandle,
    requestor: NavigationRequestor,
    config: Mapping[str, Any] | str | Path | None = None,
    flags: Mapping[str, Any] | None = None,
) -> GatherResult:
    """Resolve config, then gather artifacts over a navigation.

    Args:
        page: Page to navigate
        requestor: Target URL, or an async callable that triggers navigation
        config: Config document, path or preset name
        flags: Runtime settings overrides

    Returns:
        GatherResult with artifacts and the options to audit them
    """
    from ..runner import RunnerOptions

    effective = resolve_config(config, flags, GatherMode.NAVIGATION)
    artifacts = await NavigationGather(requestor).produce(page, effective)
    return GatherResult(
        artifacts=artifacts,
        runner_options=RunnerOptions(config=effective, computed_cache=ComputedArtifactCache()),
    )
