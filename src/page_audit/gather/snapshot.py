"""Snapshot gather: capture the page as it is right now."""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from ..core.artifacts import Artifacts
from ..core.computed import ComputedArtifactCache
from ..core.config import EffectiveConfig, resolve_config
from ..core.types import GatherMode
from .driver import PageHandle
from .helpers import GatherResult, GatherSession

logger = logging.getLogger(__name__)


class SnapshotGather:
    """Runs only the ``get_artifact`` phase against the current page state."""

    async def produce(self, page: PageHandle, config: EffectiveConfig) -> Artifacts:
        session = GatherSession(page, config)
        await session.collect_base_artifacts()
        logger.info(f"Capturing snapshot of {page.url}")
        await session.collect_artifacts()

        url = page.url
        return session.finalize(
            {"requested_url": None, "main_document_url": None, "final_displayed_url": url}
        )


async def snapshot_gather(
    page: PageHandle,
    config: Mapping[str, Any] | str | Path | None = None,
    flags: Mapping[str, Any] | None = None,
) -> GatherResult:
    """Resolve config, then capture a snapshot of the page."""
    from ..runner import RunnerOptions

    effective = resolve_config(config, flags, GatherMode.SNAPSHOT)
    artifacts = await SnapshotGather().produce(page, effective)
    return GatherResult(
        artifacts=artifacts,
        runner_options=RunnerOptions(config=effective, computed_cache=ComputedArtifactCache()),
    )
