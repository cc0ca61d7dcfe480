"""Shared machinery for the gather strategies."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from ..core.artifacts import ArtifactError, Artifacts
from ..core.config import EffectiveConfig
from ..core.errors import GatherRuntimeError
from ..core.timing import RunTimer
from .base import GatherContext, Gatherer
from .driver import PageHandle

if TYPE_CHECKING:
    from ..runner import RunnerOptions

logger = logging.getLogger(__name__)

INSTRUMENTATION_PHASES = (
    "start_instrumentation",
    "start_sensitive_instrumentation",
    "stop_sensitive_instrumentation",
    "stop_instrumentation",
)


@dataclass
class GatherResult:
    """Artifacts from a gather plus the options needed to audit them."""

    artifacts: Artifacts
    runner_options: "RunnerOptions"


class GatherSession:
    """Per-invocation gatherer instances and their collected artifacts.

    Gatherers are visited one at a time in configured order. A gatherer that
    raises in any phase is skipped for the remaining phases and its artifact
    becomes an ``ArtifactError``.
    """

    def __init__(self, page: PageHandle, config: EffectiveConfig, timer: RunTimer | None = None):
        self.page = page
        self.config = config
        self.timer = timer or RunTimer()
        self.gatherers: dict[str, Gatherer] = {
            defn.id: defn.gatherer() for defn in config.artifacts
        }
        self.results: dict[str, Any] = {}
        self.base_artifacts: dict[str, Any] = {}
        self.run_warnings: list[str] = []
        self.page_load_error: GatherRuntimeError | None = None

    def _context(self, dependencies: dict[str, Any] | None = None) -> GatherContext:
        return GatherContext(
            page=self.page,
            gather_mode=self.config.gather_mode,
            settings=self.config.settings,
            dependencies=dependencies or {},
        )

    async def run_phase(self, phase: str) -> None:
        """Run one lifecycle phase across all gatherers, sequentially."""
        with self.timer.mark(f"gather:{phase}"):
            for defn in self.config.artifacts:
                if isinstance(self.results.get(defn.id), ArtifactError):
                    continue
                gatherer = self.gatherers[defn.id]
                try:
                    await getattr(gatherer, phase)(self._context())
                except Exception as e:
                    logger.warning(f"Gatherer {defn.id} failed in {phase}: {e}")
                    self.results[defn.id] = ArtifactError(defn.id, str(e) or type(e).__name__)

    async def collect_artifacts(self) -> None:
        """Run ``get_artifact`` for every gatherer, in configured order."""
        with self.timer.mark("gather:get_artifact"):
            for defn in self.config.artifacts:
                if isinstance(self.results.get(defn.id), ArtifactError):
                    continue

                dependencies = {}
                failed_dependency = None
                for key, artifact_id in defn.dependencies.items():
                    value = self.results.get(artifact_id)
                    if artifact_id not in self.results or isinstance(value, ArtifactError):
                        failed_dependency = artifact_id
                        break
                    dependencies[key] = value
                if failed_dependency:
                    self.results[defn.id] = ArtifactError(
                        defn.id, f"Dependency {failed_dependency} was not gathered"
                    )
                    continue

                try:
                    self.results[defn.id] = await self.gatherers[defn.id].get_artifact(
                        self._context(dependencies)
                    )
                except Exception as e:
                    logger.warning(f"Gatherer {defn.id} failed to produce an artifact: {e}")
                    self.results[defn.id] = ArtifactError(defn.id, str(e) or type(e).__name__)

    async def collect_base_artifacts(self) -> None:
        """Capture the baseline artifacts every gather produces."""
        try:
            user_agent = await self.page.evaluate("navigator.userAgent")
        except Exception as e:
            logger.debug(f"Could not read the host user agent: {e}")
            user_agent = ""

        self.base_artifacts = {
            "fetch_time": datetime.now(timezone.utc).isoformat(),
            "URL": {"requested_url": None, "main_document_url": None, "final_displayed_url": ""},
            "GatherContext": {"gather_mode": self.config.gather_mode.value},
            "settings": self.config.settings,
            "HostUserAgent": user_agent or "",
        }

    def finalize(self, url: dict[str, str | None]) -> Artifacts:
        """Freeze everything gathered so far into an Artifacts record."""
        warnings = list(dict.fromkeys(self.run_warnings))
        data = dict(self.base_artifacts)
        data.update(self.results)
        data.update(
            {
                "URL": url,
                "RunWarnings": warnings,
                "PageLoadError": self.page_load_error,
                "Timing": [entry.model_dump() for entry in self.timer.summary().entries],
            }
        )
        return Artifacts(data)
