"""Base class for gatherers."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar

from ..core.types import ConfigSettings, GatherMode
from .driver import PageHandle

ALL_MODES = frozenset(GatherMode)


@dataclass(frozen=True)
class GathererMeta:
    """Static capabilities of a gatherer."""

    supported_modes: frozenset[GatherMode] = ALL_MODES
    dependencies: tuple[str, ...] = ()


@dataclass
class GatherContext:
    """What a gatherer sees during one gather invocation."""

    page: PageHandle
    gather_mode: GatherMode
    settings: ConfigSettings
    dependencies: Mapping[str, Any] = field(default_factory=dict)


class Gatherer:
    """Collects one artifact from the page.

    Lifecycle hooks run in this order across all gatherers of an invocation,
    each phase visiting gatherers in configured order:

    1. ``start_instrumentation`` (navigation and timespan)
    2. ``start_sensitive_instrumentation`` (navigation and timespan)
    3. ``stop_sensitive_instrumentation`` (navigation and timespan)
    4. ``stop_instrumentation`` (navigation and timespan)
    5. ``get_artifact`` (all modes)

    A new instance is created for every gather invocation, so gatherers may
    keep state on ``self`` between phases.
    """

    meta: ClassVar[GathererMeta] = GathererMeta()

    async def start_instrumentation(self, context: GatherContext) -> None:
        pass

    async def start_sensitive_instrumentation(self, context: GatherContext) -> None:
        pass

    async def stop_sensitive_instrumentation(self, context: GatherContext) -> None:
        pass

    async def stop_instrumentation(self, context: GatherContext) -> None:
        pass

    async def get_artifact(self, context: GatherContext) -> Any:
        raise NotImplementedError
