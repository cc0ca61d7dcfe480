"""Artifacts captured by a gather invocation."""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from .errors import ArtifactUnavailableError
from .types import GatherMode

if TYPE_CHECKING:
    from .config import EffectiveConfig

# Artifacts produced by every gather regardless of configuration.
BASELINE_ARTIFACTS = frozenset(
    {
        "fetch_time",
        "URL",
        "GatherContext",
        "settings",
        "HostUserAgent",
        "RunWarnings",
        "PageLoadError",
        "Timing",
    }
)


@dataclass(frozen=True)
class ArtifactError:
    """Stored in place of an artifact whose gatherer failed."""

    artifact_name: str
    message: str

    def to_exception(self) -> ArtifactUnavailableError:
        return ArtifactUnavailableError(self.artifact_name, self.message)


class Artifacts(Mapping[str, Any]):
    """Read-only mapping of artifact name to captured value.

    Instances are compared and cached by identity: two gathers never share
    an Artifacts object even when their captured content is equal.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any]):
        self._data = MappingProxyType(dict(data))

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        return self is other

    def __hash__(self) -> int:
        return id(self)

    def __repr__(self) -> str:
        return f"Artifacts({sorted(self._data)})"

    def require(self, name: str) -> Any:
        """Return an artifact, raising if it is missing or errored."""
        if name not in self._data:
            raise ArtifactUnavailableError(name)
        value = self._data[name]
        if isinstance(value, ArtifactError):
            raise value.to_exception()
        return value

    def errors(self) -> dict[str, ArtifactError]:
        """Artifacts whose gatherer failed."""
        return {k: v for k, v in self._data.items() if isinstance(v, ArtifactError)}


@dataclass(frozen=True)
class GatherStep:
    """One recorded gather invocation within a flow."""

    name: str
    gather_mode: GatherMode
    artifacts: Artifacts
    config: "EffectiveConfig"
    flags: Mapping[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)
