"""Memoizing cache for artifacts derived from raw gather output.

Entries are keyed by the computation name and the *identity* of the source
object, never by its content, so artifacts from separate gathers can share
one cache without ever colliding.
"""

import logging
import threading
from collections.abc import Callable, Mapping
from typing import Any, ClassVar

from .errors import UsageError

logger = logging.getLogger(__name__)

ComputeFn = Callable[[Any, "ComputedArtifactCache"], Any]


class ComputedArtifact:
    """A pure function of its source artifacts, memoized per run.

    Subclasses set ``name`` and implement ``compute``. Use ``request`` to
    obtain the value through a cache.
    """

    name: ClassVar[str]

    @classmethod
    def compute(cls, source: Any, cache: "ComputedArtifactCache") -> Any:
        raise NotImplementedError

    @classmethod
    def request(cls, source: Any, cache: "ComputedArtifactCache") -> Any:
        return cache.get(cls, source)


class _CacheEntry:
    __slots__ = ("source", "value", "error", "done", "owner", "interrupted")

    def __init__(self, source: Any) -> None:
        # Holding the source keeps its id() from being reused while cached.
        self.source = source
        self.value: Any = None
        self.error: BaseException | None = None
        self.done = threading.Event()
        self.owner = threading.get_ident()
        self.interrupted = False


def _identity(source: Any) -> tuple[int, ...]:
    if isinstance(source, tuple):
        return tuple(id(item) for item in source)
    return (id(source),)


class ComputedArtifactCache:
    """Run-scoped memo of computed artifacts.

    Safe to share between threads: concurrent requests for the same key
    wait for the first computation instead of repeating it. Failures are
    memoized too and re-raised to every requester; an interrupted
    computation (a ``BaseException`` that is not an ``Exception``) is
    forgotten and recomputed on the next request.
    """

    def __init__(self, registry: Mapping[str, type[ComputedArtifact]] | None = None):
        self._registry = registry
        self._entries: dict[tuple[str, tuple[int, ...]], _CacheEntry] = {}
        self._lock = threading.Lock()
        self.computations = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, tuple) or len(key) != 2:
            return False
        name, source = key
        return (name, _identity(source)) in self._entries

    def get(
        self,
        computed: str | type[ComputedArtifact],
        source: Any,
        compute: ComputeFn | None = None,
    ) -> Any:
        """Return the computed value for ``source``, computing it on first use.

        Args:
            computed: Registered computation name or ComputedArtifact subclass
            source: Artifacts record (or tuple of artifact objects) to derive from
            compute: Explicit compute function, overriding the registry

        Returns:
            The memoized value

        Raises:
            UsageError: If the name is unknown or a computation requests itself
        """
        name, fn = self._resolve(computed, compute)
        key = (name, _identity(source))

        with self._lock:
            entry = self._entries.get(key)
            is_owner = entry is None
            if entry is None:
                entry = _CacheEntry(source)
                self._entries[key] = entry

        if is_owner:
            logger.debug(f"Computing {name}")
            self.computations += 1
            try:
                entry.value = fn(source, self)
            except Exception as e:
                entry.error = e
            except BaseException:
                # Interruptions are not memoized.
                with self._lock:
                    self._entries.pop(key, None)
                entry.interrupted = True
                raise
            finally:
                entry.done.set()
        else:
            if not entry.done.is_set() and entry.owner == threading.get_ident():
                raise UsageError(f"Computed artifact {name} depends on itself")
            entry.done.wait()
            if entry.interrupted:
                return self.get(computed, source, compute)

        if entry.error is not None:
            raise entry.error
        return entry.value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _resolve(
        self, computed: str | type[ComputedArtifact], compute: ComputeFn | None
    ) -> tuple[str, ComputeFn]:
        if isinstance(computed, str):
            name = computed
            if compute is not None:
                return name, compute
            if self._registry is None:
                from ..computed import COMPUTED_ARTIFACTS

                self._registry = COMPUTED_ARTIFACTS
            if name not in self._registry:
                raise UsageError(f"Unknown computed artifact: {name}")
            return name, self._registry[name].compute

        return computed.name, compute or computed.compute
