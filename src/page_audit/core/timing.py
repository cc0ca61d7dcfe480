"""Wall-clock timing of run phases."""

import time
from collections.abc import Iterator
from contextlib import contextmanager

from .types import RunTiming, TimingEntry


class RunTimer:
    """Records named durations relative to the start of a run."""

    def __init__(self) -> None:
        self._origin = time.monotonic()
        self._entries: list[TimingEntry] = []

    @contextmanager
    def mark(self, name: str) -> Iterator[None]:
        start = time.monotonic()
        try:
            yield
        finally:
            end = time.monotonic()
            self._entries.append(
                TimingEntry(
                    name=name,
                    start_time=round((start - self._origin) * 1000, 2),
                    duration=round((end - start) * 1000, 2),
                )
            )

    def summary(self) -> RunTiming:
        total = round((time.monotonic() - self._origin) * 1000, 2)
        return RunTiming(entries=list(self._entries), total=total)
