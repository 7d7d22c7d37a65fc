from __future__ import annotations

import threading
import time
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from pluginharness.contracts import Locator, OSArch
from pluginharness.errors import ResolverError


@dataclass(frozen=True, slots=True)
class ResolveCall:
    """Record of a resolver call for assertions in tests."""

    locator: Locator
    platform: OSArch
    dest: Path
    started_at: float
    ended_at: float


class InMemoryResolver:
    """
    Resolver serving archives from memory, keyed by locator.

    Locators without an archive fail with ResolverError. Every call is
    recorded with its start/end timestamps; `delay_s` holds each call open to
    make overlapping calls observable.
    """

    def __init__(
        self,
        archives: Mapping[Locator, bytes] | None = None,
        *,
        name: str = "memory",
        delay_s: float = 0.0,
    ) -> None:
        self.archives: dict[Locator, bytes] = dict(archives or {})
        self.name = name
        self.delay_s = delay_s
        self._calls: list[ResolveCall] = []
        self._lock = threading.Lock()

    @property
    def calls(self) -> list[ResolveCall]:
        with self._lock:
            return list(self._calls)

    def resolve(self, locator: Locator, platform: OSArch, dest: Path) -> None:
        started = time.monotonic()
        try:
            if self.delay_s:
                time.sleep(self.delay_s)
            archive = self.archives.get(locator)
            if archive is None:
                raise ResolverError(f"{self.name} has no artifact for {locator}")
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_bytes(archive)
        finally:
            ended = time.monotonic()
            with self._lock:
                self._calls.append(
                    ResolveCall(
                        locator=locator,
                        platform=platform,
                        dest=dest,
                        started_at=started,
                        ended_at=ended,
                    )
                )

    def __str__(self) -> str:
        return self.name
