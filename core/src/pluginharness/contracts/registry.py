from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from pluginharness.contracts.tasks import Task


class TaskNotFoundError(KeyError):
    pass


@runtime_checkable
class TaskRegistry(Protocol):
    def get(self, name: str) -> Task:
        """Return task for name or raise TaskNotFoundError."""
        ...

    def list(self) -> Iterable[Task]:
        """List available tasks (for CLI / debugging)."""
        ...
