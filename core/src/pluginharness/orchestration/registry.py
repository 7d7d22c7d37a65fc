from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from pluginharness.contracts import Task, TaskNotFoundError, TaskRegistry


@dataclass
class DictTaskRegistry(TaskRegistry):
    tasks: dict[str, Task]

    @classmethod
    def from_tasks(cls, tasks: Sequence[Task]) -> DictTaskRegistry:
        # task names are unique once plugin compatibility has been verified
        return cls(tasks={task.name: task for task in tasks})

    def get(self, name: str) -> Task:
        try:
            return self.tasks[name]
        except KeyError as e:
            raise TaskNotFoundError(name) from e

    def list(self) -> Iterable[Task]:
        return list(self.tasks.values())

    def verify_tasks(self) -> list[Task]:
        """Tasks that take part in verification, by their ordering then registry order."""
        candidates = [task for task in self.tasks.values() if task.verify is not None]
        return sorted(
            candidates,
            key=lambda task: (task.verify.ordering is None, task.verify.ordering or 0),
        )
