from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path

from pluginharness.contracts import Task

_LOGGER = logging.getLogger("plugin_harness.launcher")


def run_task(
    task: Task,
    *,
    project_dir: Path | None = None,
    config_dir: Path | None = None,
    args: Sequence[str] = (),
    debug: bool = False,
    verify_only: bool = False,
) -> int:
    """Run a task's plugin executable with inherited stdio and return its exit code."""
    argv = task.argv(
        project_dir=project_dir,
        config_dir=config_dir,
        args=args,
        debug=debug,
        verify_only=verify_only,
    )
    _LOGGER.debug("Running task %s: %s", task.name, argv)
    try:
        process = subprocess.run(  # noqa: S603  # argv comes from a resolved plugin
            argv,
            cwd=project_dir,
            check=False,
        )
    except OSError as exc:
        _LOGGER.error("Failed to launch task %s: %s", task.name, exc)
        return 127
    return process.returncode
