from __future__ import annotations

import logging
import os
import stat
import subprocess
import tempfile
from collections.abc import Sequence
from pathlib import Path

from pluginharness.contracts import UpgradeConfigTask
from pluginharness.errors import UpgradeConfigError

_LOGGER = logging.getLogger("plugin_harness.upgrade_config")


def upgrade_plugin_configs(
    tasks: Sequence[UpgradeConfigTask],
    *,
    config_dir: Path,
    project_dir: Path | None = None,
) -> list[str]:
    """
    Run each plugin's upgrade-config task against its file in `config_dir`.

    A plugin whose current config file is missing but whose legacy file exists
    is upgraded from the legacy file, which is removed afterwards. Returns the
    names of the config files that were written.
    """
    upgraded: list[str] = []
    for task in tasks:
        current = config_dir / task.config_file_name
        legacy_path = config_dir / task.legacy_config_file if task.legacy_config_file else None

        if current.is_file():
            source, legacy = current, False
        elif legacy_path is not None and legacy_path.is_file():
            source, legacy = legacy_path, True
        else:
            continue

        original = source.read_bytes()
        output = _run_upgrade(task, original, project_dir=project_dir, legacy=legacy)
        if not legacy and output == original:
            continue

        _write_atomic(current, output, mode=stat.S_IMODE(source.stat().st_mode))
        if legacy and legacy_path is not None and legacy_path != current:
            legacy_path.unlink(missing_ok=True)
        _LOGGER.info("Upgraded configuration for %s", task.config_file_name)
        upgraded.append(task.config_file_name)
    return upgraded


def _run_upgrade(
    task: UpgradeConfigTask, config: bytes, *, project_dir: Path | None, legacy: bool
) -> bytes:
    argv = task.argv(project_dir=project_dir, legacy=legacy)
    try:
        process = subprocess.run(  # noqa: S603  # argv comes from a resolved plugin
            argv,
            input=config,
            capture_output=True,
            check=False,
        )
    except OSError as exc:
        raise UpgradeConfigError(
            f"failed to run upgrade-config for {task.plugin_id}: {exc}"
        ) from exc
    if process.returncode != 0:
        stderr = process.stderr.decode("utf-8", errors="replace").strip()
        raise UpgradeConfigError(
            f"upgrade-config for {task.plugin_id} failed on {task.config_file_name} "
            f"with exit code {process.returncode}" + (f": {stderr}" if stderr else "")
        )
    return process.stdout


def _write_atomic(path: Path, data: bytes, *, mode: int) -> None:
    temp_path: Path | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "wb", dir=path.parent, prefix=f".{path.name}.", delete=False
        ) as handle:
            temp_path = Path(handle.name)
            handle.write(data)
        os.chmod(temp_path, mode)
        os.replace(temp_path, path)
    except OSError as exc:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise UpgradeConfigError(f"failed to write upgraded configuration {path}: {exc}") from exc
