"""Runtime helpers: on-disk layout, locking, task launching."""

from pluginharness.runtime.launcher import run_task
from pluginharness.runtime.locking import exclusive_lock
from pluginharness.runtime.paths import (
    ResourceDirs,
    artifact_file_name,
    artifact_path,
    download_path,
    resolve_home_dir,
    resolve_resource_dirs,
)

__all__ = [
    "ResourceDirs",
    "artifact_file_name",
    "artifact_path",
    "download_path",
    "exclusive_lock",
    "resolve_home_dir",
    "resolve_resource_dirs",
    "run_task",
]
