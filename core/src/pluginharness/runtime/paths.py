from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from pluginharness.contracts import Locator, OSArch

_ENV_HOME = "PLUGIN_HARNESS_HOME"
_LOCAL_HOME_DIRNAME = ".plugin-harness"
_TEMP_HOME_DIRNAME = "plugin-harness"

ARCHIVE_EXTENSION = ".tgz"


@dataclass(frozen=True, slots=True)
class ResourceDirs:
    plugins: Path
    assets: Path
    downloads: Path
    cache: Path


def resolve_home_dir() -> Path:
    """Resolve a writable harness home directory and ensure it exists."""
    candidates: list[Path] = []

    env_value = os.environ.get(_ENV_HOME)
    if env_value:
        candidates.append(Path(env_value).expanduser())

    candidates.append(Path.home() / _LOCAL_HOME_DIRNAME)
    candidates.append(Path(tempfile.gettempdir()) / _TEMP_HOME_DIRNAME)

    for candidate in candidates:
        if _ensure_writable_dir(candidate):
            return candidate

    raise RuntimeError("Unable to resolve a writable plugin-harness home directory.")


def resolve_resource_dirs(home: Path | None = None) -> ResourceDirs:
    """Build and create the plugins/assets/downloads/cache directories under home."""
    root = home if home is not None else resolve_home_dir()
    dirs = ResourceDirs(
        plugins=root / "plugins",
        assets=root / "assets",
        downloads=root / "downloads",
        cache=root / "cache",
    )
    for path in (dirs.plugins, dirs.assets, dirs.downloads, dirs.cache):
        path.mkdir(parents=True, exist_ok=True)
    return dirs


def artifact_file_name(locator: Locator) -> str:
    return f"{locator.group}-{locator.product}-{locator.version}"


def artifact_path(directory: Path, locator: Locator) -> Path:
    return directory / artifact_file_name(locator)


def download_path(downloads_dir: Path, locator: Locator, platform: OSArch) -> Path:
    return downloads_dir / f"{artifact_file_name(locator)}-{platform}{ARCHIVE_EXTENSION}"


def _ensure_writable_dir(path: Path) -> bool:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError:
        return False

    return _validate_writable(path)


def _validate_writable(path: Path) -> bool:
    test_file = path / ".write_test"
    try:
        with test_file.open("w", encoding="utf-8") as handle:
            handle.write("ok")
        test_file.unlink(missing_ok=True)
        return True
    except OSError:
        return False
