"""Persisted plugin-resolution cache.

The cache maps each plugin locator to its PluginInfo and resolved asset
locators. Encoding is deterministic JSON (sorted keys, fixed indentation) so
identical inputs always produce identical files.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pluginharness.configuration import format_validation_error
from pluginharness.contracts import Locator, PluginInfo, ResolvedPlugin
from pluginharness.errors import CacheError

CACHE_FORMAT_VERSION = 1
CACHE_FILE_MODE = 0o644

_LOGGER = logging.getLogger("plugin_harness.cache")


class _CacheEntry(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    plugin_info: PluginInfo = Field(alias="pluginInfo")
    assets: list[str] = Field(default_factory=list)


class _CacheDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    version: Literal[1]
    plugins: dict[str, _CacheEntry] = Field(default_factory=dict)


def encode_plugins(plugins: Mapping[Locator, ResolvedPlugin]) -> bytes:
    payload: dict[str, Any] = {
        "version": CACHE_FORMAT_VERSION,
        "plugins": {
            str(locator): {
                "assets": [str(asset) for asset in plugins[locator].assets],
                "pluginInfo": plugins[locator].info.model_dump(mode="json"),
            }
            for locator in sorted(plugins)
        },
    }
    return (json.dumps(payload, indent=2, sort_keys=True) + "\n").encode("utf-8")


def decode_plugins(data: bytes) -> dict[Locator, ResolvedPlugin]:
    try:
        raw = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise CacheError(f"plugin cache is not valid JSON: {exc}") from exc

    try:
        document = _CacheDocument.model_validate(raw)
    except ValidationError as exc:
        raise CacheError(
            f"plugin cache is malformed: {format_validation_error('cache', exc)}"
        ) from exc

    plugins: dict[Locator, ResolvedPlugin] = {}
    for key, entry in document.plugins.items():
        try:
            locator = Locator.parse(key)
            assets = tuple(Locator.parse(asset) for asset in entry.assets)
        except ValueError as exc:
            raise CacheError(f"plugin cache entry {key!r} is malformed: {exc}") from exc
        if entry.plugin_info.locator != locator:
            raise CacheError(
                f"plugin cache entry {key!r} holds info for {entry.plugin_info.id}"
            )
        plugins[locator] = ResolvedPlugin(info=entry.plugin_info, assets=assets)
    return plugins


def read_plugins_cache(path: Path) -> dict[Locator, ResolvedPlugin] | None:
    """
    Load the cache at `path`.

    Returns None when the file does not exist. Any other read or decode
    failure raises CacheError rather than falling back to a fresh resolution.
    """
    try:
        data = path.read_bytes()
    except FileNotFoundError:
        return None
    except OSError as exc:
        raise CacheError(
            f"failed to read plugin information from cache file at {path}: {exc}"
        ) from exc

    try:
        return decode_plugins(data)
    except CacheError as exc:
        raise CacheError(f"failed to load plugin cache file at {path}: {exc}") from exc


def write_plugins_cache(path: Path, plugins: Mapping[Locator, ResolvedPlugin]) -> None:
    """Atomically replace the cache at `path` with the encoded plugins."""
    data = encode_plugins(plugins)
    temp_path: Path | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "wb", dir=path.parent, prefix=f".{path.name}.", delete=False
        ) as handle:
            temp_path = Path(handle.name)
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.chmod(temp_path, CACHE_FILE_MODE)
        os.replace(temp_path, path)
    except OSError as exc:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise CacheError(
            f"failed to write plugin information to cache file at {path}: {exc}"
        ) from exc
    _LOGGER.debug("Wrote plugin cache %s", path)
