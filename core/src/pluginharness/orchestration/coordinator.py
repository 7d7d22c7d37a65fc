from __future__ import annotations

import logging
from pathlib import Path

from pluginharness.contracts import (
    Locator,
    OSArch,
    PluginDeclaration,
    PluginsParam,
    ResolvedPlugin,
)
from pluginharness.errors import ResolutionError
from pluginharness.resolution.artifacts import resolve_artifact, resolve_assets
from pluginharness.resolution.info import info_from_plugin
from pluginharness.runtime.locking import exclusive_lock

RESOLVER_LOCK_FILE_NAME = "plugin-resolver.lock"

_LOGGER = logging.getLogger("plugin_harness.resolution")


class _StageError(Exception):
    """Failure of one resolution stage, worded for the aggregated report."""


def resolve_plugins(
    plugins_dir: Path,
    assets_dir: Path,
    downloads_dir: Path,
    platform: OSArch,
    params: PluginsParam,
) -> dict[Locator, ResolvedPlugin]:
    """
    Resolve every declared plugin into `plugins_dir` and return their info.

    The resolver lock file in `plugins_dir` is held for the whole run, so only
    one resolution touches the plugins, assets and downloads directories at a
    time, within and across processes.

    For each declaration: ensure the executable exists locally (downloading
    and unpacking it through the declaration's resolver or the default
    resolvers), verify its checksum if one is declared for `platform`, query
    its info, then resolve its assets. A failure at any step skips only that
    declaration; once all are attempted, all failures are raised together as
    one ResolutionError.
    """
    with exclusive_lock(plugins_dir / RESOLVER_LOCK_FILE_NAME):
        plugins: dict[Locator, ResolvedPlugin] = {}
        failures: dict[Locator, Exception] = {}
        for declaration in params.plugins:
            locator = declaration.locator
            try:
                plugins[locator] = _resolve_plugin(
                    declaration, plugins_dir, assets_dir, downloads_dir, platform, params
                )
            except Exception as exc:
                _LOGGER.warning("Failed to resolve plugin %s: %s", locator, exc)
                failures[locator] = exc

    if failures:
        raise ResolutionError("plugin", failures)
    return plugins


def _resolve_plugin(
    declaration: PluginDeclaration,
    plugins_dir: Path,
    assets_dir: Path,
    downloads_dir: Path,
    platform: OSArch,
    params: PluginsParam,
) -> ResolvedPlugin:
    locator = declaration.locator
    try:
        plugin_path = resolve_artifact(
            declaration, plugins_dir, downloads_dir, params.default_resolvers, platform
        )
    except Exception as exc:
        raise _StageError(f"failed to resolve plugin {locator}: {exc}") from exc

    try:
        info = info_from_plugin(plugin_path, expected=locator)
    except Exception as exc:
        raise _StageError(f"failed to get plugin info for plugin {locator}: {exc}") from exc

    try:
        assets = resolve_assets(
            declaration.assets, assets_dir, downloads_dir, params.default_resolvers, platform
        )
    except Exception as exc:
        raise _StageError(f"failed to get asset(s) for plugin {locator}: {exc}") from exc

    return ResolvedPlugin(info=info, assets=assets)
