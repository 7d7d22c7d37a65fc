from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from pluginharness.configuration import ConfigError, load_plugins_config, stable_hash
from pluginharness.contracts import (
    ArtifactDeclaration,
    AssetConfig,
    OSArch,
    PluginConfig,
    PluginDeclaration,
    PluginsConfig,
    PluginsParam,
    PluginTasks,
    Resolver,
)
from pluginharness.orchestration.aggregation import aggregate_tasks
from pluginharness.orchestration.cache import read_plugins_cache, write_plugins_cache
from pluginharness.orchestration.compatibility import verify_plugin_compatibility
from pluginharness.orchestration.coordinator import resolve_plugins
from pluginharness.resolution.resolvers import parse_resolver
from pluginharness.runtime.paths import ResourceDirs, resolve_resource_dirs

ResolverFactory = Callable[[str], Resolver]

_LOGGER = logging.getLogger("plugin_harness.api")


def load_plugins_tasks(
    params: PluginsParam,
    *,
    dirs: ResourceDirs | None = None,
    platform: OSArch | None = None,
    cache_path: Path | None = None,
) -> PluginTasks:
    """
    Return the tasks provided by the plugins declared in `params`.

    When `cache_path` names an existing file, the resolved plugin information
    is read from it and no resolution or verification happens. Otherwise the
    plugins are resolved for `platform` (default: the running platform),
    verified to be compatible with each other, and, when `cache_path` is set,
    written to the cache. Tasks are then built from the plugin information.
    """
    resource_dirs = dirs if dirs is not None else resolve_resource_dirs()
    target = platform if platform is not None else OSArch.current()

    plugins = read_plugins_cache(cache_path) if cache_path is not None else None
    if plugins is None:
        plugins = resolve_plugins(
            resource_dirs.plugins,
            resource_dirs.assets,
            resource_dirs.downloads,
            target,
            params,
        )
        verify_plugin_compatibility(plugins)

        if cache_path is not None:
            write_plugins_cache(cache_path, plugins)
    else:
        _LOGGER.debug("Loaded %d plugin(s) from cache %s", len(plugins), cache_path)

    return aggregate_tasks(plugins, resource_dirs.plugins, resource_dirs.assets)


def load_plugins_tasks_from_yaml(
    config_yaml: str | Path,
    *,
    dirs: ResourceDirs | None = None,
    platform: OSArch | None = None,
    use_cache: bool = False,
) -> PluginTasks:
    config = load_plugins_config(config_yaml)
    params = build_plugins_param(config)
    resource_dirs = dirs if dirs is not None else resolve_resource_dirs()
    target = platform if platform is not None else OSArch.current()
    cache_path = default_cache_path(config, resource_dirs, target) if use_cache else None
    return load_plugins_tasks(params, dirs=resource_dirs, platform=target, cache_path=cache_path)


def build_plugins_param(
    config: PluginsConfig,
    *,
    resolver_factory: ResolverFactory = parse_resolver,
) -> PluginsParam:
    try:
        default_resolvers = tuple(resolver_factory(template) for template in config.resolvers)
        plugins = tuple(
            _build_plugin_declaration(plugin, resolver_factory) for plugin in config.plugins
        )
    except ValueError as exc:
        raise ConfigError(f"invalid resolver: {exc}") from exc
    return PluginsParam(default_resolvers=default_resolvers, plugins=plugins)


def default_cache_path(config: PluginsConfig, dirs: ResourceDirs, platform: OSArch) -> Path:
    """Cache file keyed by the plugins configuration and target platform."""
    key = stable_hash({"config": config.model_dump(mode="json"), "platform": str(platform)})
    return dirs.cache / f"plugins-{key}.json"


def _build_plugin_declaration(
    plugin: PluginConfig, resolver_factory: ResolverFactory
) -> PluginDeclaration:
    return PluginDeclaration(
        locator=plugin.locator.to_locator(),
        resolver=resolver_factory(plugin.resolver) if plugin.resolver else None,
        checksums=dict(plugin.locator.checksums),
        assets=tuple(_build_asset_declaration(asset, resolver_factory) for asset in plugin.assets),
    )


def _build_asset_declaration(
    asset: AssetConfig, resolver_factory: ResolverFactory
) -> ArtifactDeclaration:
    return ArtifactDeclaration(
        locator=asset.locator.to_locator(),
        resolver=resolver_factory(asset.resolver) if asset.resolver else None,
        checksums=dict(asset.locator.checksums),
    )
