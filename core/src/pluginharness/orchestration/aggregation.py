from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from pluginharness.contracts import Locator, PluginTasks, ResolvedPlugin, Task, UpgradeConfigTask
from pluginharness.runtime.paths import artifact_path


def aggregate_tasks(
    plugins: Mapping[Locator, ResolvedPlugin],
    plugins_dir: Path,
    assets_dir: Path,
) -> PluginTasks:
    """
    Flatten resolved plugins into runnable tasks.

    Plugins are visited in locator order and each contributes its tasks in
    the order it declared them. Upgrade-config tasks are collected in the
    same plugin order.
    """
    tasks: list[Task] = []
    upgrade_config_tasks: list[UpgradeConfigTask] = []
    for locator in sorted(plugins):
        plugin = plugins[locator]
        plugin_path = artifact_path(plugins_dir, locator)
        asset_paths = [artifact_path(assets_dir, asset) for asset in plugin.assets]

        tasks.extend(plugin.info.build_tasks(plugin_path, asset_paths))

        upgrade_config_task = plugin.info.upgrade_config_task(plugin_path, asset_paths)
        if upgrade_config_task is not None:
            upgrade_config_tasks.append(upgrade_config_task)
    return PluginTasks(tasks=tasks, upgrade_config_tasks=upgrade_config_tasks)
