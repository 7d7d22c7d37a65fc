from .declarations import ArtifactDeclaration, PluginDeclaration, PluginsParam
from .locator import Locator
from .platform import OSArch
from .plugin_info import (
    INFO_COMMAND_NAME,
    PluginInfo,
    ResolvedPlugin,
    TaskInfo,
    UpgradeConfigInfo,
)
from .plugins_config import AssetConfig, LocatorConfig, PluginConfig, PluginsConfig
from .registry import TaskNotFoundError, TaskRegistry
from .resolver import Resolver
from .tasks import GlobalFlagOptions, PluginTasks, Task, UpgradeConfigTask, VerifyOptions

__all__ = [
    "INFO_COMMAND_NAME",
    "Locator",
    "OSArch",
    "ArtifactDeclaration",
    "PluginDeclaration",
    "PluginsParam",
    "Resolver",
    "PluginInfo",
    "TaskInfo",
    "UpgradeConfigInfo",
    "GlobalFlagOptions",
    "VerifyOptions",
    "ResolvedPlugin",
    "Task",
    "UpgradeConfigTask",
    "PluginTasks",
    "TaskRegistry",
    "TaskNotFoundError",
    "LocatorConfig",
    "AssetConfig",
    "PluginConfig",
    "PluginsConfig",
]
