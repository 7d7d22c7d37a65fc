from pluginharness.orchestration.aggregation import aggregate_tasks
from pluginharness.orchestration.cache import (
    decode_plugins,
    encode_plugins,
    read_plugins_cache,
    write_plugins_cache,
)
from pluginharness.orchestration.compatibility import (
    CompatibilityError,
    ConflictReport,
    find_conflicts,
    verify_plugin_compatibility,
)
from pluginharness.orchestration.coordinator import RESOLVER_LOCK_FILE_NAME, resolve_plugins
from pluginharness.orchestration.registry import DictTaskRegistry
from pluginharness.orchestration.upgrade import upgrade_plugin_configs

__all__ = [
    "RESOLVER_LOCK_FILE_NAME",
    "CompatibilityError",
    "ConflictReport",
    "DictTaskRegistry",
    "aggregate_tasks",
    "decode_plugins",
    "encode_plugins",
    "find_conflicts",
    "read_plugins_cache",
    "resolve_plugins",
    "upgrade_plugin_configs",
    "verify_plugin_compatibility",
    "write_plugins_cache",
]
