"""Plugin resolution, compatibility verification and task loading."""

from pluginharness.api import load_plugins_tasks, load_plugins_tasks_from_yaml

__all__ = ["load_plugins_tasks", "load_plugins_tasks_from_yaml"]
