"""Fakes for exercising plugin resolution without a network or real plugins."""

from pluginharness.testkit.fakes import InMemoryResolver, ResolveCall
from pluginharness.testkit.plugins import (
    build_archive,
    plugin_info_payload,
    plugin_script,
    write_executable,
)

__all__ = [
    "InMemoryResolver",
    "ResolveCall",
    "build_archive",
    "plugin_info_payload",
    "plugin_script",
    "write_executable",
]
