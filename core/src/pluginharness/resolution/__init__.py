from pluginharness.resolution.archive import sha256_file, unpack_single_file, verify_checksum
from pluginharness.resolution.artifacts import download_artifact, resolve_artifact, resolve_assets
from pluginharness.resolution.info import info_from_plugin, parse_plugin_info
from pluginharness.resolution.resolvers import TemplateResolver, parse_resolver, validate_template

__all__ = [
    "TemplateResolver",
    "download_artifact",
    "info_from_plugin",
    "parse_plugin_info",
    "parse_resolver",
    "resolve_artifact",
    "resolve_assets",
    "sha256_file",
    "unpack_single_file",
    "validate_template",
    "verify_checksum",
]
