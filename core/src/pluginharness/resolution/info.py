from __future__ import annotations

import json
import subprocess
from pathlib import Path

from pydantic import ValidationError

from pluginharness.configuration import format_validation_error
from pluginharness.contracts import INFO_COMMAND_NAME, Locator, PluginInfo
from pluginharness.errors import InfoQueryError


def info_from_plugin(plugin_path: Path, *, expected: Locator | None = None) -> PluginInfo:
    """
    Query a plugin executable for its metadata.

    Runs `<plugin> _pluginInfo` and parses its standard output as PluginInfo
    JSON. When `expected` is given, the reported id must match it.
    """
    try:
        process = subprocess.run(  # noqa: S603  # executable was resolved and verified
            [str(plugin_path), INFO_COMMAND_NAME],
            check=False,
            capture_output=True,
            text=True,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        raise InfoQueryError(f"failed to execute {plugin_path}: {exc}") from exc

    if process.returncode != 0:
        output = (process.stderr or process.stdout or "").strip()
        raise InfoQueryError(
            f"command {plugin_path} {INFO_COMMAND_NAME} exited with code {process.returncode}"
            + (f": {output}" if output else "")
        )

    return parse_plugin_info(process.stdout, source=str(plugin_path), expected=expected)


def parse_plugin_info(
    output: str, *, source: str = "plugin", expected: Locator | None = None
) -> PluginInfo:
    try:
        payload = json.loads(output)
    except json.JSONDecodeError as exc:
        raise InfoQueryError(f"failed to parse info output of {source} as JSON: {exc}") from exc

    try:
        info = PluginInfo.model_validate(payload)
    except ValidationError as exc:
        raise InfoQueryError(
            f"invalid plugin info from {source}: {format_validation_error('info', exc)}"
        ) from exc

    if expected is not None and info.locator != expected:
        raise InfoQueryError(
            f"plugin info from {source} reports id {info.id}, expected {expected}"
        )
    return info
