from __future__ import annotations

import io
import json
import tarfile
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from pluginharness.contracts import INFO_COMMAND_NAME, Locator


def plugin_info_payload(
    locator: Locator | str,
    *,
    tasks: Sequence[str | Mapping[str, Any]] = (),
    config_file_name: str | None = None,
    upgrade_config: Mapping[str, Any] | None = None,
    global_flags: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Build the JSON payload a plugin prints for the info command."""
    payload: dict[str, Any] = {
        "schema_version": "1",
        "id": str(locator),
        "tasks": [
            {"name": task, "command": [task]} if isinstance(task, str) else dict(task)
            for task in tasks
        ],
    }
    if config_file_name is not None:
        payload["config_file_name"] = config_file_name
    if upgrade_config is not None:
        payload["upgrade_config"] = dict(upgrade_config)
    if global_flags is not None:
        payload["global_flags"] = dict(global_flags)
    return payload


def plugin_script(
    info: Mapping[str, Any] | str,
    *,
    upgrade_sed: str | None = None,
    info_exit_code: int = 0,
) -> str:
    """
    Shell script that behaves like a plugin executable.

    `<script> _pluginInfo` prints `info`; `<script> ... upgrade-config`
    filters stdin through `sed -e <upgrade_sed>` (or echoes it back); any
    other invocation prints its arguments.
    """
    info_text = info if isinstance(info, str) else json.dumps(info)
    upgrade_filter = f"sed -e '{upgrade_sed}'" if upgrade_sed else "cat"
    return (
        "#!/bin/sh\n"
        f'if [ "$1" = "{INFO_COMMAND_NAME}" ]; then\n'
        "cat <<'PLUGIN_INFO_EOF'\n"
        f"{info_text}\n"
        "PLUGIN_INFO_EOF\n"
        f"exit {info_exit_code}\n"
        "fi\n"
        'for arg in "$@"; do\n'
        '  if [ "$arg" = "upgrade-config" ]; then\n'
        f"    {upgrade_filter}\n"
        "    exit 0\n"
        "  fi\n"
        "done\n"
        'echo "ran: $*"\n'
    )


def build_archive(files: Mapping[str, bytes] | bytes, *, name: str = "plugin") -> bytes:
    """Gzipped tarball holding `files` (or a single file called `name`)."""
    entries = {name: files} if isinstance(files, bytes) else dict(files)
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for entry_name, content in entries.items():
            member = tarfile.TarInfo(entry_name)
            member.size = len(content)
            member.mode = 0o755
            tar.addfile(member, io.BytesIO(content))
    return buffer.getvalue()


def write_executable(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    path.chmod(0o755)
    return path
