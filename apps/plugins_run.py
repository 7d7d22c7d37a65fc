from __future__ import annotations

import os
import sys
from pathlib import Path

from pluginharness.cli import main as cli_main


def _resolve_config_path() -> Path:
    config = os.environ.get("PLUGIN_HARNESS_CONFIG")
    return Path(config) if config else Path.cwd() / "plugins.yml"


def main() -> None:
    argv = sys.argv[1:]
    if "--config" not in argv:
        argv = ["--config", str(_resolve_config_path()), *argv]
    raise SystemExit(cli_main(argv))


if __name__ == "__main__":
    main()
