from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from pluginharness.api import load_plugins_tasks_from_yaml
from pluginharness.configuration import ConfigError
from pluginharness.contracts import OSArch, TaskNotFoundError
from pluginharness.errors import HarnessError
from pluginharness.orchestration.registry import DictTaskRegistry
from pluginharness.orchestration.upgrade import upgrade_plugin_configs
from pluginharness.runtime.launcher import run_task
from pluginharness.runtime.paths import resolve_resource_dirs

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="plugin-harness",
        description="Resolve build plugins and run the tasks they provide.",
    )
    parser.add_argument("--config", type=Path, required=True, help="Path to plugins YAML")
    parser.add_argument(
        "--cache",
        action="store_true",
        help="Reuse resolved plugin information from the cache (written after resolution)",
    )
    parser.add_argument("--home", type=Path, default=None, help="Override harness home directory")
    parser.add_argument(
        "--platform", default=None, help="Target platform as os-arch (default: current)"
    )
    parser.add_argument("--project-dir", type=Path, default=Path.cwd())
    parser.add_argument(
        "--config-dir",
        type=Path,
        default=None,
        help="Directory holding plugin config files (default: the plugins YAML directory)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("tasks", help="List the tasks provided by the plugins")
    run_parser = commands.add_parser("run", help="Run a task")
    run_parser.add_argument("task")
    run_parser.add_argument("args", nargs=argparse.REMAINDER)
    commands.add_parser("verify", help="Run every task that supports verification")
    commands.add_parser("upgrade-config", help="Upgrade plugin configuration files")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=_LOG_FORMAT,
        stream=sys.stderr,
    )

    try:
        platform = OSArch.parse(args.platform) if args.platform else None
        dirs = resolve_resource_dirs(args.home) if args.home else None
        plugin_tasks = load_plugins_tasks_from_yaml(
            args.config, dirs=dirs, platform=platform, use_cache=args.cache
        )
    except (HarnessError, ConfigError, ValueError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    config_dir = args.config_dir if args.config_dir is not None else args.config.parent
    registry = DictTaskRegistry.from_tasks(plugin_tasks.tasks)

    if args.command == "tasks":
        for task in registry.list():
            suffix = f": {task.description}" if task.description else ""
            print(f"{task.name} ({task.plugin_id}){suffix}")
        return 0

    if args.command == "run":
        try:
            task = registry.get(args.task)
        except TaskNotFoundError:
            print(f"Error: unknown task {args.task!r}", file=sys.stderr)
            return 1
        return run_task(
            task,
            project_dir=args.project_dir,
            config_dir=config_dir,
            args=args.args,
            debug=args.verbose,
        )

    if args.command == "verify":
        failed = []
        for task in registry.verify_tasks():
            exit_code = run_task(
                task,
                project_dir=args.project_dir,
                config_dir=config_dir,
                debug=args.verbose,
                verify_only=True,
            )
            if exit_code != 0:
                failed.append(task.name)
        if failed:
            print(f"Failed tasks: {', '.join(failed)}", file=sys.stderr)
            return 1
        return 0

    try:
        upgraded = upgrade_plugin_configs(
            plugin_tasks.upgrade_config_tasks,
            config_dir=config_dir,
            project_dir=args.project_dir,
        )
    except HarnessError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    for name in upgraded:
        print(f"Upgraded configuration for {name}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
