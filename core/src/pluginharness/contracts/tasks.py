from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, ConfigDict

ASSETS_FLAG = "--assets"
LEGACY_FLAG = "--legacy"


class GlobalFlagOptions(BaseModel):
    """Names of the global flags a plugin executable understands (None = unsupported)."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    debug_flag: str | None = None
    project_dir_flag: str | None = None
    config_flag: str | None = None


class VerifyOptions(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    # extra arguments that switch the task into check-only mode
    apply_false_args: tuple[str, ...] = ()
    ordering: int | None = None


@dataclass(frozen=True, slots=True)
class Task:
    """
    Runnable task bound to a resolved plugin executable and its assets.
    """

    name: str
    description: str
    plugin_id: str
    plugin_path: Path
    asset_paths: tuple[Path, ...] = ()
    command: tuple[str, ...] = ()
    config_file_name: str | None = None
    global_flags: GlobalFlagOptions = field(default_factory=GlobalFlagOptions)
    verify: VerifyOptions | None = None

    def argv(
        self,
        *,
        project_dir: Path | None = None,
        config_dir: Path | None = None,
        args: Sequence[str] = (),
        debug: bool = False,
        verify_only: bool = False,
    ) -> list[str]:
        argv = [str(self.plugin_path)]
        argv.extend(
            _global_flag_args(
                self.global_flags,
                project_dir=project_dir,
                config_path=(
                    config_dir / self.config_file_name
                    if config_dir is not None and self.config_file_name
                    else None
                ),
                debug=debug,
            )
        )
        if self.asset_paths:
            argv.extend([ASSETS_FLAG, ",".join(str(path) for path in self.asset_paths)])
        argv.extend(self.command)
        if verify_only and self.verify is not None:
            argv.extend(self.verify.apply_false_args)
        argv.extend(args)
        return argv


@dataclass(frozen=True, slots=True)
class UpgradeConfigTask:
    """
    Task that rewrites a plugin's configuration file into its current format.

    The plugin reads the old configuration on stdin and prints the upgraded one.
    """

    plugin_id: str
    config_file_name: str
    plugin_path: Path
    asset_paths: tuple[Path, ...] = ()
    command: tuple[str, ...] = ("upgrade-config",)
    legacy_config_file: str | None = None
    global_flags: GlobalFlagOptions = field(default_factory=GlobalFlagOptions)

    def argv(self, *, project_dir: Path | None = None, legacy: bool = False) -> list[str]:
        argv = [str(self.plugin_path)]
        argv.extend(_global_flag_args(self.global_flags, project_dir=project_dir))
        if self.asset_paths:
            argv.extend([ASSETS_FLAG, ",".join(str(path) for path in self.asset_paths)])
        argv.extend(self.command)
        if legacy:
            argv.append(LEGACY_FLAG)
        return argv


@dataclass(frozen=True, slots=True)
class PluginTasks:
    """Final result of loading plugins: tasks in aggregated order."""

    tasks: Sequence[Task] = ()
    upgrade_config_tasks: Sequence[UpgradeConfigTask] = ()


def _global_flag_args(
    flags: GlobalFlagOptions,
    *,
    project_dir: Path | None = None,
    config_path: Path | None = None,
    debug: bool = False,
) -> list[str]:
    args: list[str] = []
    if debug and flags.debug_flag:
        args.append(flags.debug_flag)
    if project_dir is not None and flags.project_dir_flag:
        args.extend([flags.project_dir_flag, str(project_dir)])
    if config_path is not None and flags.config_flag:
        args.extend([flags.config_flag, str(config_path)])
    return args
