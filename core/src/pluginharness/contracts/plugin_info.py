from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from pluginharness.contracts.locator import Locator
from pluginharness.contracts.tasks import GlobalFlagOptions, Task, UpgradeConfigTask, VerifyOptions

INFO_COMMAND_NAME = "_pluginInfo"


class TaskInfo(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(min_length=1)
    description: str = ""
    command: tuple[str, ...] = ()
    verify: VerifyOptions | None = None


class UpgradeConfigInfo(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    command: tuple[str, ...] = ("upgrade-config",)
    legacy_config_file: str | None = None


class PluginInfo(BaseModel):
    """
    Metadata a plugin publishes through the info command.

    Instances are immutable; a changed plugin produces a new PluginInfo.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: Literal["1"] = "1"
    id: str
    config_file_name: str | None = None
    global_flags: GlobalFlagOptions = Field(default_factory=GlobalFlagOptions)
    tasks: tuple[TaskInfo, ...] = ()
    upgrade_config: UpgradeConfigInfo | None = None

    @field_validator("id")
    @classmethod
    def _validate_id(cls, value: str) -> str:
        Locator.parse(value)
        return value

    @model_validator(mode="after")
    def _validate_tasks(self) -> PluginInfo:
        seen: set[str] = set()
        duplicates: set[str] = set()
        for task in self.tasks:
            if task.name in seen:
                duplicates.add(task.name)
            seen.add(task.name)
        if duplicates:
            raise ValueError(f"duplicate task names: {', '.join(sorted(duplicates))}")
        if self.upgrade_config is not None and not self.config_file_name:
            raise ValueError("upgrade_config requires config_file_name")
        return self

    @property
    def locator(self) -> Locator:
        return Locator.parse(self.id)

    def uses_config(self) -> bool:
        return bool(self.config_file_name)

    def task_names(self) -> list[str]:
        return [task.name for task in self.tasks]

    def build_tasks(self, plugin_path: Path, asset_paths: Sequence[Path] = ()) -> list[Task]:
        return [
            Task(
                name=task.name,
                description=task.description,
                plugin_id=self.id,
                plugin_path=plugin_path,
                asset_paths=tuple(asset_paths),
                command=task.command,
                config_file_name=self.config_file_name,
                global_flags=self.global_flags,
                verify=task.verify,
            )
            for task in self.tasks
        ]

    def upgrade_config_task(
        self, plugin_path: Path, asset_paths: Sequence[Path] = ()
    ) -> UpgradeConfigTask | None:
        if self.upgrade_config is None or not self.config_file_name:
            return None
        return UpgradeConfigTask(
            plugin_id=self.id,
            config_file_name=self.config_file_name,
            plugin_path=plugin_path,
            asset_paths=tuple(asset_paths),
            command=self.upgrade_config.command,
            legacy_config_file=self.upgrade_config.legacy_config_file,
            global_flags=self.global_flags,
        )


@dataclass(frozen=True, slots=True)
class ResolvedPlugin:
    """A verified plugin's info plus the locators of its resolved assets."""

    info: PluginInfo
    assets: tuple[Locator, ...] = ()
