from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pluginharness.contracts.locator import Locator
from pluginharness.contracts.platform import OSArch


class LocatorConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str = Field(min_length=1)
    checksums: dict[str, str] = Field(default_factory=dict)

    @field_validator("id")
    @classmethod
    def _validate_id(cls, value: str) -> str:
        Locator.parse(value)
        return value

    @field_validator("checksums")
    @classmethod
    def _validate_checksums(cls, value: dict[str, str]) -> dict[str, str]:
        normalized: dict[str, str] = {}
        for platform_key, checksum in value.items():
            OSArch.parse(platform_key)
            if not checksum.strip():
                raise ValueError(f"checksum for {platform_key} must be non-empty")
            normalized[platform_key] = checksum.strip().lower()
        return normalized

    def to_locator(self) -> Locator:
        return Locator.parse(self.id)


class AssetConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    locator: LocatorConfig
    resolver: str | None = None


class PluginConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    locator: LocatorConfig
    resolver: str | None = None
    assets: list[AssetConfig] = Field(default_factory=list)


class PluginsConfig(BaseModel):
    """Declarative plugins configuration as loaded from YAML."""

    model_config = ConfigDict(extra="forbid")

    resolvers: list[str] = Field(default_factory=list)
    plugins: list[PluginConfig] = Field(default_factory=list)

    @field_validator("resolvers", "plugins", mode="before")
    @classmethod
    def _coerce_list(cls, value: Any) -> list[Any]:
        if value is None:
            return []
        return value
