from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from pluginharness.contracts.locator import Locator
from pluginharness.contracts.platform import OSArch
from pluginharness.contracts.resolver import Resolver


@dataclass(frozen=True, slots=True)
class ArtifactDeclaration:
    """
    Caller-declared artifact: a locator, an optional resolver that replaces
    the default resolvers, and expected SHA-256 checksums keyed by "os-arch".
    """

    locator: Locator
    resolver: Resolver | None = None
    checksums: Mapping[str, str] = field(default_factory=dict)

    def checksum_for(self, platform: OSArch) -> str | None:
        return self.checksums.get(str(platform))


@dataclass(frozen=True, slots=True)
class PluginDeclaration(ArtifactDeclaration):
    assets: Sequence[ArtifactDeclaration] = ()


@dataclass(frozen=True, slots=True)
class PluginsParam:
    """Input of a resolution run. Read-only for the duration of the run."""

    default_resolvers: Sequence[Resolver] = ()
    plugins: Sequence[PluginDeclaration] = ()
