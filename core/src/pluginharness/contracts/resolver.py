from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from pluginharness.contracts.locator import Locator
from pluginharness.contracts.platform import OSArch


@runtime_checkable
class Resolver(Protocol):
    """
    Artifact resolution backend contract.

    A resolver fetches the archive for one locator/platform and writes it to
    `dest`. It raises `ResolverError` when it cannot supply the artifact.
    """

    def resolve(self, locator: Locator, platform: OSArch, dest: Path) -> None: ...
