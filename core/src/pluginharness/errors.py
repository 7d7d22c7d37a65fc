from __future__ import annotations

from collections.abc import Mapping

from pluginharness.contracts.locator import Locator

INDENT_SPACES = 4


class HarnessError(Exception):
    pass


class LockError(HarnessError):
    pass


class ResolverError(HarnessError):
    pass


class ArchiveError(ResolverError):
    pass


class ChecksumMismatchError(ResolverError):
    pass


class InfoQueryError(HarnessError):
    pass


class CacheError(HarnessError):
    pass


class UpgradeConfigError(HarnessError):
    pass


class ResolutionError(HarnessError):
    """
    Aggregate of per-locator resolution failures.

    `kind` names what failed to resolve ("plugin", "asset"). The message lists
    every failure in locator order.
    """

    def __init__(self, kind: str, failures: Mapping[Locator, BaseException | str]) -> None:
        self.kind = kind
        self.failures: dict[Locator, BaseException | str] = dict(failures)
        super().__init__(self._format())

    def sorted_failures(self) -> list[tuple[Locator, str]]:
        return [(locator, str(self.failures[locator])) for locator in sorted(self.failures)]

    def _format(self) -> str:
        lines = [f"failed to resolve {len(self.failures)} {self.kind}(s):"]
        for _, message in self.sorted_failures():
            lines.append(indent(message, INDENT_SPACES))
        return "\n".join(lines)


def indent(text: str, spaces: int) -> str:
    prefix = " " * spaces
    return "\n".join(f"{prefix}{line}" if line else line for line in text.splitlines() or [""])
