from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from pluginharness.contracts import Locator, ResolvedPlugin
from pluginharness.errors import INDENT_SPACES, HarnessError

DIFFERENT_VERSION_REASON = "different version of the same plugin"
SHARED_CONFIG_REASON = (
    "plugins have the same product name and both use configuration "
    "(this is not currently supported)"
)
CONFLICTING_TASKS_PREFIX = "provides conflicting tasks: "


@dataclass(frozen=True, slots=True)
class ConflictReport:
    """Plugin locator -> conflicting plugin locator -> reason."""

    conflicts: Mapping[Locator, Mapping[Locator, str]] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return bool(self.conflicts)

    def __len__(self) -> int:
        return len(self.conflicts)

    def pairs(self) -> list[tuple[Locator, Locator]]:
        """Conflicting pairs with each unordered pair listed once, sorted."""
        found = {
            tuple(sorted((plugin, other)))
            for plugin, partners in self.conflicts.items()
            for other in partners
        }
        return sorted(found)

    def format(self) -> str:
        lines = [f"{len(self.conflicts)} plugins had compatibility issues:"]
        for plugin in sorted(self.conflicts):
            lines.append(f"{' ' * INDENT_SPACES}{plugin}:")
            partners = self.conflicts[plugin]
            for other in sorted(partners):
                lines.append(f"{' ' * (INDENT_SPACES * 2)}{other}: {partners[other]}")
        return "\n".join(lines)


class CompatibilityError(HarnessError):
    def __init__(self, report: ConflictReport) -> None:
        self.report = report
        super().__init__(report.format())


def find_conflicts(plugins: Mapping[Locator, ResolvedPlugin]) -> ConflictReport:
    """
    Check every ordered pair of resolved plugins for conflicts.

    Per pair the first matching rule wins: same group and product (another
    version of the same plugin), then same product name with both plugins
    using configuration, then overlapping task names.
    """
    conflicts: dict[Locator, dict[Locator, str]] = {}
    for plugin in sorted(plugins):
        plugin_conflicts = _find_plugin_conflicts(plugin, plugins)
        if plugin_conflicts:
            conflicts[plugin] = plugin_conflicts
    return ConflictReport(conflicts=conflicts)


def verify_plugin_compatibility(plugins: Mapping[Locator, ResolvedPlugin]) -> None:
    report = find_conflicts(plugins)
    if report:
        raise CompatibilityError(report)


def _find_plugin_conflicts(
    plugin: Locator, plugins: Mapping[Locator, ResolvedPlugin]
) -> dict[Locator, str]:
    info = plugins[plugin].info
    task_names = set(info.task_names())
    found: dict[Locator, str] = {}
    for other in sorted(plugins):
        if other == plugin:
            continue
        other_info = plugins[other].info

        if plugin.same_product(other):
            found[other] = DIFFERENT_VERSION_REASON
            continue

        if plugin.product == other.product and info.uses_config() and other_info.uses_config():
            # both would read <product> configuration from the same file
            found[other] = SHARED_CONFIG_REASON
            continue

        common = sorted(task_names.intersection(other_info.task_names()))
        if common:
            found[other] = CONFLICTING_TASKS_PREFIX + ", ".join(common)
    return found
