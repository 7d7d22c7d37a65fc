from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from pluginharness.contracts import ArtifactDeclaration, Locator, OSArch, Resolver
from pluginharness.errors import ChecksumMismatchError, ResolutionError, ResolverError, indent
from pluginharness.resolution.archive import unpack_single_file, verify_checksum
from pluginharness.runtime.paths import artifact_path, download_path

_LOGGER = logging.getLogger("plugin_harness.resolution")


def resolve_artifact(
    declaration: ArtifactDeclaration,
    dest_dir: Path,
    downloads_dir: Path,
    default_resolvers: Sequence[Resolver],
    platform: OSArch,
) -> Path:
    """
    Make the artifact for `declaration` available in `dest_dir` and return its path.

    An artifact that already exists locally is not downloaded again. When the
    declaration carries a checksum for `platform` it is verified either way.
    """
    dest = artifact_path(dest_dir, declaration.locator)
    unpacked = False
    if not dest.exists():
        archive = download_path(downloads_dir, declaration.locator, platform)
        download_artifact(declaration, archive, default_resolvers, platform)
        unpack_single_file(archive, dest)
        unpacked = True

    expected = declaration.checksum_for(platform)
    if expected:
        try:
            verify_checksum(dest, expected)
        except ChecksumMismatchError:
            if unpacked:
                dest.unlink(missing_ok=True)
            raise
    return dest


def download_artifact(
    declaration: ArtifactDeclaration,
    archive: Path,
    default_resolvers: Sequence[Resolver],
    platform: OSArch,
) -> Resolver:
    """
    Fetch the archive for `declaration` into `archive`.

    The declaration's own resolver is the only candidate when it has one;
    otherwise the default resolvers are tried in order until one succeeds.
    Returns the resolver that supplied the archive.
    """
    if declaration.resolver is not None:
        candidates: list[Resolver] = [declaration.resolver]
    else:
        candidates = list(default_resolvers)
    if not candidates:
        raise ResolverError(f"no resolvers configured for {declaration.locator}")

    attempts: list[str] = []
    for resolver in candidates:
        try:
            resolver.resolve(declaration.locator, platform, archive)
        except Exception as exc:
            _LOGGER.debug("Resolver %s failed for %s: %s", resolver, declaration.locator, exc)
            attempts.append(f"{resolver}: {exc}")
            continue
        _LOGGER.info("Resolved %s using %s", declaration.locator, resolver)
        return resolver

    details = "\n".join(indent(attempt, 4) for attempt in attempts)
    raise ResolverError(
        f"failed to resolve {declaration.locator} for {platform} from any of "
        f"{len(candidates)} resolver(s):\n{details}"
    )


def resolve_assets(
    assets: Sequence[ArtifactDeclaration],
    assets_dir: Path,
    downloads_dir: Path,
    default_resolvers: Sequence[Resolver],
    platform: OSArch,
) -> tuple[Locator, ...]:
    """Resolve every asset; failures are collected and raised together."""
    resolved: list[Locator] = []
    failures: dict[Locator, Exception] = {}
    for asset in assets:
        try:
            resolve_artifact(asset, assets_dir, downloads_dir, default_resolvers, platform)
        except Exception as exc:
            failures[asset.locator] = exc
            continue
        resolved.append(asset.locator)

    if failures:
        raise ResolutionError("asset", failures)
    return tuple(resolved)
