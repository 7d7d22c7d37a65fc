import hashlib

import pytest

from pluginharness.contracts import ArtifactDeclaration, Locator, OSArch
from pluginharness.errors import ChecksumMismatchError, ResolutionError, ResolverError
from pluginharness.resolution import (
    TemplateResolver,
    download_artifact,
    resolve_artifact,
    resolve_assets,
)
from pluginharness.runtime import download_path
from pluginharness.testkit import InMemoryResolver, build_archive

LINUX = OSArch.parse("linux-amd64")
PLUGIN = Locator.parse("com.example:lic:1.0.0")
CONTENT = b"#!/bin/sh\necho plugin\n"


def test_resolve_artifact_downloads_and_unpacks(tmp_path):
    resolver = InMemoryResolver({PLUGIN: build_archive(CONTENT)})

    path = resolve_artifact(
        ArtifactDeclaration(PLUGIN), tmp_path / "plugins", tmp_path / "downloads", [resolver], LINUX
    )

    assert path == tmp_path / "plugins" / "com.example-lic-1.0.0"
    assert path.read_bytes() == CONTENT
    (call,) = resolver.calls
    assert call.dest == download_path(tmp_path / "downloads", PLUGIN, LINUX)
    assert call.dest.name == "com.example-lic-1.0.0-linux-amd64.tgz"


def test_resolve_artifact_skips_download_when_present(tmp_path):
    existing = tmp_path / "plugins" / "com.example-lic-1.0.0"
    existing.parent.mkdir()
    existing.write_bytes(CONTENT)
    resolver = InMemoryResolver()

    path = resolve_artifact(
        ArtifactDeclaration(PLUGIN), tmp_path / "plugins", tmp_path / "downloads", [resolver], LINUX
    )

    assert path == existing
    assert resolver.calls == []


def test_resolve_artifact_verifies_checksum_for_platform(tmp_path):
    resolver = InMemoryResolver({PLUGIN: build_archive(CONTENT)})
    declaration = ArtifactDeclaration(
        PLUGIN,
        checksums={
            "linux-amd64": hashlib.sha256(CONTENT).hexdigest(),
            "darwin-arm64": "0" * 64,
        },
    )

    path = resolve_artifact(
        declaration, tmp_path / "plugins", tmp_path / "downloads", [resolver], LINUX
    )

    assert path.read_bytes() == CONTENT


def test_checksum_mismatch_removes_freshly_unpacked_artifact(tmp_path):
    resolver = InMemoryResolver({PLUGIN: build_archive(CONTENT)})
    declaration = ArtifactDeclaration(PLUGIN, checksums={"linux-amd64": "0" * 64})

    with pytest.raises(ChecksumMismatchError):
        resolve_artifact(
            declaration, tmp_path / "plugins", tmp_path / "downloads", [resolver], LINUX
        )
    assert not (tmp_path / "plugins" / "com.example-lic-1.0.0").exists()


def test_checksum_mismatch_keeps_preexisting_artifact(tmp_path):
    existing = tmp_path / "plugins" / "com.example-lic-1.0.0"
    existing.parent.mkdir()
    existing.write_bytes(CONTENT)
    declaration = ArtifactDeclaration(PLUGIN, checksums={"linux-amd64": "0" * 64})

    with pytest.raises(ChecksumMismatchError):
        resolve_artifact(declaration, tmp_path / "plugins", tmp_path / "downloads", [], LINUX)
    assert existing.exists()


def test_default_resolvers_are_tried_in_order(tmp_path):
    empty = InMemoryResolver(name="empty")
    serving = InMemoryResolver({PLUGIN: b"archive"}, name="serving")
    unused = InMemoryResolver({PLUGIN: b"other"}, name="unused")

    used = download_artifact(
        ArtifactDeclaration(PLUGIN), tmp_path / "a.tgz", [empty, serving, unused], LINUX
    )

    assert used is serving
    assert [len(empty.calls), len(serving.calls), len(unused.calls)] == [1, 1, 0]
    assert (tmp_path / "a.tgz").read_bytes() == b"archive"


class _CrashingResolver:
    def resolve(self, locator, platform, dest):
        raise RuntimeError(f"cannot reach mirror for {locator}")

    def __repr__(self):
        return "crashing"


def test_unexpected_resolver_errors_fall_through_to_next_resolver(tmp_path):
    bad_port = TemplateResolver("http://repo.example.com:notaport/{product}.tgz")
    serving = InMemoryResolver({PLUGIN: b"archive"}, name="serving")

    resolvers = [bad_port, _CrashingResolver(), serving]

    used = download_artifact(ArtifactDeclaration(PLUGIN), tmp_path / "a.tgz", resolvers, LINUX)

    assert used is serving
    assert (tmp_path / "a.tgz").read_bytes() == b"archive"


def test_unexpected_resolver_errors_are_reported_when_all_fail(tmp_path):
    with pytest.raises(ResolverError) as excinfo:
        download_artifact(
            ArtifactDeclaration(PLUGIN), tmp_path / "a.tgz", [_CrashingResolver()], LINUX
        )

    assert str(excinfo.value).endswith(
        "    crashing: cannot reach mirror for com.example:lic:1.0.0"
    )


def test_custom_resolver_replaces_defaults(tmp_path):
    custom = InMemoryResolver(name="custom")
    default = InMemoryResolver({PLUGIN: b"archive"}, name="default")

    with pytest.raises(ResolverError) as excinfo:
        download_artifact(
            ArtifactDeclaration(PLUGIN, resolver=custom), tmp_path / "a.tgz", [default], LINUX
        )

    assert default.calls == []
    assert str(excinfo.value) == (
        "failed to resolve com.example:lic:1.0.0 for linux-amd64 from any of 1 resolver(s):\n"
        "    custom: custom has no artifact for com.example:lic:1.0.0"
    )


def test_download_without_resolvers_fails(tmp_path):
    with pytest.raises(ResolverError, match="no resolvers configured for com.example:lic:1.0.0"):
        download_artifact(ArtifactDeclaration(PLUGIN), tmp_path / "a.tgz", [], LINUX)


def test_resolve_assets_collects_every_failure(tmp_path):
    good = Locator.parse("com.example:asset-a:1.0.0")
    bad_b = Locator.parse("com.example:asset-b:1.0.0")
    bad_c = Locator.parse("com.example:asset-c:1.0.0")
    resolver = InMemoryResolver({good: build_archive(b"asset")})

    with pytest.raises(ResolutionError) as excinfo:
        resolve_assets(
            [ArtifactDeclaration(bad_c), ArtifactDeclaration(good), ArtifactDeclaration(bad_b)],
            tmp_path / "assets",
            tmp_path / "downloads",
            [resolver],
            LINUX,
        )

    error = excinfo.value
    assert error.kind == "asset"
    assert [locator for locator, _ in error.sorted_failures()] == [bad_b, bad_c]
    assert str(error).startswith("failed to resolve 2 asset(s):\n    failed to resolve")
    assert (tmp_path / "assets" / "com.example-asset-a-1.0.0").read_bytes() == b"asset"


def test_resolve_assets_returns_locators_in_declared_order(tmp_path):
    first = Locator.parse("z:asset:1")
    second = Locator.parse("a:asset:1")
    resolver = InMemoryResolver({first: build_archive(b"z"), second: build_archive(b"a")})

    resolved = resolve_assets(
        [ArtifactDeclaration(first), ArtifactDeclaration(second)],
        tmp_path / "assets",
        tmp_path / "downloads",
        [resolver],
        LINUX,
    )

    assert resolved == (first, second)
