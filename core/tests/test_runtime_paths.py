from pluginharness.contracts import Locator, OSArch
from pluginharness.runtime import (
    artifact_path,
    download_path,
    resolve_home_dir,
    resolve_resource_dirs,
)


def test_resolve_home_dir_uses_env_var(tmp_path, monkeypatch):
    env_root = tmp_path / "custom_home"
    monkeypatch.setenv("PLUGIN_HARNESS_HOME", str(env_root))

    home = resolve_home_dir()

    assert home == env_root
    assert home.exists()


def test_resolve_home_dir_uses_user_home_when_env_unset(tmp_path, monkeypatch):
    monkeypatch.delenv("PLUGIN_HARNESS_HOME", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))

    home = resolve_home_dir()

    assert home == tmp_path / ".plugin-harness"
    assert home.exists()


def test_resolve_home_dir_falls_back_when_env_invalid(tmp_path, monkeypatch):
    invalid_root = tmp_path / "not_a_dir"
    invalid_root.write_text("nope", encoding="utf-8")
    monkeypatch.setenv("PLUGIN_HARNESS_HOME", str(invalid_root))
    monkeypatch.setenv("HOME", str(tmp_path))

    home = resolve_home_dir()

    assert home == tmp_path / ".plugin-harness"


def test_resolve_resource_dirs_creates_layout(tmp_path):
    dirs = resolve_resource_dirs(tmp_path)

    assert dirs.plugins == tmp_path / "plugins"
    assert dirs.assets == tmp_path / "assets"
    assert dirs.downloads == tmp_path / "downloads"
    assert dirs.cache == tmp_path / "cache"
    assert all(path.is_dir() for path in (dirs.plugins, dirs.assets, dirs.downloads, dirs.cache))


def test_artifact_and_download_paths(tmp_path):
    locator = Locator.parse("com.example:lic:1.0.0")

    assert artifact_path(tmp_path, locator) == tmp_path / "com.example-lic-1.0.0"
    assert download_path(tmp_path, locator, OSArch.parse("darwin-arm64")) == (
        tmp_path / "com.example-lic-1.0.0-darwin-arm64.tgz"
    )
