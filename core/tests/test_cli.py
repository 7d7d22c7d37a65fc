import pytest

from pluginharness.cli import main
from pluginharness.testkit import build_archive, plugin_info_payload, plugin_script

PLATFORM = "linux-amd64"


@pytest.fixture
def workspace(tmp_path):
    mirror = tmp_path / "mirror"
    mirror.mkdir()
    payload = plugin_info_payload(
        "com.example:lic:1.0.0",
        tasks=[
            {"name": "license", "description": "Apply license headers", "command": ["license"]},
            {
                "name": "verify-license",
                "command": ["license"],
                "verify": {"apply_false_args": ["--verify"]},
            },
        ],
        config_file_name="license.yml",
        upgrade_config={},
    )
    script = plugin_script(payload, upgrade_sed="s/^header:/license-header:/")
    (mirror / f"lic-1.0.0-{PLATFORM}.tgz").write_bytes(build_archive(script.encode("utf-8")))

    config = tmp_path / "godel" / "config" / "plugins.yml"
    config.parent.mkdir(parents=True)
    config.write_text(
        "resolvers:\n"
        f'  - "{mirror}/{{product}}-{{version}}-{{os}}-{{arch}}.tgz"\n'
        "plugins:\n"
        '  - locator: {id: "com.example:lic:1.0.0"}\n',
        encoding="utf-8",
    )
    return tmp_path, config


def _main(workspace, *args):
    root, config = workspace
    return main(
        [
            "--config",
            str(config),
            "--home",
            str(root / "home"),
            "--platform",
            PLATFORM,
            "--project-dir",
            str(root),
            *args,
        ]
    )


def test_tasks_lists_tasks_with_owning_plugin(workspace, capfd):
    assert _main(workspace, "tasks") == 0

    assert capfd.readouterr().out.splitlines() == [
        "license (com.example:lic:1.0.0): Apply license headers",
        "verify-license (com.example:lic:1.0.0)",
    ]


def test_run_executes_task_with_extra_args(workspace, capfd):
    assert _main(workspace, "run", "license", "--dry-run", "x") == 0

    assert capfd.readouterr().out.strip() == "ran: license --dry-run x"


def test_run_unknown_task_fails(workspace, capfd):
    assert _main(workspace, "run", "missing") == 1

    assert "unknown task 'missing'" in capfd.readouterr().err


def test_verify_runs_verify_tasks_in_check_mode(workspace, capfd):
    assert _main(workspace, "verify") == 0

    assert capfd.readouterr().out.strip() == "ran: license --verify"


def test_upgrade_config_rewrites_plugin_config(workspace, capfd):
    root, config = workspace
    license_config = config.parent / "license.yml"
    license_config.write_text("header: Copyright\n", encoding="utf-8")

    assert _main(workspace, "upgrade-config") == 0

    assert license_config.read_text(encoding="utf-8") == "license-header: Copyright\n"
    assert "Upgraded configuration for license.yml" in capfd.readouterr().out


def test_resolution_errors_exit_non_zero(tmp_path, capfd):
    config = tmp_path / "plugins.yml"
    config.write_text(
        f'resolvers: ["{tmp_path}/{{product}}.tgz"]\n'
        'plugins: [{locator: {id: "com.example:missing:1.0.0"}}]\n',
        encoding="utf-8",
    )

    exit_code = main(
        ["--config", str(config), "--home", str(tmp_path / "home"), "--platform", PLATFORM, "tasks"]
    )

    assert exit_code == 1
    assert "failed to resolve 1 plugin(s):" in capfd.readouterr().err


def test_invalid_config_exits_non_zero(tmp_path, capfd):
    config = tmp_path / "plugins.yml"
    config.write_text("plugins: [{locator: {id: broken}}]\n", encoding="utf-8")

    assert main(["--config", str(config), "--home", str(tmp_path / "home"), "tasks"]) == 1
    assert "plugins.plugins.0.locator.id" in capfd.readouterr().err
