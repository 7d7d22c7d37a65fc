import threading
import time

from pluginharness.contracts import PluginInfo
from pluginharness.runtime import exclusive_lock, run_task
from pluginharness.testkit import plugin_info_payload, plugin_script, write_executable


def test_exclusive_lock_creates_lock_file(tmp_path):
    lock_path = tmp_path / "nested" / "plugin-resolver.lock"

    with exclusive_lock(lock_path) as held:
        assert held == lock_path
        assert lock_path.read_bytes() == b"0"

    with exclusive_lock(lock_path):
        pass
    assert lock_path.read_bytes() == b"0"


def test_exclusive_lock_blocks_second_holder_until_release(tmp_path):
    lock_path = tmp_path / "plugin-resolver.lock"
    events = []
    entered = threading.Event()

    def second_holder():
        entered.wait()
        with exclusive_lock(lock_path):
            events.append("second")

    thread = threading.Thread(target=second_holder)
    thread.start()
    with exclusive_lock(lock_path):
        entered.set()
        time.sleep(0.1)
        events.append("first")
    thread.join()

    assert events == ["first", "second"]


def test_run_task_returns_exit_code_and_runs_in_project_dir(tmp_path):
    info = PluginInfo.model_validate(
        plugin_info_payload(
            "com.example:lic:1.0.0",
            tasks=[{"name": "where", "command": ["where"]}],
            global_flags={"project_dir_flag": "--project-dir"},
        )
    )
    plugin = write_executable(tmp_path / "plugin", '#!/bin/sh\npwd -P > "$3.out"\nexit 4\n')
    (task,) = info.build_tasks(plugin)
    project = tmp_path / "project"
    project.mkdir()

    exit_code = run_task(task, project_dir=project)

    assert exit_code == 4
    # argv is: plugin --project-dir <project> where
    assert (project / "where.out").read_text(encoding="utf-8").strip() == str(project.resolve())


def test_run_task_reports_launch_failure(tmp_path):
    info = PluginInfo.model_validate(plugin_info_payload("g:p:1", tasks=["x"]))
    (task,) = info.build_tasks(tmp_path / "missing")

    assert run_task(task) == 127


def test_run_task_passes_extra_args(tmp_path, capfd):
    info = PluginInfo.model_validate(plugin_info_payload("g:p:1", tasks=["echo"]))
    plugin = write_executable(tmp_path / "plugin", plugin_script(info.model_dump(mode="json")))
    (task,) = info.build_tasks(plugin)

    assert run_task(task, args=["a", "b"]) == 0
    assert capfd.readouterr().out.strip() == "ran: echo a b"
