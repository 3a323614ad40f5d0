"""Тесты точки входа и полного прогона."""

from __future__ import annotations

import io
import json
import logging
import subprocess
from pathlib import Path
from typing import Any, List, Optional

import pytest
from requests.exceptions import ConnectionError as RequestsConnectionError
from requests.exceptions import ReadTimeout

from reclaimer.main import initialize_settings, initialize_workdir, run, setup_logging_from_settings
from reclaimer.runtime.client import DockerClientWrapper, probe_runtime
from reclaimer.utils.system_metrics import DiskSnapshot

DF_OUTPUT = (
    "Filesystem      Size  Used Avail Use% Mounted on\n"
    "/dev/sda1        50G   20G   30G  40% /\n"
)
ANNOUNCEMENTS = (
    "Removing stopped containers, unused networks, dangling images and build cache\n"
    "Removing Unused images\n"
    "Removed unused volume\n"
    "Checking memory now\n"
)


class RecordingRunner:
    def __init__(self, prune_code: int = 0, prune_output: str = "Total reclaimed space: 0B\n") -> None:
        self.prune_code = prune_code
        self.prune_output = prune_output
        self.commands: List[List[str]] = []

    def __call__(self, command: List[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        self.commands.append(command)
        if command[-1] == "-h":
            return subprocess.CompletedProcess(command, 0, stdout=DF_OUTPUT)
        return subprocess.CompletedProcess(command, self.prune_code, stdout=self.prune_output)


class SlowDockerClient:
    """Docker client, у которого ``docker system df`` не укладывается в таймаут."""

    def __init__(self) -> None:
        self.closed = False

        class API:
            def df(self) -> None:
                raise ReadTimeout("read timed out")

        self.api = API()

    def ping(self) -> bool:
        return True

    def close(self) -> None:
        self.closed = True


def fake_disk(path: str) -> DiskSnapshot:
    return DiskSnapshot(path=path, total=100, used=40, free=60, percent=40.0)


def flush_logs() -> None:
    for handler in logging.getLogger().handlers:
        handler.flush()


def test_initialize_workdir_creates_structure(tmp_path: Path) -> None:
    base = tmp_path / ".reclaimer"
    assert initialize_workdir(base)
    assert (base / "logs").is_dir()


def test_initialize_workdir_failure(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    assert initialize_workdir(blocker / "sub") is False


def test_initialize_settings_falls_back_to_defaults(tmp_path: Path) -> None:
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"reclaim": {"docker_binary": ""}}), encoding="utf-8")
    settings = initialize_settings(config)
    assert settings.get_group("reclaim").get("docker_binary") == "docker"


def test_setup_logging_disabled(tmp_path: Path) -> None:
    settings = initialize_settings(tmp_path / "config.json")
    settings.get_group("logging").set("enabled", False)
    setup_logging_from_settings(tmp_path, settings)
    assert logging.root.manager.disable >= logging.CRITICAL


def test_run_prints_announcements_and_disk_table(tmp_path: Path) -> None:
    runner = RecordingRunner()
    stream = io.StringIO()
    code = run(tmp_path, stream=stream, runner=runner, probe=lambda: None, disk_reader=fake_disk)

    assert code == 0
    assert stream.getvalue() == ANNOUNCEMENTS + DF_OUTPUT
    assert runner.commands == [
        ["docker", "system", "prune", "-a", "-f"],
        ["docker", "image", "prune", "-a", "-f"],
        ["docker", "volume", "prune", "-a", "-f"],
        ["df", "-h"],
    ]
    assert (tmp_path / "config.json").exists()


def test_run_with_unreachable_runtime_still_reports(tmp_path: Path) -> None:
    runner = RecordingRunner(
        prune_code=1,
        prune_output="Cannot connect to the Docker daemon at unix:///var/run/docker.sock\n",
    )
    stream = io.StringIO()
    code = run(tmp_path, stream=stream, runner=runner, probe=lambda: None, disk_reader=fake_disk)

    assert code == 0
    assert stream.getvalue() == ANNOUNCEMENTS + DF_OUTPUT
    flush_logs()
    log_text = (tmp_path / "logs" / "reclaimer.log").read_text(encoding="utf-8")
    assert "failed steps: system-prune, image-prune, volume-prune" in log_text


def test_run_uses_configured_binaries_and_timeout(tmp_path: Path) -> None:
    (tmp_path / "config.json").write_text(
        json.dumps(
            {
                "reclaim": {
                    "docker_binary": "/usr/bin/docker",
                    "timeout_seconds": 120,
                    "probe_runtime": False,
                }
            }
        ),
        encoding="utf-8",
    )
    timeouts: List[Any] = []
    runner = RecordingRunner()

    def timed_runner(command: List[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        timeouts.append(kwargs["timeout"])
        return runner(command, **kwargs)

    def probe() -> None:
        pytest.fail("probe must be skipped when disabled")

    run(tmp_path, stream=io.StringIO(), runner=timed_runner, probe=probe, disk_reader=fake_disk)
    assert runner.commands[0][0] == "/usr/bin/docker"
    assert timeouts == [120, 120, 120, 120]


def test_run_calls_probe_by_default(tmp_path: Path) -> None:
    probed: List[bool] = []

    def probe() -> None:
        probed.append(True)
        return None

    run(tmp_path, stream=io.StringIO(), runner=RecordingRunner(), probe=probe, disk_reader=fake_disk)
    assert probed == [True]


def test_run_survives_disk_reader_errors(tmp_path: Path) -> None:
    def broken_reader(path: str) -> DiskSnapshot:
        raise FileNotFoundError(path)

    stream = io.StringIO()
    code = run(
        tmp_path, stream=stream, runner=RecordingRunner(), probe=lambda: None, disk_reader=broken_reader
    )
    assert code == 0
    assert stream.getvalue().endswith(DF_OUTPUT)


def test_run_logs_reclaimed_space(tmp_path: Path) -> None:
    runner = RecordingRunner(prune_output="Total reclaimed space: 2GB\n")
    run(tmp_path, stream=io.StringIO(), runner=runner, probe=lambda: None, disk_reader=fake_disk)
    flush_logs()
    log_text = (tmp_path / "logs" / "reclaimer.log").read_text(encoding="utf-8")
    assert "Total reclaimed space: 5.6 GB" in log_text
    assert "Reclaim finished, exit code 0" in log_text


def test_run_survives_transport_errors_from_probe(tmp_path: Path) -> None:
    raw = SlowDockerClient()

    def factory(base_url: Optional[str]) -> DockerClientWrapper:
        return DockerClientWrapper(base_url, raw_client=raw)

    runner = RecordingRunner()
    stream = io.StringIO()
    code = run(
        tmp_path,
        stream=stream,
        runner=runner,
        probe=lambda: probe_runtime(client_factory=factory),
        disk_reader=fake_disk,
    )
    assert code == 0
    assert len(runner.commands) == 4
    assert stream.getvalue() == ANNOUNCEMENTS + DF_OUTPUT
    assert raw.closed is True


def test_run_survives_probe_raising_directly(tmp_path: Path) -> None:
    def probe() -> None:
        raise RequestsConnectionError("connection aborted")

    runner = RecordingRunner()
    stream = io.StringIO()
    run(tmp_path, stream=stream, runner=runner, probe=probe, disk_reader=fake_disk)

    assert len(runner.commands) == 4
    assert stream.getvalue() == ANNOUNCEMENTS + DF_OUTPUT
    flush_logs()
    log_text = (tmp_path / "logs" / "reclaimer.log").read_text(encoding="utf-8")
    assert "Runtime probe failed: connection aborted" in log_text


def test_fractional_backup_count_falls_back_to_defaults(tmp_path: Path) -> None:
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"logging": {"max_archived_files": 2.5}}), encoding="utf-8")
    settings = initialize_settings(config)
    assert settings.get_group("logging").get("max_archived_files") == 5
