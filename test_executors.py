"""
Executor tests: LocalExecutor runs real shell commands, DockerExecutor talks
to a mocked Docker client.
"""

import asyncio
import os
import sys
import time
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

from build_tool import DockerExecutor, LocalExecutor
from build_tool.toolchain_loader import ToolchainConfig

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell")


def shell_toolchain(command, environment=None):
    build = {"command": command}
    if environment:
        build["environment"] = environment
    return ToolchainConfig("local", {"build": build})


def process_gone(pid: int) -> bool:
    """True once the pid no longer exists or is only a zombie"""
    try:
        stat = Path(f"/proc/{pid}/stat").read_text()
    except (FileNotFoundError, ProcessLookupError):
        return True
    return stat.rsplit(")", 1)[1].split()[0] == "Z"


@posix_only
@pytest.mark.asyncio
async def test_local_build_collects_output_and_exit_code(tmp_path):
    (tmp_path / "Cargo.toml").write_text("[package]\n")

    result = await LocalExecutor().execute(str(tmp_path), shell_toolchain("echo hello; ls; echo oops >&2"), timeout=10)

    assert result.exit_code == 0
    assert result.timed_out is False
    assert "hello" in result.output
    assert "Cargo.toml" in result.output
    assert "oops" in result.output


@posix_only
@pytest.mark.asyncio
async def test_local_build_reports_non_zero_exit(tmp_path):
    result = await LocalExecutor().execute(str(tmp_path), shell_toolchain("echo 'error: bad'; exit 3"), timeout=10)

    assert result.exit_code == 3
    assert result.timed_out is False
    assert "error: bad" in result.output


@posix_only
@pytest.mark.asyncio
async def test_local_build_passes_toolchain_environment(tmp_path):
    toolchain = shell_toolchain("echo marker=$BUILD_MARKER", environment={"BUILD_MARKER": "xyz"})

    result = await LocalExecutor().execute(str(tmp_path), toolchain, timeout=10)

    assert "marker=xyz" in result.output


@posix_only
@pytest.mark.asyncio
async def test_local_deadline_kills_child_processes(tmp_path):
    toolchain = shell_toolchain("echo started; sh -c 'echo $$ > child.pid; sleep 20'; true")

    started = time.monotonic()
    result = await LocalExecutor().execute(str(tmp_path), toolchain, timeout=1)
    elapsed = time.monotonic() - started

    assert elapsed < 10
    assert result.timed_out is True
    assert result.exit_code is None
    assert "started" in result.output

    if os.path.isdir("/proc"):
        pid = int((tmp_path / "child.pid").read_text())
        for _ in range(40):
            if process_gone(pid):
                break
            await asyncio.sleep(0.05)
        assert process_gone(pid)


@posix_only
@pytest.mark.skipif(not os.path.isdir("/proc"), reason="needs /proc")
@pytest.mark.asyncio
async def test_cancelled_build_does_not_outlive_the_caller(tmp_path):
    pid_file = tmp_path / "child.pid"
    toolchain = shell_toolchain("sh -c 'echo $$ > child.pid; exec sleep 30'")

    task = asyncio.create_task(LocalExecutor().execute(str(tmp_path), toolchain, timeout=60))
    for _ in range(100):
        if pid_file.exists() and pid_file.read_text().strip():
            break
        await asyncio.sleep(0.05)
    pid = int(pid_file.read_text())

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    for _ in range(40):
        if process_gone(pid):
            break
        await asyncio.sleep(0.05)
    assert process_gone(pid)


def docker_toolchain():
    return ToolchainConfig("docker", {"image": "multiversx/sdk-rust:v1", "build": {"command": "sc-meta all build"}})


def docker_client(container):
    client = MagicMock()
    client.images.list.return_value = ["multiversx/sdk-rust:v1"]
    client.containers.run.return_value = container
    return client


@pytest.mark.asyncio
async def test_docker_build_runs_command_in_mounted_workspace(tmp_path):
    container = MagicMock()
    container.wait.return_value = {"StatusCode": 0}
    container.logs.return_value = b"Finished release"
    client = docker_client(container)

    result = await DockerExecutor(client=client).execute(str(tmp_path), docker_toolchain(), timeout=30)

    assert result.exit_code == 0
    assert result.output == "Finished release"
    kwargs = client.containers.run.call_args.kwargs
    assert kwargs["command"] == ["/bin/sh", "-c", "sc-meta all build"]
    assert kwargs["volumes"] == {os.path.abspath(str(tmp_path)): {"bind": "/project", "mode": "rw"}}
    client.images.pull.assert_not_called()
    container.remove.assert_called_once_with(force=True)


@pytest.mark.asyncio
async def test_docker_deadline_stops_container_and_keeps_logs(tmp_path):
    container = MagicMock()
    container.wait.side_effect = requests.exceptions.ReadTimeout("timed out")
    container.logs.return_value = b"   Compiling multiversx-sc\n"
    client = docker_client(container)

    result = await DockerExecutor(client=client).execute(str(tmp_path), docker_toolchain(), timeout=1)

    assert result.timed_out is True
    assert result.exit_code is None
    assert "Compiling multiversx-sc" in result.output
    container.stop.assert_called_once()
    container.remove.assert_called_once_with(force=True)


@pytest.mark.asyncio
async def test_docker_toolchain_without_image_is_rejected(tmp_path):
    executor = DockerExecutor(client=docker_client(MagicMock()))

    with pytest.raises(ValueError):
        await executor.execute(str(tmp_path), shell_toolchain("make"), timeout=1)
