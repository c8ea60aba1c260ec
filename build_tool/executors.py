"""
Build Executors
===============

Run a toolchain's build command inside a prepared workspace, either directly
on the host (``LocalExecutor``) or in a throwaway Docker container
(``DockerExecutor``). Both return the interleaved stdout+stderr and the exit
code; ``exit_code=None`` together with ``timed_out=True`` means the build
hit its deadline.
"""

import asyncio
import os
import signal
from typing import List, Optional

import docker
import docker.errors
import requests

from .models import ExecutionResult
from .toolchain_loader import ToolchainConfig

KILL_WAIT_SECONDS = 5


class LocalExecutor:
    """Execute the build command as a host subprocess"""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    async def execute(
        self,
        workspace: str,
        toolchain: ToolchainConfig,
        timeout: Optional[float] = None,
    ) -> ExecutionResult:
        env = dict(os.environ)
        env.update(toolchain.environment)

        if self.verbose:
            print(f"    [DEBUG] Running '{toolchain.command}' in {workspace}")

        # Own process group, so cargo/rustc children die with the shell
        proc = await asyncio.create_subprocess_shell(
            toolchain.command,
            cwd=workspace,
            env=env,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
            start_new_session=True,
        )
        chunks: List[bytes] = []

        async def run() -> int:
            while True:
                chunk = await proc.stdout.read(65536)
                if not chunk:
                    break
                chunks.append(chunk)
            return await proc.wait()

        exit_code = None
        timed_out = False
        try:
            exit_code = await asyncio.wait_for(run(), timeout=timeout)
        except asyncio.TimeoutError:
            timed_out = True
        finally:
            # Deadline hit or caller cancelled: nothing of the build may survive
            if proc.returncode is None or timed_out:
                await self._terminate(proc)

        output = b"".join(chunks).decode("utf8", errors="replace")
        if timed_out and self.verbose:
            print(f"    [DEBUG] Build killed after {timeout}s deadline")
        return ExecutionResult(exit_code=exit_code, output=output, timed_out=timed_out)

    @staticmethod
    async def _terminate(proc: asyncio.subprocess.Process) -> None:
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass  # group already gone
        try:
            await asyncio.wait_for(proc.wait(), timeout=KILL_WAIT_SECONDS)
        except asyncio.TimeoutError:
            print(f"  ⚠️  Build process {proc.pid} did not exit after SIGKILL")


class DockerExecutor:
    """Execute the build command in a Docker container"""

    def __init__(self, verbose: bool = False, client=None):
        self.verbose = verbose
        try:
            self._client = client or docker.from_env()
            self._client.info()  # Test connection
        except docker.errors.DockerException as e:
            raise RuntimeError(f"Docker not available: {e}. Is Docker installed and running?")

    async def execute(
        self,
        workspace: str,
        toolchain: ToolchainConfig,
        timeout: Optional[float] = None,
    ) -> ExecutionResult:
        return await asyncio.to_thread(self._run, workspace, toolchain, timeout)

    def _run(
        self,
        workspace: str,
        toolchain: ToolchainConfig,
        timeout: Optional[float],
    ) -> ExecutionResult:
        image = toolchain.image
        if not image:
            raise ValueError(f"Toolchain {toolchain.id} has no Docker image specified")

        self._ensure_image(image)

        docker_args = {
            "image": image,
            "volumes": {os.path.abspath(workspace): {"bind": toolchain.workdir, "mode": "rw"}},
            "command": ["/bin/sh", "-c", toolchain.command],
            "detach": True,
            "working_dir": toolchain.workdir,
            "environment": toolchain.environment,
            "network_mode": "bridge",
        }

        if self.verbose:
            print(f"    [DEBUG] docker run {image}: {toolchain.command}")

        container = None
        exit_code = None
        timed_out = False
        try:
            container = self._client.containers.run(**docker_args)
            try:
                result = container.wait(timeout=timeout)
                exit_code = result["StatusCode"]
            except (requests.exceptions.ReadTimeout, requests.exceptions.ConnectionError):
                timed_out = True
                try:
                    container.stop(timeout=10)
                except docker.errors.APIError:
                    pass

            logs = container.logs(stdout=True, stderr=True)
            output = logs.decode("utf8", errors="replace") if logs else ""
        finally:
            if container is not None:
                try:
                    container.remove(force=True)
                except docker.errors.APIError as e:
                    print(f"  ⚠️  Failed to remove build container: {e}")

        return ExecutionResult(exit_code=exit_code, output=output, timed_out=timed_out)

    def _ensure_image(self, image: str) -> None:
        """Ensure Docker image is available"""
        try:
            if not self._client.images.list(image):
                print(f"  📦 Pulling Docker image: {image}")
                self._client.images.pull(image)
        except docker.errors.APIError as e:
            raise RuntimeError(f"Failed to load Docker image {image}: {e}")


def create_executor(kind: str, verbose: bool = False):
    """Executor by name: 'local' or 'docker'"""
    if kind == "local":
        return LocalExecutor(verbose=verbose)
    if kind == "docker":
        return DockerExecutor(verbose=verbose)
    raise ValueError(f"Unknown build executor '{kind}' (expected 'local' or 'docker')")
