"""
Contract Compiler
=================

Build Tool adapter: materializes a throwaway crate per call, runs the
configured toolchain and turns the result into a ``BuildOutcome``.

Success is decided by the presence of the expected ``.wasm`` artifact; a
toolchain that declares no artifact falls back to exit code zero. Each call
gets its own fresh workspace directory, so concurrent sessions and
consecutive attempts never see each other's files.
"""

import shutil
import tempfile
from pathlib import Path
from typing import Optional

from .diagnostics import DiagnosticsExtractor, describe_exit_code, get_extractor
from .executors import LocalExecutor
from .models import BuildArtifacts, BuildOutcome, ExecutionResult
from .project import generate_project_files, validate_label
from .toolchain_loader import ToolchainConfig, load_toolchain

OUTPUT_TAIL_LINES = 40


class ContractCompiler:
    """Compile generated contract code with a configured toolchain"""

    def __init__(
        self,
        toolchain: Optional[ToolchainConfig] = None,
        executor=None,
        workspace_root: str = "temp",
        extractor: Optional[DiagnosticsExtractor] = None,
        timeout: Optional[float] = None,
        keep_workspaces: bool = False,
        verbose: bool = False,
    ):
        self.toolchain = toolchain or load_toolchain("multiversx")
        self.executor = executor or LocalExecutor(verbose=verbose)
        self.workspace_root = Path(workspace_root)
        self.extractor = extractor or get_extractor(
            self.toolchain.extractor,
            self.toolchain.error_markers,
            self.toolchain.warning_markers,
        )
        self.timeout = timeout
        self.keep_workspaces = keep_workspaces
        self.verbose = verbose

    async def compile(self, source_text: str, project_label: str = "contract") -> BuildOutcome:
        validate_label(project_label)
        workspace = self.create_project(source_text, project_label)

        if self.verbose:
            print(f"  🔨 Building {project_label} in {workspace} ({self.toolchain.id})")

        result = await self.executor.execute(str(workspace), self.toolchain, self.timeout)
        outcome = self._to_outcome(result, workspace, project_label)

        # Successful workspaces hold the artifacts referenced by the outcome
        if not outcome.success and not self.keep_workspaces:
            self.cleanup(workspace)
            outcome.workspace = None

        return outcome

    def create_project(self, source_text: str, project_label: str) -> Path:
        """Write the crate into a fresh, uniquely named directory"""
        self.workspace_root.mkdir(parents=True, exist_ok=True)
        workspace = Path(tempfile.mkdtemp(prefix=f"{project_label}-", dir=self.workspace_root))
        for rel_path, content in generate_project_files(source_text, project_label).items():
            target = workspace / rel_path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf8")
        return workspace

    def cleanup(self, workspace: Path) -> None:
        try:
            shutil.rmtree(workspace)
        except OSError as e:
            print(f"  ⚠️  Error cleaning up workspace {workspace}: {e}")

    def _to_outcome(self, result: ExecutionResult, workspace: Path, project_label: str) -> BuildOutcome:
        output = result.output or ""

        if result.timed_out:
            message = f"Build timed out after {self.timeout}s"
            if output.strip():
                partial = self.extractor.extract(output).errors or self._output_tail(output)
                message = f"{message}. Output before the deadline:\n{partial}"
            return BuildOutcome(
                success=False,
                raw_output=output,
                error_text=message,
                exit_code=None,
                timed_out=True,
                workspace=str(workspace),
            )

        diagnostics = self.extractor.extract(output)
        artifacts = self._find_artifacts(workspace, project_label)

        if self.toolchain.has_artifact_convention:
            success = artifacts.wasm_path is not None
        else:
            success = result.exit_code == 0

        error_text = None
        if not success:
            error_text = diagnostics.errors or self._fallback_error_text(result)

        return BuildOutcome(
            success=success,
            raw_output=output,
            error_text=error_text,
            warning_text=diagnostics.warnings,
            artifacts=artifacts if success else None,
            exit_code=result.exit_code,
            diagnostics=diagnostics.items,
            workspace=str(workspace),
        )

    def _find_artifacts(self, workspace: Path, project_label: str) -> BuildArtifacts:
        artifacts = BuildArtifacts()
        wasm = self.toolchain.artifact_path(self.toolchain.wasm_artifact, project_label)
        abi = self.toolchain.artifact_path(self.toolchain.abi_artifact, project_label)
        if wasm and (workspace / wasm).exists():
            artifacts.wasm_path = str(workspace / wasm)
        if abi and (workspace / abi).exists():
            artifacts.abi_path = str(workspace / abi)
        return artifacts

    @staticmethod
    def _output_tail(output: str) -> str:
        return "\n".join(output.rstrip().splitlines()[-OUTPUT_TAIL_LINES:])

    @classmethod
    def _fallback_error_text(cls, result: ExecutionResult) -> Optional[str]:
        """Last lines of output when no error marker was recognized"""
        tail = cls._output_tail(result.output or "")
        reason = describe_exit_code(result.exit_code) or "MISSING_ARTIFACT"
        if not tail:
            return f"Build failed ({reason}) with no output"
        return f"Build failed ({reason}):\n{tail}"
