"""
Contract compiler tests with a scripted executor (no cargo/mxpy needed)
"""

from pathlib import Path

import pytest

from build_tool import ContractCompiler, generate_project_files, load_toolchain
from build_tool.models import ExecutionResult
from conftest import VALID_CODE

BUILD_ERRORS = """error[E0412]: cannot find type `BigUnit` in this scope
 --> src/lib.rs:9:30

error: could not compile `contract`
"""


class ScriptedExecutor:
    """Writes the wasm artifact when told to and returns a fixed result"""

    def __init__(self, result: ExecutionResult, produce_wasm: bool = False):
        self.result = result
        self.produce_wasm = produce_wasm
        self.workspaces = []

    async def execute(self, workspace, toolchain, timeout=None):
        self.workspaces.append(Path(workspace))
        assert (Path(workspace) / "src" / "lib.rs").exists()
        if self.produce_wasm:
            output = Path(workspace) / "output"
            output.mkdir()
            (output / "contract.wasm").write_bytes(b"\x00asm")
            (output / "contract.abi.json").write_text("{}")
        return self.result


def make_compiler(tmp_path, executor, toolchain="multiversx", **kwargs):
    return ContractCompiler(
        toolchain=load_toolchain(toolchain),
        executor=executor,
        workspace_root=str(tmp_path),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_success_is_decided_by_wasm_artifact(tmp_path):
    # Non-zero exit code but the artifact exists
    executor = ScriptedExecutor(ExecutionResult(exit_code=1, output="warning: unused\n"), produce_wasm=True)

    outcome = await make_compiler(tmp_path, executor).compile(VALID_CODE, "contract")

    assert outcome.success is True
    assert outcome.error_text is None
    assert outcome.warning_text == "warning: unused"
    assert outcome.artifacts.wasm_path.endswith("output/contract.wasm")
    assert outcome.artifacts.abi_path.endswith("output/contract.abi.json")
    assert Path(outcome.workspace).exists()


@pytest.mark.asyncio
async def test_missing_artifact_fails_even_with_zero_exit(tmp_path):
    executor = ScriptedExecutor(ExecutionResult(exit_code=0, output=BUILD_ERRORS))

    outcome = await make_compiler(tmp_path, executor).compile(VALID_CODE, "contract")

    assert outcome.success is False
    assert outcome.error_text.startswith("error[E0412]")
    assert outcome.diagnostics[0].code == "E0412"
    assert outcome.artifacts is None


@pytest.mark.asyncio
async def test_failed_workspace_is_removed(tmp_path):
    executor = ScriptedExecutor(ExecutionResult(exit_code=101, output=BUILD_ERRORS))

    outcome = await make_compiler(tmp_path, executor).compile(VALID_CODE, "contract")

    assert outcome.workspace is None
    assert not executor.workspaces[0].exists()


@pytest.mark.asyncio
async def test_keep_workspaces(tmp_path):
    executor = ScriptedExecutor(ExecutionResult(exit_code=101, output=BUILD_ERRORS))

    outcome = await make_compiler(tmp_path, executor, keep_workspaces=True).compile(VALID_CODE, "contract")

    assert outcome.workspace is not None
    assert executor.workspaces[0].exists()


@pytest.mark.asyncio
async def test_every_call_gets_a_fresh_workspace(tmp_path):
    executor = ScriptedExecutor(ExecutionResult(exit_code=0, output=""), produce_wasm=True)
    compiler = make_compiler(tmp_path, executor)

    await compiler.compile(VALID_CODE, "contract")
    await compiler.compile(VALID_CODE, "contract")

    first, second = executor.workspaces
    assert first != second
    expected = generate_project_files(VALID_CODE, "contract")
    for rel_path, content in expected.items():
        assert (second / rel_path).read_text() == content


@pytest.mark.asyncio
async def test_timeout_is_reported_as_failed_build(tmp_path):
    executor = ScriptedExecutor(ExecutionResult(exit_code=None, output="", timed_out=True))

    outcome = await make_compiler(tmp_path, executor, timeout=5).compile(VALID_CODE, "contract")

    assert outcome.success is False
    assert outcome.timed_out is True
    assert outcome.error_text == "Build timed out after 5s"


@pytest.mark.asyncio
async def test_timeout_keeps_output_produced_before_the_deadline(tmp_path):
    output = "   Compiling counter v0.0.0\n" + BUILD_ERRORS
    executor = ScriptedExecutor(ExecutionResult(exit_code=None, output=output, timed_out=True))

    outcome = await make_compiler(tmp_path, executor, timeout=5).compile(VALID_CODE, "contract")

    assert outcome.timed_out is True
    assert outcome.raw_output == output
    assert outcome.error_text.startswith("Build timed out after 5s. Output before the deadline:")
    assert "error[E0412]: cannot find type `BigUnit`" in outcome.error_text


@pytest.mark.asyncio
async def test_timeout_without_error_markers_reports_output_tail(tmp_path):
    executor = ScriptedExecutor(ExecutionResult(exit_code=None, output="   Compiling serde v1.0\n", timed_out=True))

    outcome = await make_compiler(tmp_path, executor, timeout=5).compile(VALID_CODE, "contract")

    assert outcome.error_text.endswith("Compiling serde v1.0")


@pytest.mark.asyncio
async def test_unrecognized_failure_falls_back_to_output_tail(tmp_path):
    output = "\n".join(f"line {i}" for i in range(100))
    executor = ScriptedExecutor(ExecutionResult(exit_code=2, output=output))

    outcome = await make_compiler(tmp_path, executor).compile(VALID_CODE, "contract")

    assert outcome.error_text.startswith("Build failed (EXIT_CODE_2):")
    assert "line 99" in outcome.error_text
    assert "line 10\n" not in outcome.error_text


@pytest.mark.asyncio
async def test_toolchain_without_artifacts_uses_exit_code(tmp_path):
    ok = ScriptedExecutor(ExecutionResult(exit_code=0, output=""))
    failed = ScriptedExecutor(ExecutionResult(exit_code=101, output=""))

    assert (await make_compiler(tmp_path, ok, "multiversx-check").compile(VALID_CODE)).success is True
    outcome = await make_compiler(tmp_path, failed, "multiversx-check").compile(VALID_CODE)
    assert outcome.success is False
    assert outcome.error_text == "Build failed (EXIT_CODE_101) with no output"


@pytest.mark.asyncio
async def test_invalid_label_is_rejected(tmp_path):
    executor = ScriptedExecutor(ExecutionResult(exit_code=0, output=""))

    with pytest.raises(ValueError):
        await make_compiler(tmp_path, executor).compile(VALID_CODE, "../escape")
    assert executor.workspaces == []
