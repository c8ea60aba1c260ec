"""
Generation Pipeline
===================

Runs one generation session end to end:

    [1] generate contract code (real model or mock)
    [2] emit the project files
    [3] compile + self-heal (skipped in skip-compile mode)
    [4] generate integration tests (optional, best effort)
    [5] store the accepted code in the artifact store
    [6] report the outcome

Expected failures (generation, exhausted healing, storage) are turned into
exactly one terminal event on the progress stream and a failed
``SessionOutcome``. Anything else propagates to the caller.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol

from build_tool.project import generate_project_files

from .errors import GenerationError, StorageError
from .loop import ContractBuilder, HealingLoop
from .models import HealResult, LoopState
from .stream import ProgressStream, SessionProgress


class CodeGenerator(Protocol):
    async def generate(
        self, description: str, category: str, progress: Optional[SessionProgress] = None
    ) -> str:
        ...

    async def fix(self, source_text: str, error_text: str, attempt_number: int) -> str:
        ...

    async def generate_tests(self, source_text: str) -> str:
        ...


class ArtifactStore(Protocol):
    async def put(self, content: str, metadata: Dict[str, Any]) -> str:
        ...

    async def get(self, identifier: str) -> str:
        ...


@dataclass
class GenerationRequest:
    """Input of one generation session"""
    session_id: str
    description: str
    category: str
    creator: str = "user"

    def validate(self) -> None:
        for name in ("session_id", "description", "category"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"'{name}' must be a non-empty string")


@dataclass
class SessionOutcome:
    """Final, persisted-side-effect view of a session"""
    session_id: str
    success: bool
    cid: Optional[str] = None
    heal_result: Optional[HealResult] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "success": self.success,
            "cid": self.cid,
            "error": self.error,
            "errorCode": self.error_code,
            "attempts": self.heal_result.attempts_used if self.heal_result else 0,
        }


class GenerationPipeline:
    """Generate, heal and store one contract per session"""

    TESTS_PATH = "tests/integration_test.rs"

    def __init__(
        self,
        generator: CodeGenerator,
        compiler: ContractBuilder,
        store: ArtifactStore,
        stream: ProgressStream,
        max_attempts: int = HealingLoop.DEFAULT_MAX_ATTEMPTS,
        skip_compile: bool = False,
        generate_tests: bool = True,
        project_label: str = "contract",
        verbose: bool = False,
    ):
        self.generator = generator
        self.store = store
        self.stream = stream
        self.skip_compile = skip_compile
        self.generate_tests = generate_tests
        self.project_label = project_label
        self.verbose = verbose
        self.loop = HealingLoop(
            compiler=compiler,
            fixer=generator,
            stream=stream,
            max_attempts=max_attempts,
            verbose=verbose,
        )

    async def run(self, request: GenerationRequest) -> SessionOutcome:
        request.validate()
        sid = request.session_id
        progress = self.stream.session(sid)

        # [1] Generation: failures here end the session immediately
        try:
            code = await self.generator.generate(request.description, request.category, progress)
        except GenerationError as e:
            progress.terminal(f"✗ Code generation failed: {e}\n", is_error=True)
            progress.error(str(e), e.error_code)
            return SessionOutcome(sid, False, error=str(e), error_code=e.error_code)

        progress.terminal(f"Generated {len(code.splitlines())} lines of code\n")

        # [2] Project files
        progress.status("Creating project structure...", 40)
        progress.terminal("\n> Creating project files...\n")
        for path, content in generate_project_files(code, self.project_label).items():
            progress.file(path, content)
            progress.terminal(f"  Created {path}\n")

        # [3] Compile + heal
        if self.skip_compile:
            progress.status("Skipping compilation", 80)
            progress.terminal("\nSkip-compile mode: storing generated code as-is\n")
            heal = HealResult(
                success=True,
                final_source=code,
                attempts_used=0,
                state=LoopState.SUCCEEDED,
            )
        else:
            progress.status("Compiling contract...", 50)
            heal = await self.loop.run(sid, code, self.project_label)
            if not heal.success:
                message = f"Failed to compile after {heal.attempts_used} attempts"
                progress.status("Compilation failed", 100)
                payload = {
                    "success": False,
                    "error": message,
                    "errors": heal.last_error_text,
                    "code": heal.final_source,
                    "attempts": heal.attempts_used,
                }
                progress.complete(payload)
                return SessionOutcome(
                    sid, False, heal_result=heal, error=message,
                    error_code="compile_failed", payload=payload,
                )

            # [4] Tests
            if self.generate_tests:
                await self._generate_tests(progress, heal.final_source)

        # [5] Storage: the session is not done until the code is stored
        progress.status("Uploading to IPFS...", 85)
        progress.terminal("\n> Uploading code to IPFS...\n")
        metadata = {
            "generationId": int(time.time() * 1000),
            "description": request.description,
            "category": request.category,
            "creator": request.creator,
        }
        try:
            cid = await self.store.put(heal.final_source, metadata)
        except StorageError as e:
            progress.terminal(f"✗ Upload failed: {e}\n", is_error=True)
            progress.error(f"Artifact upload failed: {e}", e.error_code)
            return SessionOutcome(
                sid, False, heal_result=heal, error=str(e), error_code=e.error_code
            )
        progress.terminal(f"✓ Uploaded to IPFS: {cid}\n")

        # [6] Done
        payload = {
            "success": True,
            "code": heal.final_source,
            "wasmPath": heal.artifacts.wasm_path if heal.artifacts else None,
            "abiPath": heal.artifacts.abi_path if heal.artifacts else None,
            "cid": cid,
            "ipfsHash": cid,
            "attempts": heal.attempts_used,
        }
        progress.status("Ready to deploy!", 100)
        progress.terminal("\n✓ Contract ready for deployment!\n")
        progress.complete(payload)
        if self.verbose:
            print(f"  ✓ [{sid}] Session complete: {cid}")
        return SessionOutcome(sid, True, cid=cid, heal_result=heal, payload=payload)

    async def _generate_tests(self, progress: SessionProgress, code: str) -> None:
        progress.status("Generating tests...", 70)
        progress.terminal("\n> Generating integration tests...\n")
        try:
            tests = await self.generator.generate_tests(code)
        except GenerationError as e:
            progress.terminal(f"⚠ Test generation failed (optional): {e}\n")
            return
        progress.file(self.TESTS_PATH, tests)
        progress.terminal("✓ Generated tests\n")
