"""
Healing Loop
============

Compile -> diagnose -> patch cycle with a bounded attempt budget.

Attempt 1 compiles the generated code. Every failed attempt with budget
left hands the extracted compiler errors to the code fixer and compiles the
patched source next. The loop stops on the first successful build
(``SUCCEEDED``), when the budget is spent (``EXHAUSTED``), or as soon as the
fixer itself fails (``EXHAUSTED`` with the last build errors preserved; the
failed fix does not count as an attempt).
"""

from typing import List, Optional, Protocol

from build_tool.models import BuildOutcome

from .errors import BuildTimeoutError, CompileError, GenerationError
from .models import HealAttempt, HealResult, LoopState
from .stream import ProgressStream, SessionProgress


class ContractBuilder(Protocol):
    async def compile(self, source_text: str, project_label: str = "contract") -> BuildOutcome:
        ...


class ContractFixer(Protocol):
    async def fix(self, source_text: str, error_text: str, attempt_number: int) -> str:
        ...


class HealingLoop:
    """Bounded compile/fix loop for a single session"""

    DEFAULT_MAX_ATTEMPTS = 3

    def __init__(
        self,
        compiler: ContractBuilder,
        fixer: ContractFixer,
        stream: ProgressStream,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        source_path: str = "src/lib.rs",
        verbose: bool = False,
    ):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.compiler = compiler
        self.fixer = fixer
        self.stream = stream
        self.max_attempts = max_attempts
        self.source_path = source_path
        self.verbose = verbose

    async def run(
        self,
        session_id: str,
        source_text: str,
        project_label: str = "contract",
    ) -> HealResult:
        progress = self.stream.session(session_id)
        attempts: List[HealAttempt] = []
        current_code = source_text
        last_errors: Optional[str] = None
        last_warnings: Optional[str] = None
        attempt = 0

        while True:
            attempt += 1
            record = HealAttempt(attempt_number=attempt, source_text=current_code)
            attempts.append(record)

            outcome = await self._compile(progress, current_code, project_label, attempt)
            record.build_outcome = outcome
            last_warnings = outcome.warning_text

            if outcome.success:
                progress.compile_result(True, None, outcome.warning_text)
                progress.terminal("✓ Compilation successful!\n")
                if outcome.warning_text:
                    progress.terminal(f"\nWarnings:\n{outcome.warning_text}\n")
                if self.verbose:
                    print(f"  ✓ [{session_id}] Build succeeded on attempt {attempt}")
                return HealResult(
                    success=True,
                    final_source=current_code,
                    attempts_used=attempt,
                    state=LoopState.SUCCEEDED,
                    artifacts=outcome.artifacts,
                    warning_text=outcome.warning_text,
                    attempts=attempts,
                )

            last_errors = self._failure_text(outcome)
            progress.compile_result(False, last_errors, outcome.warning_text)
            progress.terminal(f"✗ Compilation failed\n\n{last_errors}\n", is_error=True)
            if self.verbose:
                print(f"  ✗ [{session_id}] Build failed on attempt {attempt}/{self.max_attempts}")

            if attempt >= self.max_attempts:
                progress.terminal(
                    f"\n✗ Max attempts ({self.max_attempts}) reached. Unable to fix errors.\n",
                    is_error=True,
                )
                break

            progress.fixing(attempt, self.max_attempts)
            progress.terminal("\n> AI analyzing errors and generating fix...\n")
            try:
                patched = await self.fixer.fix(current_code, last_errors, attempt)
            except GenerationError as e:
                record.fix_error = str(e)
                progress.terminal(f"✗ Error generating fix: {e}\n", is_error=True)
                if self.verbose:
                    print(f"  ⚠️ [{session_id}] Fix generation failed, stopping: {e}")
                break

            record.next_source_text = patched
            progress.terminal(f"✓ Generated fix for attempt {attempt + 1}\n")
            progress.file(self.source_path, patched)
            current_code = patched

        return HealResult(
            success=False,
            final_source=current_code,
            attempts_used=attempt,
            state=LoopState.EXHAUSTED,
            last_error_text=last_errors,
            warning_text=last_warnings,
            attempts=attempts,
        )

    async def _compile(
        self,
        progress: SessionProgress,
        code: str,
        project_label: str,
        attempt: int,
    ) -> BuildOutcome:
        progress.compile_start(attempt)
        progress.terminal(f"\n> Compiling (attempt {attempt}/{self.max_attempts})...\n")
        try:
            return await self.compiler.compile(code, project_label)
        except CompileError as e:
            return BuildOutcome(
                success=False,
                raw_output=e.error_text,
                error_text=e.error_text or str(e),
                timed_out=isinstance(e, BuildTimeoutError),
            )

    @staticmethod
    def _failure_text(outcome: BuildOutcome) -> str:
        if outcome.error_text:
            return outcome.error_text
        if outcome.timed_out:
            return "Build timed out before producing any diagnostics"
        return "Unknown compilation error"
