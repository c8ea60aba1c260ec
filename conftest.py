"""Shared fakes and fixtures for the pipeline test suite."""

from typing import List, Optional, Sequence, Union

import pytest

from artifact_store import InMemoryArtifactStore
from build_tool.models import BuildArtifacts, BuildOutcome
from healing import GenerationError, ProgressStream, StorageError
from healing.events import ProgressEvent

VALID_CODE = """#![no_std]

multiversx_sc::imports!();

#[multiversx_sc::contract]
pub trait Counter {
    #[init]
    fn init(&self) {}

    #[view(getCount)]
    #[storage_mapper("count")]
    fn count(&self) -> SingleValueMapper<u64>;
}
"""

ERROR_TEXT = """error[E0425]: cannot find value `x` in this scope
  --> src/lib.rs:12:9
   |
12 |         x
   |         ^ not found in this scope"""


def ok_outcome(warnings: Optional[str] = None) -> BuildOutcome:
    return BuildOutcome(
        success=True,
        raw_output="Finished release",
        warning_text=warnings,
        artifacts=BuildArtifacts("output/contract.wasm", "output/contract.abi.json"),
        exit_code=0,
    )


def failed_outcome(error_text: str = ERROR_TEXT) -> BuildOutcome:
    return BuildOutcome(success=False, raw_output=error_text, error_text=error_text, exit_code=101)


class FakeCompiler:
    """Returns scripted outcomes in order; the last one repeats"""

    def __init__(self, outcomes: Sequence[Union[bool, BuildOutcome, Exception]]):
        self.outcomes = list(outcomes)
        self.calls: List[str] = []

    async def compile(self, source_text: str, project_label: str = "contract") -> BuildOutcome:
        self.calls.append(source_text)
        index = min(len(self.calls), len(self.outcomes)) - 1
        outcome = self.outcomes[index]
        if isinstance(outcome, Exception):
            raise outcome
        if outcome is True:
            return ok_outcome()
        if outcome is False:
            return failed_outcome(f"error[E0001]: failure {len(self.calls)}\n  --> src/lib.rs:1:1")
        return outcome


class FakeGenerator:
    """Scripted code generator recording every call"""

    def __init__(
        self,
        code: str = VALID_CODE,
        generate_error: Optional[Exception] = None,
        fix_error: Optional[Exception] = None,
        tests_error: Optional[Exception] = None,
    ):
        self.code = code
        self.generate_error = generate_error
        self.fix_error = fix_error
        self.tests_error = tests_error
        self.generate_calls = []
        self.fix_calls = []
        self.tests_calls = []

    async def generate(self, description, category, progress=None):
        self.generate_calls.append((description, category))
        if progress:
            progress.status("Generating contract code with AI...", 10)
        if self.generate_error:
            raise self.generate_error
        return self.code

    async def fix(self, source_text, error_text, attempt_number):
        self.fix_calls.append((source_text, error_text, attempt_number))
        if self.fix_error:
            raise self.fix_error
        return f"{source_text}\n// fix {attempt_number}"

    async def generate_tests(self, source_text):
        self.tests_calls.append(source_text)
        if self.tests_error:
            raise self.tests_error
        return "#[test]\nfn deploys() {}\n"


class RecordingSink:
    """Collects events; optionally fails once ``fail_after`` events arrived"""

    def __init__(self, fail_after: Optional[int] = None):
        self.events: List[ProgressEvent] = []
        self.fail_after = fail_after
        self.closed = False

    def send(self, event: ProgressEvent) -> None:
        if self.fail_after is not None and len(self.events) >= self.fail_after:
            raise ConnectionResetError("listener went away")
        self.events.append(event)

    def close(self) -> None:
        self.closed = True

    @property
    def types(self) -> List[str]:
        return [e.type for e in self.events]

    def of_type(self, kind: str) -> List[ProgressEvent]:
        return [e for e in self.events if e.type == kind]


class FailingStore(InMemoryArtifactStore):
    async def put(self, content, metadata=None):
        raise StorageError("pinning service unavailable")


@pytest.fixture
def stream():
    return ProgressStream()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def store():
    return InMemoryArtifactStore()


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def valid_code():
    return VALID_CODE


@pytest.fixture
def generation_error():
    return GenerationError("quota exceeded")
