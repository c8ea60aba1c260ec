"""
Data Models for the Healing Loop
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from build_tool.models import BuildArtifacts, BuildOutcome


class LoopState(Enum):
    """States of one healing run"""
    GENERATING = "generating"
    COMPILING = "compiling"
    FIXING = "fixing"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"

    @property
    def is_terminal(self) -> bool:
        return self in (LoopState.SUCCEEDED, LoopState.EXHAUSTED)


@dataclass
class HealAttempt:
    """One compile cycle of a healing run"""
    attempt_number: int
    source_text: str
    build_outcome: Optional[BuildOutcome] = None
    next_source_text: Optional[str] = None
    fix_error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return bool(self.build_outcome and self.build_outcome.success)

    def to_dict(self) -> Dict:
        return {
            "attempt": self.attempt_number,
            "success": self.succeeded,
            "errors": self.build_outcome.error_text if self.build_outcome else None,
            "warnings": self.build_outcome.warning_text if self.build_outcome else None,
            "patched": self.next_source_text is not None,
            "fix_error": self.fix_error,
        }


@dataclass
class HealResult:
    """Outcome of a healing run"""
    success: bool
    final_source: str
    attempts_used: int
    state: LoopState
    artifacts: Optional[BuildArtifacts] = None
    last_error_text: Optional[str] = None
    warning_text: Optional[str] = None
    attempts: List[HealAttempt] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "success": self.success,
            "code": self.final_source,
            "attempts": self.attempts_used,
            "state": self.state.value,
            "wasmPath": self.artifacts.wasm_path if self.artifacts else None,
            "abiPath": self.artifacts.abi_path if self.artifacts else None,
            "errors": self.last_error_text,
            "warnings": self.warning_text,
            "history": [a.to_dict() for a in self.attempts],
        }
