"""
Data Models for the Build Tool
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class CompilationError:
    """A single rustc diagnostic located in the contract sources"""
    message: str
    file: str
    line: int
    column: int
    code: Optional[str] = None
    snippet: str = ""

    def to_dict(self) -> Dict:
        return {
            "message": self.message,
            "file": self.file,
            "line": self.line,
            "column": self.column,
            "code": self.code,
        }


@dataclass
class ExecutionResult:
    """Raw result of running a build command"""
    exit_code: Optional[int]
    output: str
    timed_out: bool = False


@dataclass
class BuildArtifacts:
    """Files produced by a successful build"""
    wasm_path: Optional[str] = None
    abi_path: Optional[str] = None

    def to_dict(self) -> Dict:
        return {"wasmPath": self.wasm_path, "abiPath": self.abi_path}


@dataclass
class BuildOutcome:
    """Result of one compile call"""
    success: bool
    raw_output: str
    error_text: Optional[str] = None
    warning_text: Optional[str] = None
    artifacts: Optional[BuildArtifacts] = None
    exit_code: Optional[int] = None
    timed_out: bool = False
    diagnostics: List[CompilationError] = field(default_factory=list)
    workspace: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            "success": self.success,
            "errors": self.error_text,
            "warnings": self.warning_text,
            "artifacts": self.artifacts.to_dict() if self.artifacts else None,
            "exit_code": self.exit_code,
            "timed_out": self.timed_out,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }
