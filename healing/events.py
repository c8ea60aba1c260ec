"""
Progress Events
===============

Immutable messages pushed through the progress stream. Every event renders
to a JSON object with a ``type`` discriminator; the field names on the wire
match what the generation studio frontend reads.
"""

import json
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Optional


@dataclass(frozen=True)
class ProgressEvent:
    """Base class for all stream events"""

    type: ClassVar[str] = "event"
    terminal: ClassVar[bool] = False

    def payload(self) -> Dict[str, Any]:
        return {}

    def to_dict(self) -> Dict[str, Any]:
        data = {"type": self.type}
        data.update(self.payload())
        return data

    def to_sse(self) -> str:
        return f"data: {json.dumps(self.to_dict())}\n\n"


@dataclass(frozen=True)
class Connected(ProgressEvent):
    type: ClassVar[str] = "connected"
    message: str = "Stream connected"

    def payload(self) -> Dict[str, Any]:
        return {"message": self.message}


@dataclass(frozen=True)
class Status(ProgressEvent):
    type: ClassVar[str] = "status"
    message: str = ""
    progress: Optional[int] = None

    def __post_init__(self):
        if self.progress is not None and not 0 <= self.progress <= 100:
            raise ValueError(f"progress must be within 0..100, got {self.progress}")

    def payload(self) -> Dict[str, Any]:
        return {"message": self.message, "progress": self.progress}


@dataclass(frozen=True)
class FileEmitted(ProgressEvent):
    type: ClassVar[str] = "file"
    path: str = ""
    content: str = ""

    def payload(self) -> Dict[str, Any]:
        return {"path": self.path, "content": self.content}


@dataclass(frozen=True)
class TerminalOutput(ProgressEvent):
    type: ClassVar[str] = "terminal"
    text: str = ""
    is_error: bool = False

    def payload(self) -> Dict[str, Any]:
        return {"output": self.text, "isError": self.is_error}


@dataclass(frozen=True)
class CompileStarted(ProgressEvent):
    type: ClassVar[str] = "compile_start"
    attempt: Optional[int] = None

    def payload(self) -> Dict[str, Any]:
        return {"attempt": self.attempt} if self.attempt is not None else {}


@dataclass(frozen=True)
class CompileResult(ProgressEvent):
    type: ClassVar[str] = "compile_result"
    success: bool = False
    error_text: Optional[str] = None
    warning_text: Optional[str] = None

    def payload(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "errors": self.error_text,
            "warnings": self.warning_text,
        }


@dataclass(frozen=True)
class Fixing(ProgressEvent):
    type: ClassVar[str] = "fixing"
    attempt: int = 1
    max_attempts: int = 1

    def payload(self) -> Dict[str, Any]:
        return {"attempt": self.attempt, "maxAttempts": self.max_attempts}


@dataclass(frozen=True)
class Complete(ProgressEvent):
    type: ClassVar[str] = "complete"
    terminal: ClassVar[bool] = True
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return bool(self.data.get("success"))

    def payload(self) -> Dict[str, Any]:
        return {"data": self.data}


@dataclass(frozen=True)
class Error(ProgressEvent):
    type: ClassVar[str] = "error"
    terminal: ClassVar[bool] = True
    message: str = ""
    error_code: Optional[str] = None

    def payload(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"error": self.message}
        if self.error_code:
            data["errorCode"] = self.error_code
        return data
