"""
Healing Loop & Progress Streaming
=================================

Self-healing compilation for generated MultiversX contracts: a bounded
compile/diagnose/patch loop, the pipeline that wraps it into a generation
session, and the per-session progress stream that reports every step.
"""

from .errors import (
    BuildTimeoutError,
    CompileError,
    ContractPipelineError,
    DuplicateSessionError,
    GenerationError,
    GenerationValidationError,
    StorageError,
    StreamError,
)
from .loop import HealingLoop
from .models import HealAttempt, HealResult, LoopState
from .pipeline import GenerationPipeline, GenerationRequest, SessionOutcome
from .stream import ProgressStream, QueueSink, SessionProgress

__all__ = [
    "HealingLoop",
    "HealAttempt",
    "HealResult",
    "LoopState",
    "GenerationPipeline",
    "GenerationRequest",
    "SessionOutcome",
    "ProgressStream",
    "QueueSink",
    "SessionProgress",
    "ContractPipelineError",
    "GenerationError",
    "GenerationValidationError",
    "CompileError",
    "BuildTimeoutError",
    "StreamError",
    "StorageError",
    "DuplicateSessionError",
]
