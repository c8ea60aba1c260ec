"""
Error Taxonomy
==============

Exceptions shared by the generator, the build tool, the healing loop and
the session router. Each carries a stable ``error_code`` so the HTTP layer
and the progress stream can report failures without string matching.
"""

from typing import Optional


class ContractPipelineError(Exception):
    """Base class for expected pipeline failures"""

    error_code = "pipeline_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class GenerationError(ContractPipelineError):
    """Code generation failed (transport, quota, auth or empty response)"""

    error_code = "generation_failed"


class GenerationValidationError(GenerationError):
    """Model answered, but the code is missing required structural markers"""

    error_code = "generation_invalid"

    def __init__(self, message: str, missing: Optional[list] = None):
        super().__init__(message)
        self.missing = missing or []


class CompileError(ContractPipelineError):
    """Build tool reported failure; carries the extracted error text"""

    error_code = "compile_failed"

    def __init__(self, message: str, error_text: str = ""):
        super().__init__(message)
        self.error_text = error_text


class BuildTimeoutError(CompileError):
    """Build tool did not finish before the configured deadline"""

    error_code = "compile_timeout"


class StreamError(ContractPipelineError):
    """Writing to a progress sink failed"""

    error_code = "stream_failed"


class StorageError(ContractPipelineError):
    """Artifact store upload or retrieval failed"""

    error_code = "storage_failed"


class DuplicateSessionError(ContractPipelineError):
    """A session with the same id is still running"""

    error_code = "duplicate_session"
