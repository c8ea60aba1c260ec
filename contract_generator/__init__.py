"""
Contract Generator
==================

Model-backed and mock generators for MultiversX Rust contracts, plus the
prompt templates and code extraction helpers they share.
"""

from .code_extraction import (
    REQUIRED_MARKERS,
    ensure_required_markers,
    extract_code_block,
    validate_code,
)
from .generator import OpenAIContractGenerator
from .mock_generator import MockCodeGenerator

__all__ = [
    "OpenAIContractGenerator",
    "MockCodeGenerator",
    "REQUIRED_MARKERS",
    "ensure_required_markers",
    "extract_code_block",
    "validate_code",
]
