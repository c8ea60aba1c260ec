"""Post-processing of raw model completions.

This module turns a model response into the code payload the rest of the
pipeline works with:
- extract the first fenced code block (any language tag)
- fall back to the trimmed response when there is no complete fence
- check the structural markers every MultiversX contract must carry
"""

from __future__ import annotations

import re
from typing import List

from healing.errors import GenerationValidationError

FENCED_BLOCK = re.compile(r"```[^\n`]*\n(.*?)```", re.DOTALL)

REQUIRED_MARKERS = {
    "#![no_std]": "Missing #![no_std] declaration",
    "#[multiversx_sc::contract]": "Missing contract attribute",
}

MIN_CODE_LENGTH = 100


def require_text(name: str, value: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"'{name}' must be a non-empty string")


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def strip_markdown_fences(code: str) -> str:
    """Remove a leading/trailing fence left over from a truncated response."""
    code = code.strip()
    if code.startswith("```"):
        first_newline = code.find("\n")
        code = code[first_newline + 1 :] if first_newline != -1 else ""
    if code.endswith("```"):
        code = code[: -len("```")]
    return code.strip()


def extract_code_block(text: str) -> str:
    """Return the first fenced code block, or the trimmed text without one."""
    if not text:
        return ""
    text = normalize_newlines(text)
    match = FENCED_BLOCK.search(text)
    if match:
        return match.group(1).strip("\n")
    return strip_markdown_fences(text)


def validate_code(code: str) -> List[str]:
    """Full list of structural issues (required markers and softer checks)."""
    errors = [message for marker, message in REQUIRED_MARKERS.items() if marker not in code]
    if "#[init]" not in code:
        errors.append("Missing init function")
    if len(code) < MIN_CODE_LENGTH:
        errors.append("Code too short, likely incomplete")
    return errors


def ensure_required_markers(code: str) -> str:
    """Raise GenerationValidationError unless every required marker is present."""
    missing = [marker for marker in REQUIRED_MARKERS if marker not in code]
    if missing:
        raise GenerationValidationError(
            "Generated code missing " + ", ".join(missing),
            missing=missing,
        )
    return code
