"""
Code extraction and validation tests
"""

import pytest

from contract_generator import ensure_required_markers, extract_code_block, validate_code
from healing import GenerationError, GenerationValidationError
from conftest import VALID_CODE


def test_first_fenced_block_wins():
    response = (
        "Here is your contract:\n```rust\nfn first() {}\n```\n"
        "And a test:\n```rust\nfn second() {}\n```\nEnjoy!"
    )

    assert extract_code_block(response) == "fn first() {}"


def test_fence_without_language_tag():
    assert extract_code_block("```\nlet x = 1;\n```") == "let x = 1;"


def test_no_fence_returns_trimmed_response():
    assert extract_code_block("\n\n  #![no_std]\nfn x() {}  \n") == "#![no_std]\nfn x() {}"


def test_truncated_fence_is_stripped():
    assert extract_code_block("```rust\n#![no_std]\nfn cut_off(") == "#![no_std]\nfn cut_off("


def test_windows_newlines():
    assert extract_code_block("```rust\r\nfn a() {}\r\n```") == "fn a() {}"


def test_empty_response():
    assert extract_code_block("") == ""


def test_valid_code_passes_markers():
    assert ensure_required_markers(VALID_CODE) == VALID_CODE
    assert validate_code(VALID_CODE) == []


def test_missing_markers_raise_validation_error():
    with pytest.raises(GenerationValidationError) as info:
        ensure_required_markers("pub trait Nothing {}")

    assert info.value.missing == ["#![no_std]", "#[multiversx_sc::contract]"]
    assert info.value.error_code == "generation_invalid"
    # Still a generation failure for callers that only handle the base class
    assert isinstance(info.value, GenerationError)


def test_validate_code_reports_soft_issues():
    issues = validate_code("#![no_std]\n#[multiversx_sc::contract]\npub trait T {}")

    assert "Missing init function" in issues
    assert "Code too short, likely incomplete" in issues
    assert "Missing #![no_std] declaration" not in issues
