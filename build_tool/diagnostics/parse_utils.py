"""
Parser utilities for build output
"""

import re
from typing import Dict, List, Optional, Pattern

from ..models import CompilationError

# Docker exit codes mapping
DOCKER_CODES: Dict[int, str] = {
    125: "DOCKER_INVOCATION_PROBLEM",
    126: "DOCKER_CMD_NOT_EXECUTABLE",
    127: "DOCKER_CMD_NOT_FOUND",
    137: "DOCKER_KILL_OOM",
    139: "DOCKER_SEGV",
    143: "DOCKER_TERM",
}

# ANSI escape sequence removal
ANSI: Pattern[str] = re.compile("\x1b\\[[0-9;?]*[A-Za-z]")

# error[E0425]: cannot find value `x` in this scope
#   --> src/lib.rs:12:9
RUSTC_ERROR: Pattern[str] = re.compile(
    r"error\[(E\d+)\]: (.+)\n\s*-->\s*(.+?):(\d+):(\d+)"
)


def discard_ansi(lines) -> List[str]:
    """Remove ANSI escape sequences from log lines"""
    return [ANSI.sub("", line) for line in lines]


def split_lines(output: Optional[str]) -> List[str]:
    if not output:
        return []
    return discard_ansi(output.replace("\r\n", "\n").replace("\r", "\n").split("\n"))


def describe_exit_code(exit_code: Optional[int]) -> Optional[str]:
    """Human-readable reason for a non-zero exit code, None for success"""
    if exit_code is None:
        return "TIMEOUT"
    if exit_code == 0:
        return None
    if exit_code in DOCKER_CODES:
        return DOCKER_CODES[exit_code]
    if 128 <= exit_code <= 128 + 64:
        return f"RECEIVED_SIGNAL_{exit_code - 128}"
    return f"EXIT_CODE_{exit_code}"


def parse_compilation_errors(output: Optional[str]) -> List[CompilationError]:
    """Locate rustc ``error[E....]`` diagnostics in build output"""
    text = "\n".join(split_lines(output))
    errors = []
    for m in RUSTC_ERROR.finditer(text):
        errors.append(
            CompilationError(
                message=m.group(2).strip(),
                file=m.group(3).strip(),
                line=int(m.group(4)),
                column=int(m.group(5)),
                code=m.group(1),
                snippet=m.group(0),
            )
        )
    return errors
