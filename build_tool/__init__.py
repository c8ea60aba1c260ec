"""
Build Tool
==========

Compiles generated MultiversX contracts in throwaway workspaces, using
toolchains declared in YAML (``build_tool/toolchains/<id>/config.yaml``) and
executed on the host or in Docker.
"""

from .compiler import ContractCompiler
from .executors import DockerExecutor, LocalExecutor, create_executor
from .models import BuildArtifacts, BuildOutcome, CompilationError, ExecutionResult
from .project import generate_project_files
from .toolchain_loader import ToolchainConfig, list_toolchains, load_toolchain

__all__ = [
    "ContractCompiler",
    "LocalExecutor",
    "DockerExecutor",
    "create_executor",
    "BuildArtifacts",
    "BuildOutcome",
    "CompilationError",
    "ExecutionResult",
    "generate_project_files",
    "ToolchainConfig",
    "load_toolchain",
    "list_toolchains",
]
