"""
Pipeline Configuration
======================

Reads the service settings from the environment (``.env`` supported) and
builds the adapters the service needs. Adapter selection happens here,
once, at startup; the healing loop only ever sees the chosen instances.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

from artifact_store import InMemoryArtifactStore, PinataStorage
from build_tool import ContractCompiler, create_executor, load_toolchain
from build_tool.toolchain_loader import DEFAULT_TOOLCHAIN_ID
from contract_generator import MockCodeGenerator, OpenAIContractGenerator
from healing import GenerationPipeline, HealingLoop, ProgressStream

GENERATOR_BACKENDS = ("openai", "mock")
STORE_BACKENDS = ("pinata", "memory")
BUILD_EXECUTORS = ("local", "docker")

_TRUE = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in _TRUE


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


def _env_list(name: str, default: List[str]) -> List[str]:
    value = os.getenv(name)
    if not value:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Settings:
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o"
    generator_backend: str = "openai"
    store_backend: str = "pinata"
    pinata_api_key: Optional[str] = None
    pinata_secret_key: Optional[str] = None
    pinata_gateway_url: str = "https://gateway.pinata.cloud/ipfs"
    toolchain: str = DEFAULT_TOOLCHAIN_ID
    build_executor: str = "local"
    workspace_root: str = "./temp"
    keep_workspaces: bool = False
    compile_timeout_seconds: Optional[int] = 600
    max_heal_attempts: int = HealingLoop.DEFAULT_MAX_ATTEMPTS
    skip_compile: bool = False
    generate_tests: bool = True
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    port: int = 3000
    verbose: bool = False

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        if dotenv:
            load_dotenv()
        api_key = os.getenv("OPENAI_API_KEY") or os.getenv("API_KEY")
        timeout = _env_int("COMPILE_TIMEOUT_SECONDS", 600)
        return cls(
            openai_api_key=api_key,
            openai_model=os.getenv("OPENAI_MODEL", "gpt-4o"),
            # Without a key the service still runs, on the mock generator
            generator_backend=os.getenv("GENERATOR_BACKEND") or ("openai" if api_key else "mock"),
            store_backend=os.getenv("STORE_BACKEND") or (
                "pinata" if os.getenv("PINATA_API_KEY") else "memory"
            ),
            pinata_api_key=os.getenv("PINATA_API_KEY"),
            pinata_secret_key=os.getenv("PINATA_SECRET_KEY"),
            pinata_gateway_url=os.getenv("PINATA_GATEWAY_URL", "https://gateway.pinata.cloud/ipfs"),
            toolchain=os.getenv("TOOLCHAIN", DEFAULT_TOOLCHAIN_ID),
            build_executor=os.getenv("BUILD_EXECUTOR", "local"),
            workspace_root=os.getenv("WORKSPACE_ROOT", "./temp"),
            keep_workspaces=_env_bool("KEEP_WORKSPACES"),
            compile_timeout_seconds=timeout if timeout > 0 else None,
            max_heal_attempts=_env_int("MAX_HEAL_ATTEMPTS", HealingLoop.DEFAULT_MAX_ATTEMPTS),
            skip_compile=_env_bool("SKIP_COMPILE"),
            generate_tests=_env_bool("GENERATE_TESTS", True),
            cors_origins=_env_list("CORS_ORIGINS", ["*"]),
            port=_env_int("PORT", 3000),
            verbose=_env_bool("VERBOSE"),
        )

    def validate(self) -> None:
        """Raise ValueError for settings no adapter can work with"""
        if self.generator_backend not in GENERATOR_BACKENDS:
            raise ValueError(f"GENERATOR_BACKEND must be one of {GENERATOR_BACKENDS}")
        if self.store_backend not in STORE_BACKENDS:
            raise ValueError(f"STORE_BACKEND must be one of {STORE_BACKENDS}")
        if self.build_executor not in BUILD_EXECUTORS:
            raise ValueError(f"BUILD_EXECUTOR must be one of {BUILD_EXECUTORS}")
        if self.max_heal_attempts < 1:
            raise ValueError("MAX_HEAL_ATTEMPTS must be at least 1")
        if not 0 < self.port < 65536:
            raise ValueError("PORT must be between 1 and 65535")
        if self.generator_backend == "openai" and not self.openai_api_key:
            raise ValueError(
                "OpenAI API key not found. Set OPENAI_API_KEY or API_KEY, or GENERATOR_BACKEND=mock."
            )
        if self.store_backend == "pinata" and not (self.pinata_api_key and self.pinata_secret_key):
            raise ValueError(
                "Pinata credentials not found. Set PINATA_API_KEY/PINATA_SECRET_KEY, or STORE_BACKEND=memory."
            )

    @property
    def mock_mode(self) -> bool:
        return self.generator_backend == "mock"


def build_generator(settings: Settings):
    if settings.generator_backend == "mock":
        return MockCodeGenerator(verbose=settings.verbose)
    return OpenAIContractGenerator(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        max_attempts=settings.max_heal_attempts,
        verbose=settings.verbose,
    )


def build_compiler(settings: Settings) -> ContractCompiler:
    toolchain = load_toolchain(settings.toolchain)
    if settings.build_executor == "docker" and not toolchain.image:
        raise ValueError(
            f"Toolchain '{toolchain.id}' has no Docker image; use TOOLCHAIN=multiversx-docker"
        )
    return ContractCompiler(
        toolchain=toolchain,
        executor=create_executor(settings.build_executor, verbose=settings.verbose),
        workspace_root=settings.workspace_root,
        timeout=settings.compile_timeout_seconds,
        keep_workspaces=settings.keep_workspaces,
        verbose=settings.verbose,
    )


def build_store(settings: Settings):
    if settings.store_backend == "memory":
        return InMemoryArtifactStore()
    return PinataStorage(
        api_key=settings.pinata_api_key,
        secret_key=settings.pinata_secret_key,
        gateway_url=settings.pinata_gateway_url,
        verbose=settings.verbose,
    )


def build_pipeline(
    settings: Settings,
    stream: ProgressStream,
    generator=None,
    compiler=None,
    store=None,
) -> GenerationPipeline:
    """Wire one pipeline; explicit adapters override the configured ones"""
    return GenerationPipeline(
        generator=generator or build_generator(settings),
        compiler=compiler or build_compiler(settings),
        store=store or build_store(settings),
        stream=stream,
        max_attempts=settings.max_heal_attempts,
        skip_compile=settings.skip_compile,
        generate_tests=settings.generate_tests,
        verbose=settings.verbose,
    )
