"""
Settings tests
"""

import pytest

from artifact_store import InMemoryArtifactStore, PinataStorage
from contract_generator import MockCodeGenerator, OpenAIContractGenerator
from healing import ProgressStream
from pipeline_config import Settings, build_compiler, build_generator, build_pipeline, build_store

ENV_KEYS = [
    "OPENAI_API_KEY", "API_KEY", "OPENAI_MODEL", "GENERATOR_BACKEND", "STORE_BACKEND",
    "PINATA_API_KEY", "PINATA_SECRET_KEY", "PINATA_GATEWAY_URL", "TOOLCHAIN", "BUILD_EXECUTOR",
    "WORKSPACE_ROOT", "KEEP_WORKSPACES", "COMPILE_TIMEOUT_SECONDS", "MAX_HEAL_ATTEMPTS",
    "SKIP_COMPILE", "GENERATE_TESTS", "CORS_ORIGINS", "PORT", "VERBOSE",
]


@pytest.fixture
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_defaults_without_keys_run_offline(clean_env):
    settings = Settings.from_env(dotenv=False)

    assert settings.generator_backend == "mock"
    assert settings.store_backend == "memory"
    assert settings.max_heal_attempts == 3
    assert settings.port == 3000
    assert settings.compile_timeout_seconds == 600
    assert settings.generate_tests is True
    settings.validate()


def test_values_from_environment(clean_env):
    clean_env.setenv("API_KEY", "sk-test")
    clean_env.setenv("PINATA_API_KEY", "pk")
    clean_env.setenv("PINATA_SECRET_KEY", "ps")
    clean_env.setenv("MAX_HEAL_ATTEMPTS", "5")
    clean_env.setenv("SKIP_COMPILE", "true")
    clean_env.setenv("COMPILE_TIMEOUT_SECONDS", "0")
    clean_env.setenv("CORS_ORIGINS", "http://localhost:5173, https://studio.example")

    settings = Settings.from_env(dotenv=False)

    assert settings.openai_api_key == "sk-test"
    assert settings.generator_backend == "openai"
    assert settings.store_backend == "pinata"
    assert settings.max_heal_attempts == 5
    assert settings.skip_compile is True
    assert settings.compile_timeout_seconds is None
    assert settings.cors_origins == ["http://localhost:5173", "https://studio.example"]
    settings.validate()


def test_invalid_integer(clean_env):
    clean_env.setenv("PORT", "eighty")

    with pytest.raises(ValueError):
        Settings.from_env(dotenv=False)


@pytest.mark.parametrize("changes", [
    {"generator_backend": "claude"},
    {"store_backend": "s3"},
    {"build_executor": "k8s"},
    {"max_heal_attempts": 0},
    {"generator_backend": "openai", "openai_api_key": None},
    {"store_backend": "pinata", "pinata_api_key": None},
])
def test_validate_rejects(changes):
    values = {"generator_backend": "mock", "store_backend": "memory"}
    values.update(changes)

    with pytest.raises(ValueError):
        Settings(**values).validate()


def test_adapter_selection(tmp_path):
    mock = Settings(generator_backend="mock", store_backend="memory", workspace_root=str(tmp_path))
    real = Settings(
        openai_api_key="sk-test",
        pinata_api_key="pk",
        pinata_secret_key="ps",
        workspace_root=str(tmp_path),
    )

    assert isinstance(build_generator(mock), MockCodeGenerator)
    assert isinstance(build_store(mock), InMemoryArtifactStore)
    assert isinstance(build_generator(real), OpenAIContractGenerator)
    assert isinstance(build_store(real), PinataStorage)
    assert build_compiler(mock).toolchain.id == "multiversx"


def test_docker_executor_needs_an_image_toolchain():
    settings = Settings(generator_backend="mock", store_backend="memory", build_executor="docker")

    with pytest.raises(ValueError):
        build_compiler(settings)


def test_pipeline_uses_configured_bound(tmp_path):
    settings = Settings(
        generator_backend="mock",
        store_backend="memory",
        max_heal_attempts=4,
        skip_compile=True,
        workspace_root=str(tmp_path),
    )

    pipeline = build_pipeline(settings, ProgressStream())

    assert pipeline.loop.max_attempts == 4
    assert pipeline.skip_compile is True
