"""
Toolchain config and project scaffolding tests
"""

import pytest

from build_tool import generate_project_files, list_toolchains, load_toolchain
from build_tool.project import validate_label


def test_bundled_toolchains():
    assert {"default", "multiversx", "multiversx-docker", "multiversx-check"} <= set(list_toolchains())


def test_default_is_an_alias_for_mxpy():
    toolchain = load_toolchain("default")

    assert toolchain.id == "multiversx"
    assert toolchain.command == "mxpy contract build"
    assert toolchain.artifact_path(toolchain.wasm_artifact, "vault") == "output/vault.wasm"
    assert toolchain.has_artifact_convention


def test_docker_toolchain_has_image():
    toolchain = load_toolchain("multiversx-docker")

    assert toolchain.image
    assert toolchain.workdir == "/project"


def test_unknown_toolchain():
    with pytest.raises(ValueError):
        load_toolchain("solc")


def test_alias_loop_detected(tmp_path):
    for name, target in (("a", "b"), ("b", "a")):
        (tmp_path / name).mkdir()
        (tmp_path / name / "config.yaml").write_text(f"alias: {target}\n")

    with pytest.raises(ValueError):
        load_toolchain("a", tmp_path)


def test_toolchain_requires_command(tmp_path):
    (tmp_path / "broken").mkdir()
    (tmp_path / "broken" / "config.yaml").write_text("name: broken\n")

    with pytest.raises(ValueError):
        load_toolchain("broken", tmp_path)


def test_project_files_reference_the_label():
    files = generate_project_files("// code", "token-vault")

    assert files["src/lib.rs"] == "// code"
    assert 'name = "token-vault"' in files["Cargo.toml"]
    assert "token_vault::AbiProvider" in files["meta/src/main.rs"]
    assert "[dependencies.token-vault]" in files["meta/Cargo.toml"]


@pytest.mark.parametrize("label", ["", "Upper", "1abc", "a/b", "a b"])
def test_invalid_labels(label):
    with pytest.raises(ValueError):
        validate_label(label)
