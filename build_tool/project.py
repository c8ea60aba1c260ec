"""
Project Scaffolding
===================

Files of a minimal buildable MultiversX contract crate around a generated
``src/lib.rs``. The same file set is streamed to the caller and written to
each throwaway build workspace.
"""

import re
from typing import Dict

FRAMEWORK_VERSION = "0.64.0"

_LABEL_PATTERN = re.compile(r"^[a-z][a-z0-9_-]{0,63}$")


def validate_label(project_label: str) -> str:
    """Return the label if it is usable as a crate name"""
    if not _LABEL_PATTERN.match(project_label or ""):
        raise ValueError(
            f"Invalid project label '{project_label}': use lowercase letters, digits, '-' or '_'"
        )
    return project_label


def crate_ident(project_label: str) -> str:
    return project_label.replace("-", "_")


def cargo_toml(project_label: str) -> str:
    return f"""[package]
name = "{project_label}"
version = "0.0.0"
authors = ["AI Contract Generator"]
edition = "2021"
publish = false

[lib]
path = "src/lib.rs"

[dependencies.multiversx-sc]
version = "{FRAMEWORK_VERSION}"

[dev-dependencies.multiversx-sc-scenario]
version = "{FRAMEWORK_VERSION}"
"""


def meta_cargo_toml(project_label: str) -> str:
    return f"""[package]
name = "{project_label}-meta"
version = "0.0.0"
authors = ["AI Contract Generator"]
edition = "2021"
publish = false

[dependencies.multiversx-sc-meta]
version = "{FRAMEWORK_VERSION}"

[dependencies.{project_label}]
path = ".."
"""


def meta_main(project_label: str) -> str:
    return f"""fn main() {{
    multiversx_sc_meta::cli_main::<{crate_ident(project_label)}::AbiProvider>();
}}
"""


def generate_project_files(code: str, project_label: str = "contract") -> Dict[str, str]:
    """Relative path -> content for every file of the contract crate"""
    validate_label(project_label)
    return {
        "Cargo.toml": cargo_toml(project_label),
        "src/lib.rs": code,
        "meta/Cargo.toml": meta_cargo_toml(project_label),
        "meta/src/main.rs": meta_main(project_label),
        "multiversx.json": '{\n    "language": "rust"\n}\n',
    }
