"""
Toolchain Loader
================

Load build toolchain configurations from YAML files
(``build_tool/toolchains/<id>/config.yaml``).
"""

from pathlib import Path
from typing import Dict, List, Optional

import yaml

TOOLCHAINS_DIR = Path(__file__).parent / "toolchains"
DEFAULT_TOOLCHAIN_ID = "default"

DEFAULT_ERROR_MARKERS = ["error[E", "error:"]
DEFAULT_WARNING_MARKERS = ["warning:"]


class ToolchainConfig:
    """Toolchain configuration loaded from YAML"""

    def __init__(self, toolchain_id: str, config: dict):
        self.id = toolchain_id
        self.name = config.get("name", toolchain_id)
        self.description = config.get("description", "")
        self.version = str(config.get("version", ""))
        self.image = config.get("image")

        build = config.get("build") or {}
        self.command = build.get("command")
        self.workdir = build.get("workdir", "/project")
        self.environment: Dict[str, str] = {
            str(k): str(v) for k, v in (build.get("environment") or {}).items()
        }

        artifacts = config.get("artifacts") or {}
        self.wasm_artifact: Optional[str] = artifacts.get("wasm")
        self.abi_artifact: Optional[str] = artifacts.get("abi")

        diagnostics = config.get("diagnostics") or {}
        self.extractor = diagnostics.get("extractor", "lines")
        self.error_markers: List[str] = diagnostics.get("error_markers") or list(DEFAULT_ERROR_MARKERS)
        self.warning_markers: List[str] = diagnostics.get("warning_markers") or list(DEFAULT_WARNING_MARKERS)

        self.config = config

        if not self.command:
            raise ValueError(f"Toolchain {toolchain_id} has no build command specified")

    @property
    def has_artifact_convention(self) -> bool:
        return bool(self.wasm_artifact)

    def artifact_path(self, template: Optional[str], project_label: str) -> Optional[str]:
        if not template:
            return None
        return template.replace("$LABEL", project_label)


def load_toolchain(toolchain_id: str, toolchains_dir: Optional[Path] = None, _seen: Optional[set] = None) -> ToolchainConfig:
    """
    Load toolchain configuration from YAML file

    Args:
        toolchain_id: Toolchain identifier (e.g., "multiversx", "multiversx-docker")
        toolchains_dir: Directory holding toolchain folders (default: bundled toolchains)

    Returns:
        ToolchainConfig

    Raises:
        ValueError: Unknown toolchain, alias loop or invalid config
    """
    base_dir = Path(toolchains_dir) if toolchains_dir else TOOLCHAINS_DIR
    config_path = base_dir / toolchain_id / "config.yaml"

    if not config_path.exists():
        raise ValueError(f"Toolchain '{toolchain_id}' not found in {base_dir}")

    with open(config_path, "r", encoding="utf8") as f:
        config = yaml.safe_load(f) or {}

    # Handle aliases
    if "alias" in config:
        seen = _seen or set()
        if toolchain_id in seen:
            raise ValueError(f"Alias loop detected at toolchain '{toolchain_id}'")
        seen.add(toolchain_id)
        return load_toolchain(config["alias"], base_dir, seen)

    return ToolchainConfig(toolchain_id, config)


def list_toolchains(toolchains_dir: Optional[Path] = None) -> List[str]:
    """Ids of all toolchains with a config.yaml"""
    base_dir = Path(toolchains_dir) if toolchains_dir else TOOLCHAINS_DIR
    return sorted(p.parent.name for p in base_dir.glob("*/config.yaml"))
