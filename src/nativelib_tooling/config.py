"""Release configuration loading (release-matrix.yaml).

Format:
- library: cdylib name cargo emits (default: core -> libcore.so / core.dll)
- artifact_prefix: published name prefix (default: library)
- android_api_level: API level of the NDK clang wrapper to alias (default: 29)
- crate_dir: crate directory relative to the config file's directory (default: .)
- matrix: list of { os, artifact_name, script, arch? } rows (default: built-in matrix)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from nativelib_tooling.build.toolchain import DEFAULT_ANDROID_API_LEVEL
from nativelib_tooling.errors import ConfigError
from nativelib_tooling.release.matrix import MatrixRow, default_matrix, parse_rows, validate_matrix

CONFIG_FILE_NAME = "release-matrix.yaml"
DEFAULT_LIBRARY = "core"


@dataclass
class ReleaseConfig:
    library: str = DEFAULT_LIBRARY
    artifact_prefix: str | None = None
    android_api_level: int = DEFAULT_ANDROID_API_LEVEL
    crate_dir: Path = field(default_factory=Path.cwd)
    matrix: list[MatrixRow] = field(default_factory=list)

    @property
    def prefix(self) -> str:
        return self.artifact_prefix or self.library

    def row(self, artifact_name: str) -> MatrixRow:
        for r in self.matrix:
            if r.artifact_name == artifact_name:
                return r
        known = ", ".join(r.artifact_name for r in self.matrix)
        msg = f"No matrix row named {artifact_name!r}. Known: {known}"
        raise ConfigError(msg)


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        msg = f"Could not read {path}: {e}"
        raise ConfigError(msg) from e
    if not isinstance(data, dict):
        msg = f"{path}: top level must be a mapping"
        raise ConfigError(msg)
    return data


def load_config(project_root: Path, config_path: Path | None = None) -> ReleaseConfig:
    """Load config_path (or project_root/release-matrix.yaml if present); defaults otherwise.

    Validates the matrix against the configured library names.
    """
    path = config_path if config_path is not None else project_root / CONFIG_FILE_NAME
    if config_path is not None and not path.is_file():
        msg = f"Config file not found: {path}"
        raise ConfigError(msg)
    data = _read_yaml(path) if path.is_file() else {}
    base = path.parent if path.is_file() else project_root

    library = str(data.get("library") or DEFAULT_LIBRARY)
    prefix = data.get("artifact_prefix")
    try:
        api_level = int(data.get("android_api_level", DEFAULT_ANDROID_API_LEVEL))
    except (TypeError, ValueError) as e:
        msg = f"android_api_level must be an integer: {data.get('android_api_level')!r}"
        raise ConfigError(msg) from e
    crate_dir = (base / str(data.get("crate_dir") or ".")).resolve()

    cfg = ReleaseConfig(
        library=library,
        artifact_prefix=str(prefix) if prefix else None,
        android_api_level=api_level,
        crate_dir=crate_dir,
    )
    if "matrix" in data:
        cfg.matrix = parse_rows(data["matrix"])
    else:
        cfg.matrix = default_matrix(cfg.library, cfg.prefix)
    validate_matrix(cfg.matrix, cfg.library, cfg.prefix)
    return cfg
