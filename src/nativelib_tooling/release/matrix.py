"""Release matrix rows: (runner, artifact name, script family, arch flag) -> one pipeline run.

The built-in matrix mirrors the tag-push release workflow. macOS arm64 is defined but
disabled (enabled: false) until an arm64 runner is available.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from nativelib_tooling.build.host import FAMILIES, HostOS, select_target
from nativelib_tooling.build.targets import TargetDescriptor
from nativelib_tooling.errors import ConfigError, PipelineError

_SLUG = re.compile(r"[^A-Za-z0-9_]+")


@dataclass(frozen=True)
class MatrixRow:
    runner: str
    artifact_name: str
    script: str
    arch_flag: str | None = None
    enabled: bool = True

    @property
    def slug(self) -> str:
        """Filesystem-safe row id (per-row target directory name)."""
        return _SLUG.sub("_", self.artifact_name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "os": self.runner,
            "artifact_name": self.artifact_name,
            "script": self.script,
            "arch": self.arch_flag or "",
        }


def runner_host(runner: str) -> HostOS:
    """CI runner label -> host OS it provides (ubuntu-latest -> linux, macos-14 -> darwin, ...)."""
    r = runner.lower()
    if r.startswith(("ubuntu", "linux")):
        return HostOS.LINUX
    if r.startswith(("macos", "darwin")):
        return HostOS.DARWIN
    if r.startswith("windows"):
        return HostOS.WINDOWS
    return HostOS.UNSUPPORTED


def row_target(row: MatrixRow, library: str, artifact_prefix: str | None = None) -> TargetDescriptor:
    return select_target(row.script, row.arch_flag, runner_host(row.runner), library, artifact_prefix)


def default_matrix(library: str, artifact_prefix: str | None = None) -> list[MatrixRow]:
    """Built-in rows with artifact names derived from the target table."""
    rows = [
        ("macos-latest", "android", None, True),
        ("macos-latest", "android", "x64", True),
        ("ubuntu-latest", "desktop", None, True),
        ("macos-latest", "desktop", None, False),
        ("macos-latest", "desktop", "x64", True),
        ("windows-latest", "desktop", None, True),
    ]
    out: list[MatrixRow] = []
    for runner, script, arch, enabled in rows:
        d = select_target(script, arch, runner_host(runner), library, artifact_prefix)
        out.append(MatrixRow(runner, d.published_name, script, arch, enabled))
    return out


def parse_rows(raw: Any) -> list[MatrixRow]:
    """Rows from YAML: [{os, artifact_name, script, arch?, enabled?}, ...]."""
    if not isinstance(raw, list):
        msg = "matrix must be a list of rows"
        raise ConfigError(msg)
    rows: list[MatrixRow] = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            msg = f"matrix[{i}] must be a mapping"
            raise ConfigError(msg)
        missing = [k for k in ("os", "artifact_name", "script") if not item.get(k)]
        if missing:
            msg = f"matrix[{i}] missing {', '.join(missing)}"
            raise ConfigError(msg)
        script = str(item["script"])
        # accept the legacy script file names (build_android.sh -> android)
        script = script.removeprefix("build_").removesuffix(".sh")
        rows.append(
            MatrixRow(
                runner=str(item["os"]),
                artifact_name=str(item["artifact_name"]),
                script=script,
                arch_flag=str(item["arch"]) if item.get("arch") else None,
                enabled=bool(item.get("enabled", True)),
            )
        )
    return rows


def validate_matrix(rows: list[MatrixRow], library: str, artifact_prefix: str | None = None) -> None:
    """Unique artifact names, known scripts, and each name equal to its target's published name."""
    seen: set[str] = set()
    for row in rows:
        if row.artifact_name in seen:
            msg = f"Duplicate artifact name in matrix: {row.artifact_name}"
            raise ConfigError(msg)
        seen.add(row.artifact_name)
        if row.script not in FAMILIES:
            msg = f"{row.artifact_name}: unknown script {row.script!r} (use {', '.join(FAMILIES)})"
            raise ConfigError(msg)
        try:
            d = row_target(row, library, artifact_prefix)
        except PipelineError as e:
            msg = f"{row.artifact_name}: runner {row.runner!r} cannot build {row.script}: {e}"
            raise ConfigError(msg) from e
        if d.published_name != row.artifact_name:
            msg = (
                f"{row.artifact_name}: {row.script} on {row.runner} publishes "
                f"{d.published_name!r}; artifact_name must match"
            )
            raise ConfigError(msg)


def enabled_rows(rows: list[MatrixRow], only: list[str] | None = None) -> list[MatrixRow]:
    if only:
        wanted = set(only)
        unknown = wanted - {r.artifact_name for r in rows}
        if unknown:
            msg = f"Unknown matrix rows: {', '.join(sorted(unknown))}"
            raise ConfigError(msg)
        return [r for r in rows if r.artifact_name in wanted]
    return [r for r in rows if r.enabled]
