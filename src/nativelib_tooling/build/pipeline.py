"""One pipeline run: host -> toolchain -> cargo build -> published artifact.

Steps are strictly sequential; each consumes the previous step's output.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from nativelib_tooling.build.cargo import run_cargo_build
from nativelib_tooling.build.host import HostOS, detect_host_os, select_target
from nativelib_tooling.build.normalize import normalize_artifact
from nativelib_tooling.build.targets import TargetDescriptor, raw_output_path
from nativelib_tooling.build.toolchain import DEFAULT_ANDROID_API_LEVEL, resolve_toolchain
from nativelib_tooling.errors import ConfigError, PipelineError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildResult:
    descriptor: TargetDescriptor
    raw_output_path: Path
    published_path: Path


def build_target(
    descriptor: TargetDescriptor,
    host: HostOS,
    crate_dir: Path,
    out_dir: Path | None = None,
    target_dir: Path | None = None,
    api_level: int = DEFAULT_ANDROID_API_LEVEL,
    env: Mapping[str, str] | None = None,
    extra_args: Sequence[str] = (),
    write_checksum: bool = False,
) -> BuildResult:
    """Resolve toolchain, build and normalize one descriptor. Raises PipelineError subclasses."""
    out_dir = out_dir or crate_dir
    target_root = target_dir or (crate_dir / "target")
    binding = resolve_toolchain(descriptor, host, env=env, api_level=api_level)
    run_cargo_build(
        descriptor,
        crate_dir,
        binding=binding,
        target_dir=target_dir,
        extra_args=extra_args,
        base_env=env,
    )
    raw = raw_output_path(descriptor, target_root)
    published = normalize_artifact(descriptor, target_root, out_dir, write_checksum=write_checksum)
    return BuildResult(descriptor=descriptor, raw_output_path=raw, published_path=published)


def run_pipeline(
    family: str,
    arch_flag: str | None,
    crate_dir: Path,
    library: str,
    artifact_prefix: str | None = None,
    out_dir: Path | None = None,
    target_dir: Path | None = None,
    api_level: int = DEFAULT_ANDROID_API_LEVEL,
    env: Mapping[str, str] | None = None,
    system: str | None = None,
    extra_args: Sequence[str] = (),
    write_checksum: bool = False,
) -> BuildResult:
    """Detect host, pick the entry point's target, build it. Raises PipelineError/ConfigError."""
    host = detect_host_os(system)
    log.debug("host=%s family=%s arch=%s", host.value, family, arch_flag)
    descriptor = select_target(family, arch_flag, host, library, artifact_prefix)
    return build_target(
        descriptor,
        host,
        crate_dir,
        out_dir=out_dir,
        target_dir=target_dir,
        api_level=api_level,
        env=env,
        extra_args=extra_args,
        write_checksum=write_checksum,
    )


def run(
    family: str,
    arch_flag: str | None,
    crate_dir: Path,
    library: str,
    artifact_prefix: str | None = None,
    api_level: int = DEFAULT_ANDROID_API_LEVEL,
    extra_args: Sequence[str] = (),
    write_checksum: bool = False,
) -> int:
    """CLI seam for one platform-family entry point. Returns 0 or 1."""
    try:
        result = run_pipeline(
            family,
            arch_flag,
            crate_dir,
            library,
            artifact_prefix=artifact_prefix,
            api_level=api_level,
            extra_args=extra_args,
            write_checksum=write_checksum,
        )
    except PipelineError as e:
        print(f"❌ {e.describe()}", file=sys.stderr)
        return 1
    except ConfigError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1
    print(f"✅ {result.published_path}")
    return 0
