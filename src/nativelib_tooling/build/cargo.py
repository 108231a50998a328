"""Build invoker: one release cargo build for one target."""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path

from nativelib_tooling.build.targets import TargetDescriptor
from nativelib_tooling.build.toolchain import ToolchainBinding
from nativelib_tooling.errors import BuildFailed, ToolchainNotFound

log = logging.getLogger(__name__)


def cargo_command(
    descriptor: TargetDescriptor,
    extra_args: Sequence[str] = (),
    tool: str = "cargo",
) -> list[str]:
    cmd = [tool, "build", "--release"]
    if not descriptor.native:
        cmd += ["--target", descriptor.triple]
    cmd += list(extra_args)
    return cmd


def build_env(
    descriptor: TargetDescriptor,
    binding: ToolchainBinding | None,
    target_dir: Path | None = None,
    base_env: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Child-process environment: base env + binding overlay + optional CARGO_TARGET_DIR."""
    if binding is not None:
        env = binding.cargo_env(descriptor.triple, base_env)
    else:
        env = dict(os.environ if base_env is None else base_env)
    if target_dir is not None:
        env["CARGO_TARGET_DIR"] = str(target_dir)
    return env


def run_cargo_build(
    descriptor: TargetDescriptor,
    crate_dir: Path,
    binding: ToolchainBinding | None = None,
    target_dir: Path | None = None,
    extra_args: Sequence[str] = (),
    base_env: Mapping[str, str] | None = None,
) -> None:
    """cargo build --release [--target triple] in crate_dir. Raises BuildFailed on non-zero exit.

    No retry: a failing build fails the same way again for the same source and toolchain.
    """
    cmd = cargo_command(descriptor, extra_args)
    env = build_env(descriptor, binding, target_dir, base_env)
    print(f"🔨 Building {descriptor.display}: {' '.join(cmd)}")
    log.debug("cargo cwd=%s target_dir=%s", crate_dir, target_dir)
    try:
        r = subprocess.run(cmd, cwd=str(crate_dir), env=env)
    except FileNotFoundError as e:
        msg = "cargo not found in PATH"
        raise ToolchainNotFound(msg, target=descriptor.display, hint="Install the Rust toolchain") from e
    if r.returncode != 0:
        msg = f"cargo build exited with {r.returncode}"
        raise BuildFailed(msg, returncode=r.returncode, target=descriptor.display)
