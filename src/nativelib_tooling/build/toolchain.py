"""Toolchain resolution: NDK discovery, versioned clang alias, rustup targets, cargo env bindings.

NDK root order: ANDROID_NDK_HOME -> ANDROID_NDK_ROOT -> $ANDROID_SDK_ROOT/ndk (ANDROID_HOME
accepted for the SDK root). Unset or missing directories are skipped.

The NDK ships API-level clang wrappers (aarch64-linux-android29-clang) but cargo and cc-rs
look for the unversioned name (aarch64-linux-android-clang), so the wrapper is copied to
the unversioned name once per target before building.
"""

from __future__ import annotations

import filecmp
import logging
import os
import shutil
import subprocess
import tempfile
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from nativelib_tooling.build.host import HostOS, ndk_host_tag
from nativelib_tooling.build.targets import TargetDescriptor, TargetOS
from nativelib_tooling.errors import AliasSetupFailed, ToolchainNotFound
from nativelib_tooling.helpers import cargo_target_key, cc_target_key, dotted_version_key

log = logging.getLogger(__name__)

DEFAULT_ANDROID_API_LEVEL = 29

NDK_ENV_VARS = ("ANDROID_NDK_HOME", "ANDROID_NDK_ROOT")
SDK_ENV_VARS = ("ANDROID_SDK_ROOT", "ANDROID_HOME")


@dataclass(frozen=True)
class ToolchainBinding:
    """Resolved compiler/linker/archiver for one target. Lives for one pipeline invocation."""

    compiler_path: Path
    linker_path: Path
    archiver_path: Path
    bin_dir: Path | None = None

    def cargo_env(self, triple: str, base_env: Mapping[str, str] | None = None) -> dict[str, str]:
        """Environment overlay the build tool reads for `triple`. Does not touch os.environ."""
        env = dict(os.environ if base_env is None else base_env)
        key = cargo_target_key(triple)
        cc_key = cc_target_key(triple)
        env[f"CARGO_TARGET_{key}_LINKER"] = str(self.linker_path)
        env[f"CARGO_TARGET_{key}_AR"] = str(self.archiver_path)
        env[f"CC_{cc_key}"] = str(self.compiler_path)
        env[f"AR_{cc_key}"] = str(self.archiver_path)
        if self.bin_dir is not None:
            current = env.get("PATH", "")
            env["PATH"] = str(self.bin_dir) + (os.pathsep + current if current else "")
        return env


def _candidate_dir(raw: str | None, source: str) -> Path | None:
    if not raw:
        log.debug("NDK candidate %s not set", source)
        return None
    p = Path(raw).expanduser()
    if not p.is_dir():
        log.debug("NDK candidate %s=%s is not a directory", source, p)
        return None
    return p


def _ndk_under_sdk(sdk_root: Path) -> Path | None:
    """$SDK/ndk, or the newest side-by-side $SDK/ndk/<version> when ndk/ holds versions."""
    ndk = sdk_root / "ndk"
    if not ndk.is_dir():
        log.debug("SDK root %s has no ndk/ directory", sdk_root)
        return None
    if (ndk / "toolchains").is_dir():
        return ndk
    versions = [d for d in ndk.iterdir() if d.is_dir() and (d / "toolchains").is_dir()]
    if versions:
        return max(versions, key=lambda d: dotted_version_key(d.name))
    return ndk


def resolve_ndk_root(env: Mapping[str, str] | None = None, target: str | None = None) -> Path:
    """First existing of NDK home, NDK root, SDK-derived ndk. Raises ToolchainNotFound."""
    env = os.environ if env is None else env
    for var in NDK_ENV_VARS:
        found = _candidate_dir(env.get(var), var)
        if found is not None:
            log.debug("Using NDK from %s: %s", var, found)
            return found
    for var in SDK_ENV_VARS:
        sdk = _candidate_dir(env.get(var), var)
        if sdk is None:
            continue
        found = _ndk_under_sdk(sdk)
        if found is not None:
            log.debug("Using NDK derived from %s: %s", var, found)
            return found
    msg = "Android NDK not found"
    raise ToolchainNotFound(
        msg,
        target=target,
        hint="Set ANDROID_NDK_HOME, ANDROID_NDK_ROOT, or ANDROID_SDK_ROOT (with ndk/ installed)",
    )


def ndk_bin_dir(ndk_root: Path, host_tag: str) -> Path:
    return ndk_root / "toolchains" / "llvm" / "prebuilt" / host_tag / "bin"


def ensure_compiler_alias(
    bin_dir: Path,
    triple: str,
    api_level: int = DEFAULT_ANDROID_API_LEVEL,
    target: str | None = None,
) -> Path:
    """Copy <triple><api>-clang to <triple>-clang. Idempotent; the copy lands via atomic rename."""
    src = bin_dir / f"{triple}{api_level}-clang"
    dst = bin_dir / f"{triple}-clang"
    if not src.is_file():
        msg = f"Versioned compiler not found: {src}"
        raise AliasSetupFailed(
            msg, target=target, hint=f"Check the NDK installation supports API level {api_level}"
        )
    try:
        if dst.is_file() and filecmp.cmp(src, dst, shallow=False):
            log.debug("Compiler alias already up to date: %s", dst)
            return dst
        fd, tmp_name = tempfile.mkstemp(prefix=f".{dst.name}.", dir=bin_dir)
        os.close(fd)
        tmp = Path(tmp_name)
        try:
            shutil.copy2(src, tmp)
            os.replace(tmp, dst)
        finally:
            tmp.unlink(missing_ok=True)
    except OSError as e:
        msg = f"Could not copy {src.name} -> {dst.name}: {e}"
        raise AliasSetupFailed(msg, target=target) from e
    print(f"🔗 {src.name} -> {dst.name}")
    return dst


def _archiver(bin_dir: Path, triple: str) -> Path:
    """<triple>-ar from older NDKs, else llvm-ar (r23+ dropped per-triple binutils)."""
    legacy = bin_dir / f"{triple}-ar"
    if legacy.exists():
        return legacy
    llvm_ar = bin_dir / "llvm-ar"
    if llvm_ar.exists():
        return llvm_ar
    return legacy


def resolve_android_toolchain(
    descriptor: TargetDescriptor,
    host: HostOS,
    env: Mapping[str, str] | None = None,
    api_level: int = DEFAULT_ANDROID_API_LEVEL,
) -> ToolchainBinding:
    """NDK root -> host bin dir -> clang alias -> binding for descriptor.triple."""
    who = descriptor.display
    host_tag = ndk_host_tag(host)
    ndk_root = resolve_ndk_root(env, target=who)
    bin_dir = ndk_bin_dir(ndk_root, host_tag)
    if not bin_dir.is_dir():
        msg = f"NDK toolchain directory not found: {bin_dir}"
        raise ToolchainNotFound(msg, target=who, hint=f"Expected a {host_tag} prebuilt toolchain")
    print(f"🧰 NDK toolchain: {bin_dir}")
    clang = ensure_compiler_alias(bin_dir, descriptor.triple, api_level, target=who)
    return ToolchainBinding(
        compiler_path=clang,
        linker_path=clang,
        archiver_path=_archiver(bin_dir, descriptor.triple),
        bin_dir=bin_dir,
    )


def ensure_rust_target(triple: str, target: str | None = None) -> None:
    """rustup target add <triple>. Raises ToolchainNotFound on failure."""
    try:
        r = subprocess.run(["rustup", "target", "add", triple], capture_output=True, text=True)
    except FileNotFoundError as e:
        msg = "rustup not found in PATH"
        raise ToolchainNotFound(msg, target=target, hint="Install rustup") from e
    if r.returncode != 0:
        msg = f"rustup target add {triple} failed: {(r.stderr or r.stdout).strip()}"
        raise ToolchainNotFound(msg, target=target)
    log.debug("rustup target add %s: %s", triple, (r.stderr or "").strip())


def resolve_toolchain(
    descriptor: TargetDescriptor,
    host: HostOS,
    env: Mapping[str, str] | None = None,
    api_level: int = DEFAULT_ANDROID_API_LEVEL,
) -> ToolchainBinding | None:
    """Binding for Android targets; None (host default toolchain) for desktop targets.

    Non-native targets get their rust std component installed first.
    """
    if not descriptor.native:
        ensure_rust_target(descriptor.triple, target=descriptor.display)
    if descriptor.os is TargetOS.ANDROID:
        return resolve_android_toolchain(descriptor, host, env=env, api_level=api_level)
    return None
