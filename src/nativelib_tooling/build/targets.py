"""Target descriptors: triple, library naming and the published artifact name per (os, arch).

The raw output path (target/[triple/]release/<lib>) and the published name
(lib<prefix>_<label>.<ext>) must stay in lockstep with cargo's naming.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class TargetOS(str, Enum):
    LINUX = "linux"
    MACOS = "macos"
    WINDOWS = "windows"
    ANDROID = "android"


class Arch(str, Enum):
    X64 = "x64"
    ARM64 = "arm64"


# os -> (lib prefix, lib suffix) as emitted by cargo for a cdylib
LIB_NAMING: dict[TargetOS, tuple[str, str]] = {
    TargetOS.LINUX: ("lib", ".so"),
    TargetOS.MACOS: ("lib", ".dylib"),
    TargetOS.WINDOWS: ("", ".dll"),
    TargetOS.ANDROID: ("lib", ".so"),
}


@dataclass(frozen=True)
class TargetSpec:
    """Static part of a target: everything except the library names."""

    os: TargetOS
    arch: Arch
    triple: str
    label: str
    native: bool = False


# (os, arch) -> spec. native targets build without --target (output in target/release).
TARGETS: dict[tuple[TargetOS, Arch], TargetSpec] = {
    (TargetOS.LINUX, Arch.X64): TargetSpec(
        TargetOS.LINUX, Arch.X64, "x86_64-unknown-linux-gnu", "linux", native=True
    ),
    (TargetOS.MACOS, Arch.ARM64): TargetSpec(
        TargetOS.MACOS, Arch.ARM64, "aarch64-apple-darwin", "macos"
    ),
    (TargetOS.MACOS, Arch.X64): TargetSpec(
        TargetOS.MACOS, Arch.X64, "x86_64-apple-darwin", "macos_x64"
    ),
    (TargetOS.WINDOWS, Arch.X64): TargetSpec(
        TargetOS.WINDOWS, Arch.X64, "x86_64-pc-windows-msvc", "windows", native=True
    ),
    (TargetOS.ANDROID, Arch.ARM64): TargetSpec(
        TargetOS.ANDROID, Arch.ARM64, "aarch64-linux-android", "android_arm64"
    ),
    (TargetOS.ANDROID, Arch.X64): TargetSpec(
        TargetOS.ANDROID, Arch.X64, "x86_64-linux-android", "android_x64"
    ),
}


@dataclass(frozen=True)
class TargetDescriptor:
    os: TargetOS
    arch: Arch
    triple: str
    label: str
    native: bool
    artifact_base_name: str
    published_name: str

    @property
    def display(self) -> str:
        """Operator-facing name, e.g. android-arm64 (aarch64-linux-android)."""
        return f"{self.os.value}-{self.arch.value} ({self.triple})"


def library_file_name(os_: TargetOS, name: str) -> str:
    """File name cargo emits for a cdylib named `name` on os_."""
    prefix, suffix = LIB_NAMING[os_]
    return f"{prefix}{name}{suffix}"


def published_file_name(os_: TargetOS, prefix_name: str, label: str) -> str:
    """Stable external name: lib<prefix>_<label>.<ext> (no lib prefix on windows)."""
    prefix, suffix = LIB_NAMING[os_]
    return f"{prefix}{prefix_name}_{label}{suffix}"


def describe_target(
    os_: TargetOS | str,
    arch: Arch | str,
    library: str,
    artifact_prefix: str | None = None,
) -> TargetDescriptor:
    """Build the descriptor for (os, arch). Raises KeyError for combinations not in TARGETS."""
    os_ = TargetOS(os_)
    arch = Arch(arch)
    spec = TARGETS[(os_, arch)]
    return TargetDescriptor(
        os=spec.os,
        arch=spec.arch,
        triple=spec.triple,
        label=spec.label,
        native=spec.native,
        artifact_base_name=library_file_name(spec.os, library),
        published_name=published_file_name(spec.os, artifact_prefix or library, spec.label),
    )


def all_targets(library: str, artifact_prefix: str | None = None) -> list[TargetDescriptor]:
    return [describe_target(os_, arch, library, artifact_prefix) for os_, arch in TARGETS]


def raw_output_path(descriptor: TargetDescriptor, target_root: Path) -> Path:
    """<target_root>/[<triple>/]release/<artifact_base_name>."""
    base = target_root if descriptor.native else target_root / descriptor.triple
    return base / "release" / descriptor.artifact_base_name
