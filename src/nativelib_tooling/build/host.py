"""Host detection: canonical OS tag, NDK prebuilt host tag, and entry-point target selection."""

from __future__ import annotations

import platform
from enum import Enum

from nativelib_tooling.build.targets import Arch, TargetDescriptor, TargetOS, describe_target
from nativelib_tooling.errors import ConfigError, UnsupportedPlatform

FAMILIES = ("desktop", "android")


class HostOS(str, Enum):
    LINUX = "linux"
    DARWIN = "darwin"
    WINDOWS = "windows"
    UNSUPPORTED = "unsupported"


_WINDOWS_PREFIXES = ("windows", "mingw", "msys", "cygwin")

NDK_HOST_TAGS: dict[HostOS, str] = {
    HostOS.LINUX: "linux-x86_64",
    HostOS.DARWIN: "darwin-x86_64",
}


def detect_host_os(system: str | None = None) -> HostOS:
    """Map an OS identifier (default platform.system()) to HostOS.

    Unrecognized identifiers map to UNSUPPORTED; they are never routed to the windows build.
    """
    name = (system if system is not None else platform.system()).strip().lower()
    if name.startswith("linux"):
        return HostOS.LINUX
    if name.startswith("darwin"):
        return HostOS.DARWIN
    if name.startswith(_WINDOWS_PREFIXES):
        return HostOS.WINDOWS
    return HostOS.UNSUPPORTED


def require_supported(host: HostOS, system: str | None = None) -> HostOS:
    if host is HostOS.UNSUPPORTED:
        seen = system if system is not None else platform.system()
        msg = f"Unsupported host OS: {seen!r}"
        raise UnsupportedPlatform(msg, hint="Supported hosts: Linux, macOS, Windows")
    return host


def ndk_host_tag(host: HostOS) -> str:
    """NDK prebuilt directory tag for the host (toolchains/llvm/prebuilt/<tag>)."""
    try:
        return NDK_HOST_TAGS[host]
    except KeyError:
        msg = f"Android builds are not supported on host {host.value!r}"
        raise UnsupportedPlatform(msg, hint="Run the android build on a Linux or macOS runner") from None


def parse_arch_flag(arch_flag: str | None) -> Arch | None:
    """Optional architecture selector: None/'' -> family default, 'x64' -> x64, 'arm64' -> arm64."""
    if not arch_flag:
        return None
    try:
        return Arch(arch_flag.lower())
    except ValueError:
        msg = f"Unknown architecture selector: {arch_flag!r}. Use x64 or arm64."
        raise ConfigError(msg) from None


def select_target(
    family: str,
    arch_flag: str | None,
    host: HostOS,
    library: str,
    artifact_prefix: str | None = None,
) -> TargetDescriptor:
    """Resolve which TargetDescriptor an entry point builds on this host."""
    arch = parse_arch_flag(arch_flag)
    if family == "android":
        return describe_target(TargetOS.ANDROID, arch or Arch.ARM64, library, artifact_prefix)
    if family != "desktop":
        msg = f"Unknown platform family: {family!r}. Use one of {', '.join(FAMILIES)}."
        raise ConfigError(msg)

    require_supported(host)
    if host is HostOS.DARWIN:
        return describe_target(TargetOS.MACOS, arch or Arch.ARM64, library, artifact_prefix)
    os_ = TargetOS.LINUX if host is HostOS.LINUX else TargetOS.WINDOWS
    if arch not in (None, Arch.X64):
        msg = f"{os_.value} desktop builds only x64; got {arch.value!r}"
        raise ConfigError(msg)
    return describe_target(os_, Arch.X64, library, artifact_prefix)
