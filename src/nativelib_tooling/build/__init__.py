"""Host-aware native library build: host detection, toolchain resolution, cargo, artifact naming."""

from .host import HostOS, detect_host_os, ndk_host_tag, select_target
from .pipeline import BuildResult, build_target, run_pipeline
from .pipeline import run as run_build
from .targets import Arch, TargetDescriptor, TargetOS, describe_target, raw_output_path
from .toolchain import ToolchainBinding, ensure_compiler_alias, resolve_ndk_root, resolve_toolchain

__all__ = [
    "Arch",
    "BuildResult",
    "HostOS",
    "TargetDescriptor",
    "TargetOS",
    "ToolchainBinding",
    "build_target",
    "describe_target",
    "detect_host_os",
    "ensure_compiler_alias",
    "ndk_host_tag",
    "raw_output_path",
    "resolve_ndk_root",
    "resolve_toolchain",
    "run_build",
    "run_pipeline",
    "select_target",
]
