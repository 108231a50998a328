"""Pytest fixtures for nativelib tooling tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock

import pytest

ANDROID_ENV_VARS = ("ANDROID_NDK_HOME", "ANDROID_NDK_ROOT", "ANDROID_SDK_ROOT", "ANDROID_HOME")
GITHUB_ENV_VARS = ("GITHUB_TOKEN", "GH_TOKEN", "GITHUB_REPOSITORY", "GITHUB_REF", "GITHUB_OUTPUT")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """No ambient Android SDK/NDK or GitHub settings leak into tests."""
    for var in (*ANDROID_ENV_VARS, *GITHUB_ENV_VARS, "CARGO_TARGET_DIR"):
        monkeypatch.delenv(var, raising=False)


def make_ndk(root: Path, host_tag: str = "linux-x86_64", api_level: int = 29) -> Path:
    """Fake NDK at root with versioned clang wrappers for both Android triples. Returns the bin dir."""
    bin_dir = root / "toolchains" / "llvm" / "prebuilt" / host_tag / "bin"
    bin_dir.mkdir(parents=True)
    for triple in ("aarch64-linux-android", "x86_64-linux-android"):
        clang = bin_dir / f"{triple}{api_level}-clang"
        clang.write_text(f"#!/bin/sh\n# {triple} clang wrapper\nexec clang --target={triple}{api_level} \"$@\"\n")
        clang.chmod(0o755)
    (bin_dir / "llvm-ar").write_text("#!/bin/sh\n")
    return bin_dir


@pytest.fixture
def fake_ndk(tmp_path: Path) -> tuple[Path, Path]:
    """(ndk_root, bin_dir) for a linux-x86_64 NDK."""
    root = tmp_path / "ndk"
    return root, make_ndk(root)


def cargo_side_effect(
    file_name: str,
    content: bytes = b"\x7fELF library",
    cargo_returncode: int = 0,
) -> Callable[..., MagicMock]:
    """subprocess.run stand-in: rustup succeeds; a successful cargo writes file_name where cargo would.

    Output goes to <CARGO_TARGET_DIR or cwd/target>/[<--target triple>/]release/<file_name>.
    """

    def run(cmd, *args, **kwargs):
        if cmd[0] == "cargo" and cargo_returncode == 0:
            env = kwargs.get("env") or {}
            if "CARGO_TARGET_DIR" in env:
                root = Path(env["CARGO_TARGET_DIR"])
            else:
                root = Path(kwargs["cwd"]) / "target"
            if "--target" in cmd:
                root = root / cmd[cmd.index("--target") + 1]
            out = root / "release" / file_name
            out.parent.mkdir(parents=True, exist_ok=True)
            out.write_bytes(content)
        returncode = cargo_returncode if cmd[0] == "cargo" else 0
        return MagicMock(returncode=returncode, stdout="", stderr="")

    return run
