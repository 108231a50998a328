"""Tests for nativelib_tooling.build.toolchain (NDK discovery, clang alias, rustup, env)."""

import os
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from conftest import make_ndk

from nativelib_tooling.build.host import HostOS
from nativelib_tooling.build.targets import describe_target
from nativelib_tooling.build.toolchain import (
    ToolchainBinding,
    ensure_compiler_alias,
    ensure_rust_target,
    resolve_android_toolchain,
    resolve_ndk_root,
    resolve_toolchain,
)
from nativelib_tooling.errors import AliasSetupFailed, ToolchainNotFound


class TestResolveNdkRoot:
    def test_ndk_home_wins(self, tmp_path: Path) -> None:
        home = tmp_path / "home"
        root = tmp_path / "root"
        home.mkdir()
        root.mkdir()
        env = {"ANDROID_NDK_HOME": str(home), "ANDROID_NDK_ROOT": str(root)}
        assert resolve_ndk_root(env) == home

    def test_ndk_root_when_home_unset(self, tmp_path: Path) -> None:
        env = {"ANDROID_NDK_ROOT": str(tmp_path)}
        assert resolve_ndk_root(env) == tmp_path

    def test_missing_home_dir_falls_through(self, tmp_path: Path) -> None:
        env = {"ANDROID_NDK_HOME": str(tmp_path / "gone"), "ANDROID_NDK_ROOT": str(tmp_path)}
        assert resolve_ndk_root(env) == tmp_path

    def test_sdk_root_ndk_subdir(self, tmp_path: Path) -> None:
        (tmp_path / "sdk" / "ndk" / "toolchains").mkdir(parents=True)
        env = {"ANDROID_SDK_ROOT": str(tmp_path / "sdk")}
        assert resolve_ndk_root(env) == tmp_path / "sdk" / "ndk"

    def test_sdk_side_by_side_picks_newest(self, tmp_path: Path) -> None:
        for v in ("23.1.7779620", "25.2.9519653", "25.10.1"):
            (tmp_path / "sdk" / "ndk" / v / "toolchains").mkdir(parents=True)
        env = {"ANDROID_HOME": str(tmp_path / "sdk")}
        assert resolve_ndk_root(env) == tmp_path / "sdk" / "ndk" / "25.10.1"

    def test_nothing_set_raises(self) -> None:
        with pytest.raises(ToolchainNotFound) as exc_info:
            resolve_ndk_root({}, target="android-arm64")
        assert exc_info.value.target == "android-arm64"
        assert "ANDROID_NDK_HOME" in str(exc_info.value)

    def test_sdk_without_ndk_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ToolchainNotFound):
            resolve_ndk_root({"ANDROID_SDK_ROOT": str(tmp_path)})

    def test_reads_os_environ_by_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ANDROID_NDK_ROOT", str(tmp_path))
        assert resolve_ndk_root() == tmp_path


class TestEnsureCompilerAlias:
    def test_copies_versioned_clang(self, fake_ndk: tuple[Path, Path]) -> None:
        _, bin_dir = fake_ndk
        alias = ensure_compiler_alias(bin_dir, "aarch64-linux-android", 29)
        src = bin_dir / "aarch64-linux-android29-clang"
        assert alias == bin_dir / "aarch64-linux-android-clang"
        assert alias.read_bytes() == src.read_bytes()
        assert os.access(alias, os.X_OK)

    def test_idempotent(self, fake_ndk: tuple[Path, Path], capsys: pytest.CaptureFixture[str]) -> None:
        _, bin_dir = fake_ndk
        first = ensure_compiler_alias(bin_dir, "aarch64-linux-android").read_bytes()
        capsys.readouterr()
        second = ensure_compiler_alias(bin_dir, "aarch64-linux-android").read_bytes()
        assert first == second
        assert "🔗" not in capsys.readouterr().out
        assert not [p for p in bin_dir.iterdir() if p.name.startswith(".")]

    def test_stale_alias_replaced(self, fake_ndk: tuple[Path, Path]) -> None:
        _, bin_dir = fake_ndk
        stale = bin_dir / "x86_64-linux-android-clang"
        stale.write_text("old")
        ensure_compiler_alias(bin_dir, "x86_64-linux-android")
        assert stale.read_bytes() == (bin_dir / "x86_64-linux-android29-clang").read_bytes()

    def test_missing_versioned_compiler(self, fake_ndk: tuple[Path, Path]) -> None:
        _, bin_dir = fake_ndk
        with pytest.raises(AliasSetupFailed) as exc_info:
            ensure_compiler_alias(bin_dir, "aarch64-linux-android", 21, target="android-arm64")
        assert "aarch64-linux-android21-clang" in str(exc_info.value)
        assert not (bin_dir / "aarch64-linux-android-clang").exists()

    def test_copy_error_raises_alias_failed(self, fake_ndk: tuple[Path, Path]) -> None:
        _, bin_dir = fake_ndk
        with patch("nativelib_tooling.build.toolchain.shutil.copy2", side_effect=PermissionError("read-only")):
            with pytest.raises(AliasSetupFailed):
                ensure_compiler_alias(bin_dir, "aarch64-linux-android")
        assert not (bin_dir / "aarch64-linux-android-clang").exists()


class TestToolchainBinding:
    def test_cargo_env_keys(self, tmp_path: Path) -> None:
        b = ToolchainBinding(tmp_path / "cc", tmp_path / "cc", tmp_path / "ar", bin_dir=tmp_path)
        env = b.cargo_env("aarch64-linux-android", {"PATH": "/usr/bin"})
        assert env["CARGO_TARGET_AARCH64_LINUX_ANDROID_LINKER"] == str(tmp_path / "cc")
        assert env["CARGO_TARGET_AARCH64_LINUX_ANDROID_AR"] == str(tmp_path / "ar")
        assert env["CC_aarch64_linux_android"] == str(tmp_path / "cc")
        assert env["AR_aarch64_linux_android"] == str(tmp_path / "ar")
        assert env["PATH"] == f"{tmp_path}{os.pathsep}/usr/bin"

    def test_cargo_env_does_not_touch_os_environ(self, tmp_path: Path) -> None:
        before = dict(os.environ)
        b = ToolchainBinding(tmp_path / "cc", tmp_path / "cc", tmp_path / "ar", bin_dir=tmp_path)
        b.cargo_env("x86_64-linux-android")
        assert dict(os.environ) == before


class TestResolveAndroidToolchain:
    def test_binding_from_ndk(self, fake_ndk: tuple[Path, Path]) -> None:
        root, bin_dir = fake_ndk
        d = describe_target("android", "arm64", "core")
        b = resolve_android_toolchain(d, HostOS.LINUX, env={"ANDROID_NDK_HOME": str(root)})
        assert b.compiler_path == bin_dir / "aarch64-linux-android-clang"
        assert b.linker_path == b.compiler_path
        assert b.archiver_path == bin_dir / "llvm-ar"
        assert b.bin_dir == bin_dir

    def test_legacy_triple_ar_preferred(self, fake_ndk: tuple[Path, Path]) -> None:
        root, bin_dir = fake_ndk
        (bin_dir / "x86_64-linux-android-ar").write_text("")
        d = describe_target("android", "x64", "core")
        b = resolve_android_toolchain(d, HostOS.LINUX, env={"ANDROID_NDK_HOME": str(root)})
        assert b.archiver_path == bin_dir / "x86_64-linux-android-ar"

    def test_wrong_host_tag_raises(self, fake_ndk: tuple[Path, Path]) -> None:
        root, _ = fake_ndk
        d = describe_target("android", "arm64", "core")
        with pytest.raises(ToolchainNotFound) as exc_info:
            resolve_android_toolchain(d, HostOS.DARWIN, env={"ANDROID_NDK_HOME": str(root)})
        assert "darwin-x86_64" in str(exc_info.value)

    def test_darwin_host(self, tmp_path: Path) -> None:
        bin_dir = make_ndk(tmp_path / "ndk", host_tag="darwin-x86_64")
        d = describe_target("android", "x64", "core")
        b = resolve_android_toolchain(d, HostOS.DARWIN, env={"ANDROID_NDK_ROOT": str(tmp_path / "ndk")})
        assert b.compiler_path == bin_dir / "x86_64-linux-android-clang"


class TestRustTarget:
    @patch("subprocess.run")
    def test_rustup_target_add(self, mock_run: MagicMock) -> None:
        mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
        ensure_rust_target("aarch64-linux-android")
        assert mock_run.call_args[0][0] == ["rustup", "target", "add", "aarch64-linux-android"]

    @patch("subprocess.run")
    def test_rustup_failure(self, mock_run: MagicMock) -> None:
        mock_run.return_value = MagicMock(returncode=1, stdout="", stderr="error: toolchain not installed")
        with pytest.raises(ToolchainNotFound) as exc_info:
            ensure_rust_target("aarch64-linux-android")
        assert "toolchain not installed" in str(exc_info.value)

    @patch("subprocess.run", side_effect=FileNotFoundError("rustup"))
    def test_rustup_missing(self, _mock_run: MagicMock) -> None:
        with pytest.raises(ToolchainNotFound):
            ensure_rust_target("x86_64-apple-darwin")

    @patch("subprocess.run")
    def test_native_desktop_needs_nothing(self, mock_run: MagicMock) -> None:
        d = describe_target("linux", "x64", "core")
        assert resolve_toolchain(d, HostOS.LINUX) is None
        mock_run.assert_not_called()

    @patch("subprocess.run")
    def test_cross_desktop_adds_target_only(self, mock_run: MagicMock) -> None:
        mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
        d = describe_target("macos", "x64", "core")
        assert resolve_toolchain(d, HostOS.DARWIN) is None
        mock_run.assert_called_once()
