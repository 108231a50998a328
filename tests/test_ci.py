"""Tests for ci: release tag gate and Actions matrix export."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from nativelib_tooling.ci import actions_matrix, compare_versions, run_actions_matrix, run_validate_tag_cli, validate_tag
from nativelib_tooling.errors import UploadRejected
from nativelib_tooling.release.matrix import MatrixRow, default_matrix


class TestValidateTag:
    def test_greater_passes(self) -> None:
        assert validate_tag("v1.3.0", "1.2.9") == 0

    def test_first_release(self) -> None:
        assert validate_tag("v0.1.0", None) == 0

    def test_same_needs_allow_same(self) -> None:
        with pytest.raises(SystemExit):
            validate_tag("v1.2.3", "1.2.3")
        assert validate_tag("v1.2.3", "1.2.3", allow_same=True) == 0

    def test_downgrade(self, capsys) -> None:
        with pytest.raises(SystemExit):
            validate_tag("v1.2.0", "1.3.0")
        assert "downgrade" in capsys.readouterr().err

    def test_not_a_version(self) -> None:
        with pytest.raises(SystemExit):
            validate_tag("nightly", None)

    def test_rc_ordering(self) -> None:
        assert compare_versions("1.0.0-rc.10", "1.0.0-rc.2") > 0
        assert compare_versions("1.0.0", "1.0.0-rc.9") > 0


class TestValidateTagCli:
    def test_tag_from_github_ref(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITHUB_REF", "refs/tags/v2.0.0")
        assert run_validate_tag_cli(None, latest="1.9.9") == 0

    def test_no_tag(self) -> None:
        assert run_validate_tag_cli(None, latest="1.0.0") == 1

    def test_latest_needs_repo_and_token(self) -> None:
        assert run_validate_tag_cli("v1.0.0") == 1

    def test_latest_fetched(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITHUB_REPOSITORY", "acme/core")
        monkeypatch.setenv("GITHUB_TOKEN", "t")
        with patch("nativelib_tooling.release.github.GitHubReleases.latest_tag", return_value="1.0.0"):
            assert run_validate_tag_cli("v1.0.0") == 1
            assert run_validate_tag_cli("v1.0.1") == 0

    def test_latest_fetch_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITHUB_REPOSITORY", "acme/core")
        monkeypatch.setenv("GITHUB_TOKEN", "bad")
        with patch(
            "nativelib_tooling.release.github.GitHubReleases.latest_tag",
            side_effect=UploadRejected("HTTP 401", status=401),
        ):
            assert run_validate_tag_cli("v1.0.0") == 1


class TestActionsMatrix:
    def test_include_rows(self) -> None:
        rows = [MatrixRow("macos-latest", "libcore_android_x64.so", "android", "x64")]
        assert actions_matrix(rows) == {
            "include": [
                {"os": "macos-latest", "artifact_name": "libcore_android_x64.so", "script": "android", "arch": "x64"}
            ]
        }

    def test_run_writes_github_output(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
        out = tmp_path / "github_output"
        monkeypatch.setenv("GITHUB_OUTPUT", str(out))
        assert run_actions_matrix(default_matrix("core")) == 0
        printed = json.loads(capsys.readouterr().out)
        assert len(printed["include"]) == 5
        line = out.read_text()
        assert line.startswith("matrix=")
        assert json.loads(line[len("matrix=") :]) == printed

    def test_include_disabled(self, capsys) -> None:
        assert run_actions_matrix(default_matrix("core"), include_disabled=True) == 0
        assert len(json.loads(capsys.readouterr().out)["include"]) == 6

    def test_empty_matrix(self) -> None:
        assert run_actions_matrix([]) == 1
