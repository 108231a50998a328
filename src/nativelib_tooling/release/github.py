"""GitHub Releases client: find/create the release for a tag, upload assets, latest tag.

4xx answers (bad token, unknown repo/tag, duplicate asset) are rejected immediately;
network errors and 5xx are retried with Fibonacci backoff.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from nativelib_tooling.errors import UploadRejected
from nativelib_tooling.helpers import backoff_for_attempt, fibonacci_backoff_sequence

log = logging.getLogger(__name__)

API_URL = "https://api.github.com"
UPLOADS_URL = "https://uploads.github.com"
USER_AGENT = "nativelib-tooling"


class Uploader(Protocol):
    def upload(self, path: Path, tag: str, asset_name: str) -> None:
        """Store the file at path as asset_name on the release for tag."""


@dataclass
class GitHubReleases:
    repo: str
    token: str
    max_retries: int = 5
    create_missing: bool = True
    overwrite: bool = False
    timeout: int = 60

    def _headers(self, content_type: str | None = None) -> dict[str, str]:
        h = {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self.token}",
            "User-Agent": USER_AGENT,
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if content_type:
            h["Content-Type"] = content_type
        return h

    def _request(
        self,
        method: str,
        url: str,
        data: bytes | None = None,
        content_type: str | None = None,
        allow_404: bool = False,
    ) -> Any:
        """Send one API call with retries. Returns parsed JSON (None for empty bodies or allowed 404)."""
        backoff = fibonacci_backoff_sequence(max_total_seconds=120)
        last_error: Exception | None = None
        for attempt in range(self.max_retries):
            req = Request(url, data=data, method=method, headers=self._headers(content_type))
            try:
                with urlopen(req, timeout=self.timeout) as response:
                    body = response.read()
                    return json.loads(body.decode()) if body else None
            except HTTPError as e:
                if e.code == 404 and allow_404:
                    return None
                if e.code < 500:
                    msg = f"GitHub rejected {method} {url}: HTTP {e.code} {e.reason}"
                    raise UploadRejected(msg, status=e.code, hint=_hint_for(e.code)) from e
                last_error = e
                reason = f"HTTP {e.code} error"
            except URLError as e:
                last_error = e
                reason = f"Network error ({e.reason})"
            except json.JSONDecodeError as e:
                last_error = e
                reason = f"Invalid JSON ({e})"
            wait_time = backoff_for_attempt(backoff, attempt)
            print(
                f"Retry {attempt + 1}/{self.max_retries}: {reason}, waiting {wait_time}s...",
                file=sys.stderr,
            )
            time.sleep(wait_time)
        msg = f"{method} {url} failed after {self.max_retries} retries: {last_error}"
        status = last_error.code if isinstance(last_error, HTTPError) else None
        raise UploadRejected(msg, status=status) from last_error

    def release_for_tag(self, tag: str) -> dict[str, Any]:
        """Release JSON for tag; created (non-draft) when missing and create_missing is set."""
        url = f"{API_URL}/repos/{self.repo}/releases/tags/{quote(tag, safe='')}"
        release = self._request("GET", url, allow_404=True)
        if release is not None:
            return release
        if not self.create_missing:
            msg = f"No release for tag {tag} in {self.repo}"
            raise UploadRejected(msg, status=404)
        print(f"Info:  creating release {tag} in {self.repo}")
        payload = json.dumps({"tag_name": tag, "name": tag}).encode()
        try:
            return self._request(
                "POST", f"{API_URL}/repos/{self.repo}/releases", payload, "application/json"
            )
        except UploadRejected as e:
            if e.status != 422:
                raise
        # another job created it between our GET and POST
        log.debug("Release %s already exists; fetching it again", tag)
        release = self._request("GET", url, allow_404=True)
        if release is None:
            msg = f"Could not create or find release for tag {tag} in {self.repo}"
            raise UploadRejected(msg, status=422, hint=_hint_for(422))
        return release

    def _delete_asset(self, asset_id: int) -> None:
        self._request("DELETE", f"{API_URL}/repos/{self.repo}/releases/assets/{asset_id}")

    def upload(self, path: Path, tag: str, asset_name: str) -> None:
        """Upload path as asset_name to the release for tag. Raises UploadRejected."""
        release = self.release_for_tag(tag)
        if not isinstance(release, dict) or "id" not in release:
            msg = f"Unexpected release payload for tag {tag}: {release!r}"
            raise UploadRejected(msg)
        for asset in release.get("assets") or []:
            if asset.get("name") != asset_name:
                continue
            if not self.overwrite:
                msg = f"Asset {asset_name} already exists on release {tag}"
                raise UploadRejected(msg, status=422, hint="Pass --overwrite to replace it")
            log.debug("Deleting existing asset %s (%s)", asset_name, asset.get("id"))
            self._delete_asset(asset["id"])

        url = (
            f"{UPLOADS_URL}/repos/{self.repo}/releases/{release['id']}/assets"
            f"?name={quote(asset_name, safe='')}"
        )
        print(f"📤 Uploading {path.name} as {asset_name} to {self.repo}@{tag}")
        self._request("POST", url, path.read_bytes(), "application/octet-stream")

    def latest_tag(self) -> str | None:
        """Latest published release tag without the 'v' prefix, or None when there is none."""
        data = self._request("GET", f"{API_URL}/repos/{self.repo}/releases/latest", allow_404=True)
        if not data:
            return None
        tag_name = data.get("tag_name", "")
        return tag_name.lstrip("v") if tag_name else None


def _hint_for(status: int) -> str | None:
    if status in (401, 403):
        return "Check GITHUB_TOKEN has contents: write permission"
    if status == 404:
        return "Check GITHUB_REPOSITORY and the tag"
    if status == 422:
        return "The tag may not exist, or the asset name is already taken"
    return None


def github_token() -> str:
    return os.environ.get("GITHUB_TOKEN") or os.environ.get("GH_TOKEN") or ""


def from_env(overwrite: bool = False) -> GitHubReleases:
    """Client from GITHUB_REPOSITORY and GITHUB_TOKEN/GH_TOKEN. Raises UploadRejected when unset."""
    repo = os.environ.get("GITHUB_REPOSITORY", "")
    token = github_token()
    if not repo:
        msg = "GITHUB_REPOSITORY environment variable is required"
        raise UploadRejected(msg)
    if not token:
        msg = "GITHUB_TOKEN or GH_TOKEN environment variable is required"
        raise UploadRejected(msg)
    return GitHubReleases(repo=repo, token=token, overwrite=overwrite)


def run_upload(path: Path, tag: str, asset_name: str | None = None, overwrite: bool = False) -> int:
    """Upload one file to the release for tag. Returns 0 or 1."""
    if not path.is_file():
        print(f"❌ File not found: {path}", file=sys.stderr)
        return 1
    try:
        from_env(overwrite=overwrite).upload(path, tag, asset_name or path.name)
    except UploadRejected as e:
        print(f"❌ {e.describe()}", file=sys.stderr)
        return 1
    print(f"✅ Uploaded {asset_name or path.name} to {tag}")
    return 0
