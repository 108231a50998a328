"""Validate the release tag: semver shaped, and not a downgrade of the latest release."""

import os
import sys

from nativelib_tooling.helpers import compare_versions, parse_version, tag_from_ref


def validate_tag(tag: str, latest: str | None, allow_same: bool = False) -> int:
    """Validate tag is a version greater than latest (or equal if allow_same). Raises SystemExit if invalid."""
    try:
        parse_version(tag)
    except ValueError as e:
        print(f"Tag {tag!r} is not a release version (expected vX.Y.Z or vX.Y.Z-rc.N)", file=sys.stderr)
        raise SystemExit(1) from e

    if latest is None:
        return 0

    try:
        cmp_val = compare_versions(tag, latest)
    except ValueError as e:
        msg = "Version comparison error: " + str(e)
        raise SystemExit(msg) from e

    if cmp_val > 0:
        return 0

    if cmp_val == 0:
        if allow_same:
            return 0
        print(
            f"Tag {tag} is not greater than latest release {latest}. Use --allow-same to re-release.",
            file=sys.stderr,
        )
        raise SystemExit(1)

    print(
        f"Version downgrade detected: tag={tag}, latest={latest}. Cannot release a version lower than the latest.",
        file=sys.stderr,
    )
    raise SystemExit(1)


def run_validate_tag_cli(
    tag: str | None,
    latest: str | None = None,
    allow_same: bool = False,
) -> int:
    """CLI helper for validate-tag. Tag defaults to GITHUB_REF; latest is fetched from GitHub if not provided."""
    from nativelib_tooling.errors import UploadRejected
    from nativelib_tooling.release.github import GitHubReleases, github_token

    tag = tag or tag_from_ref(os.environ.get("GITHUB_REF", ""))
    if not tag:
        print("Error: --tag required (or set GITHUB_REF)", file=sys.stderr)
        return 1

    if not latest:
        repo = os.environ.get("GITHUB_REPOSITORY", "")
        token = github_token()
        if not (repo and token):
            print(
                "Error: --latest required or set GITHUB_REPOSITORY and GITHUB_TOKEN",
                file=sys.stderr,
            )
            return 1
        try:
            latest = GitHubReleases(repo=repo, token=token).latest_tag()
        except UploadRejected as e:
            print(f"Error: could not fetch latest release: {e}", file=sys.stderr)
            return 1

    try:
        validate_tag(tag, latest, allow_same=allow_same)
        return 0
    except SystemExit as e:
        code = e.code
        return code if isinstance(code, int) else 1
