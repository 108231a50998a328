"""`nativelib release` subcommands: run, row, upload."""

import argparse
import os
import sys
from pathlib import Path

from nativelib_tooling.cli.common import add_config_args, load_config_or_exit
from nativelib_tooling.helpers import tag_from_ref
from nativelib_tooling.release.github import run_upload
from nativelib_tooling.release.orchestrate import run as run_release
from nativelib_tooling.release.orchestrate import run_row


def _tag_arg(ap: argparse.ArgumentParser) -> None:
    ap.add_argument("--tag", default=None, help="Release tag (default: from GITHUB_REF)")


def _resolve_tag(tag: str | None) -> str:
    resolved = tag or tag_from_ref(os.environ.get("GITHUB_REF", ""))
    if not resolved:
        print("❌ --tag required (or set GITHUB_REF)", file=sys.stderr)
        sys.exit(1)
    return resolved


def run_release_argv(argv: list[str] | None = None) -> None:
    """Parse release subcommand from argv and run. argv defaults to sys.argv[2:] when called from main."""
    if argv is None:
        argv = sys.argv[2:] if len(sys.argv) > 2 else []
    if not argv:
        print("nativelib release: missing subcommand (run, row, upload)", file=sys.stderr)
        sys.exit(1)
    cmd = argv[0]
    rest = argv[1:]

    if cmd == "run":
        ap = argparse.ArgumentParser(prog="nativelib release run", description="Run the release matrix here")
        _tag_arg(ap)
        ap.add_argument("--only", action="append", default=None, help="Artifact name to run (repeatable)")
        ap.add_argument("--no-upload", action="store_true", help="Build and name artifacts only")
        ap.add_argument("--overwrite", action="store_true", help="Replace existing release assets")
        ap.add_argument("--max-workers", type=int, default=None, help="Rows run concurrently")
        add_config_args(ap)
        args = ap.parse_args(rest)
        cfg = load_config_or_exit(args)
        rc = run_release(
            cfg,
            _resolve_tag(args.tag),
            only=args.only,
            upload=not args.no_upload,
            max_workers=args.max_workers,
            overwrite=args.overwrite,
        )
        sys.exit(rc)

    if cmd == "row":
        ap = argparse.ArgumentParser(prog="nativelib release row", description="Run one matrix row (CI job)")
        ap.add_argument("artifact_name", help="Matrix row artifact name")
        _tag_arg(ap)
        ap.add_argument("--no-upload", action="store_true", help="Build and name the artifact only")
        ap.add_argument("--overwrite", action="store_true", help="Replace an existing release asset")
        add_config_args(ap)
        args = ap.parse_args(rest)
        cfg = load_config_or_exit(args)
        rc = run_row(
            cfg,
            args.artifact_name,
            _resolve_tag(args.tag),
            upload=not args.no_upload,
            overwrite=args.overwrite,
        )
        sys.exit(rc)

    if cmd == "upload":
        ap = argparse.ArgumentParser(prog="nativelib release upload", description="Upload one release asset")
        ap.add_argument("file", type=Path, help="File to upload")
        _tag_arg(ap)
        ap.add_argument("--name", default=None, help="Asset name (default: file name)")
        ap.add_argument("--overwrite", action="store_true", help="Replace an existing asset")
        args = ap.parse_args(rest)
        rc = run_upload(args.file, _resolve_tag(args.tag), args.name, overwrite=args.overwrite)
        sys.exit(rc)

    print("nativelib release: use subcommand 'run', 'row' or 'upload'", file=sys.stderr)
    sys.exit(1)
