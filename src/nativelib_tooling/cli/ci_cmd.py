"""CLI for ci: nativelib ci matrix | validate-tag."""

from __future__ import annotations

import sys

from nativelib_tooling.ci import run_actions_matrix, run_validate_tag_cli
from nativelib_tooling.cli.common import add_config_args, load_config_or_exit


def run_ci_argv(argv: list[str] | None = None) -> None:
    """Dispatch nativelib ci <subcommand>."""
    import argparse

    if argv is None:
        argv = sys.argv[2:] if len(sys.argv) > 2 else []
    if not argv:
        print("Usage: nativelib ci <subcommand> [options]", file=sys.stderr)
        print("Subcommands: matrix, validate-tag", file=sys.stderr)
        sys.exit(1)

    sub = argv[0].lower()
    args = argv[1:]

    if sub == "matrix":
        ap = argparse.ArgumentParser(prog="nativelib ci matrix")
        ap.add_argument("--all", action="store_true", help="Include disabled rows")
        add_config_args(ap)
        parsed = ap.parse_args(args)
        cfg = load_config_or_exit(parsed)
        sys.exit(run_actions_matrix(cfg.matrix, include_disabled=parsed.all))

    if sub == "validate-tag":
        ap = argparse.ArgumentParser(prog="nativelib ci validate-tag")
        ap.add_argument("--tag", default=None, help="Tag to validate (default: from GITHUB_REF)")
        ap.add_argument("--latest", default=None, help="Latest released version")
        ap.add_argument("--allow-same", action="store_true", help="Allow same version")
        parsed = ap.parse_args(args)
        sys.exit(run_validate_tag_cli(parsed.tag, latest=parsed.latest, allow_same=parsed.allow_same))

    print(f"Error: Unknown ci subcommand: {sub}", file=sys.stderr)
    sys.exit(1)
