"""Main CLI entry point for nativelib tooling."""

import logging
import os
import sys

from nativelib_tooling.cli import build as build_cli
from nativelib_tooling.cli import ci_cmd, release_cmd


def _usage() -> None:
    print("Usage: nativelib <command> [args...]", file=sys.stderr)
    print("Commands:", file=sys.stderr)
    print(
        "  build desktop|android [x64]  - Build this host's target and name the artifact",
        file=sys.stderr,
    )
    print(
        "  release run|row|upload       - Run the release matrix / one row; upload assets",
        file=sys.stderr,
    )
    print(
        "  ci matrix|validate-tag       - Actions matrix JSON; release tag gate",
        file=sys.stderr,
    )


def _log_level() -> int:
    """NATIVELIB_LOG_LEVEL as a logging level; unknown names fall back to WARNING."""
    name = os.environ.get("NATIVELIB_LOG_LEVEL", "WARNING").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING


def main() -> None:
    """Main CLI entry point."""
    logging.basicConfig(
        level=_log_level(),
        format="%(levelname)s %(name)s: %(message)s",
    )
    if len(sys.argv) < 2:
        _usage()
        sys.exit(1)

    command = sys.argv[1]

    if command == "build":
        build_cli.run_build_argv()
    elif command == "release":
        release_cmd.run_release_argv()
    elif command == "ci":
        ci_cmd.run_ci_argv()
    elif command in ("-h", "--help", "help"):
        _usage()
    else:
        print(f"Error: Unknown command: {command}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
