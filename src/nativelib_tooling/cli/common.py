"""Shared CLI options: --project-root / --config, config loading with error reporting."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from nativelib_tooling.config import ReleaseConfig, load_config
from nativelib_tooling.errors import ConfigError


def add_config_args(ap: argparse.ArgumentParser) -> None:
    ap.add_argument(
        "--project-root",
        type=Path,
        default=Path.cwd(),
        help="Project root holding release-matrix.yaml (default: cwd)",
    )
    ap.add_argument("--config", type=Path, default=None, help="Release config YAML")


def load_config_or_exit(args: argparse.Namespace) -> ReleaseConfig:
    try:
        return load_config(args.project_root.resolve(), args.config)
    except ConfigError as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(1)
