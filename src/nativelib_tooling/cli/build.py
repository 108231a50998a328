"""`nativelib build desktop|android [x64]`: one entry point per platform family."""

import sys

from nativelib_tooling.build.host import FAMILIES
from nativelib_tooling.build.pipeline import run as run_build
from nativelib_tooling.cli.common import add_config_args, load_config_or_exit


def run_build_argv(argv: list[str] | None = None) -> None:
    """Parse argv and build the family's target for this host (arch selector optional)."""
    import argparse

    if argv is None:
        argv = sys.argv[2:] if len(sys.argv) > 2 else []  # skip 'nativelib build'
    ap = argparse.ArgumentParser(prog="nativelib build", description="Build and name one native library")
    ap.add_argument("family", choices=FAMILIES, help="Platform family entry point")
    ap.add_argument(
        "arch",
        nargs="?",
        default=None,
        help="x64 selects the x64 variant (macOS, Android); default: family default",
    )
    ap.add_argument("--checksum", action="store_true", help="Write <artifact>.sha256 next to the artifact")
    ap.add_argument("--cargo-arg", action="append", default=[], help="Extra cargo build argument")
    add_config_args(ap)
    args = ap.parse_args(argv)
    cfg = load_config_or_exit(args)
    rc = run_build(
        args.family,
        args.arch,
        cfg.crate_dir,
        cfg.library,
        artifact_prefix=cfg.prefix,
        api_level=cfg.android_api_level,
        extra_args=args.cargo_arg,
        write_checksum=args.checksum,
    )
    sys.exit(rc)
