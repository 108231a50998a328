"""Release matrix orchestration: one independent pipeline per row, upload of succeeded rows.

Row lifecycle: pending -> running -> succeeded | failed. A failing row never cancels the
others; it is reported as failed in the summary and makes the run exit non-zero.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from nativelib_tooling.build.host import HostOS, detect_host_os
from nativelib_tooling.build.pipeline import build_target
from nativelib_tooling.errors import ConfigError, PipelineError, UnsupportedPlatform
from nativelib_tooling.release.github import Uploader, from_env
from nativelib_tooling.release.matrix import MatrixRow, enabled_rows, row_target, runner_host

if TYPE_CHECKING:
    from nativelib_tooling.config import ReleaseConfig

log = logging.getLogger(__name__)

RowRunner = Callable[[MatrixRow], Path]


class RowState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class RowOutcome:
    row: MatrixRow
    state: RowState = RowState.PENDING
    artifact_path: Path | None = None
    uploaded: bool = False
    error: str | None = None


def _describe(e: Exception) -> str:
    return e.describe() if isinstance(e, PipelineError) else str(e)


def _run_one(outcome: RowOutcome, tag: str, run_row: RowRunner, uploader: Uploader | None) -> None:
    row = outcome.row
    outcome.state = RowState.RUNNING
    try:
        path = run_row(row)
        outcome.artifact_path = path
        if uploader is not None:
            uploader.upload(path, tag, row.artifact_name)
            outcome.uploaded = True
    except (PipelineError, ConfigError, OSError) as e:
        outcome.state = RowState.FAILED
        outcome.error = _describe(e)
        print(f"❌ {row.artifact_name}: {outcome.error}", file=sys.stderr)
        return
    except Exception as e:
        log.exception("Unexpected error in matrix row %s", row.artifact_name)
        outcome.state = RowState.FAILED
        outcome.error = f"{type(e).__name__}: {e}"
        print(f"❌ {row.artifact_name}: {outcome.error}", file=sys.stderr)
        return
    outcome.state = RowState.SUCCEEDED


def run_matrix(
    rows: Sequence[MatrixRow],
    tag: str,
    run_row: RowRunner,
    uploader: Uploader | None = None,
    max_workers: int | None = None,
) -> list[RowOutcome]:
    """Run rows concurrently; upload each succeeded artifact under its row name. Outcomes keep row order."""
    outcomes = [RowOutcome(row) for row in rows]
    if not outcomes:
        return outcomes
    workers = max_workers or len(outcomes)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="matrix-row") as pool:
        futures = [pool.submit(_run_one, o, tag, run_row, uploader) for o in outcomes]
        for f in futures:
            f.result()
    return outcomes


def local_row_runner(
    cfg: ReleaseConfig,
    host: HostOS | None = None,
    isolate_target_dirs: bool = True,
    env: Mapping[str, str] | None = None,
    extra_args: Sequence[str] = (),
) -> RowRunner:
    """Row runner that builds on this machine. Desktop rows only run on a host matching their runner."""
    this_host = host if host is not None else detect_host_os()

    def run_row(row: MatrixRow) -> Path:
        descriptor = row_target(row, cfg.library, cfg.prefix)
        if row.script == "desktop" and runner_host(row.runner) is not this_host:
            msg = f"Row needs a {row.runner} runner; this host is {this_host.value}"
            raise UnsupportedPlatform(msg, target=descriptor.display)
        target_dir = cfg.crate_dir / "target" / "matrix" / row.slug if isolate_target_dirs else None
        result = build_target(
            descriptor,
            this_host,
            cfg.crate_dir,
            out_dir=cfg.crate_dir,
            target_dir=target_dir,
            api_level=cfg.android_api_level,
            env=env,
            extra_args=extra_args,
        )
        return result.published_path

    return run_row


def print_summary(outcomes: Sequence[RowOutcome], tag: str) -> int:
    """Print one line per row. Returns 0 when every row succeeded, else 1."""
    print(f"\nRelease {tag}:")
    for o in outcomes:
        if o.state is RowState.SUCCEEDED:
            extra = "uploaded" if o.uploaded else "built"
            print(f"  ✅ {o.row.artifact_name} ({o.row.runner}) {extra}")
        else:
            print(f"  ❌ {o.row.artifact_name} ({o.row.runner}) {o.state.value}: {o.error}")
    failed = [o for o in outcomes if o.state is not RowState.SUCCEEDED]
    if failed:
        print(f"{len(failed)}/{len(outcomes)} matrix row(s) failed", file=sys.stderr)
        return 1
    print(f"🎉 All {len(outcomes)} artifact(s) released")
    return 0


def run(
    cfg: ReleaseConfig,
    tag: str,
    only: list[str] | None = None,
    upload: bool = True,
    max_workers: int | None = None,
    overwrite: bool = False,
) -> int:
    """Run the (filtered) matrix on this machine and upload. Returns 0 or 1."""
    try:
        rows = enabled_rows(cfg.matrix, only)
        uploader = from_env(overwrite=overwrite) if upload else None
    except (ConfigError, PipelineError) as e:
        print(f"❌ {_describe(e)}", file=sys.stderr)
        return 1
    if not rows:
        print("❌ No matrix rows selected", file=sys.stderr)
        return 1
    log.debug("Running %d row(s) for %s", len(rows), tag)
    outcomes = run_matrix(rows, tag, local_row_runner(cfg), uploader, max_workers=max_workers)
    return print_summary(outcomes, tag)


def run_row(
    cfg: ReleaseConfig,
    artifact_name: str,
    tag: str,
    upload: bool = True,
    overwrite: bool = False,
) -> int:
    """Run one matrix row on the current CI runner (shared target dir) and upload. Returns 0 or 1."""
    try:
        row = cfg.row(artifact_name)
        uploader = from_env(overwrite=overwrite) if upload else None
    except (ConfigError, PipelineError) as e:
        print(f"❌ {_describe(e)}", file=sys.stderr)
        return 1
    outcomes = run_matrix(
        [row], tag, local_row_runner(cfg, isolate_target_dirs=False), uploader, max_workers=1
    )
    return print_summary(outcomes, tag)
