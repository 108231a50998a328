"""Move the raw cargo output to its published name without exposing a partial file."""

from __future__ import annotations

import errno
import logging
import os
import shutil
import tempfile
from pathlib import Path

from nativelib_tooling.build.targets import TargetDescriptor, raw_output_path
from nativelib_tooling.errors import ArtifactNotFound
from nativelib_tooling.helpers import sha256_file

log = logging.getLogger(__name__)

WRITABLE_HINT = "Check the output directory is writable"


def _copy_then_replace(src: Path, dest: Path) -> None:
    """Cross-device move: copy into dest's directory, fsync, rename over dest, drop src."""
    fd, tmp_name = tempfile.mkstemp(prefix=f".{dest.name}.", dir=dest.parent)
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as out, src.open("rb") as inp:
            shutil.copyfileobj(inp, out)
            out.flush()
            os.fsync(out.fileno())
        shutil.copymode(src, tmp)
        os.replace(tmp, dest)
    finally:
        tmp.unlink(missing_ok=True)
    src.unlink()


def atomic_move(src: Path, dest: Path) -> None:
    """Rename src over dest; falls back to copy + rename across filesystems."""
    try:
        os.replace(src, dest)
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise
        log.debug("%s and %s are on different filesystems; copying", src, dest)
        _copy_then_replace(src, dest)


def normalize_artifact(
    descriptor: TargetDescriptor,
    target_root: Path,
    out_dir: Path,
    write_checksum: bool = False,
) -> Path:
    """Move <target_root>/[triple/]release/<base> to <out_dir>/<published_name>. Returns the new path.

    Raises ArtifactNotFound when the raw output is missing or empty; dest is left untouched then.
    """
    raw = raw_output_path(descriptor, target_root)
    if not raw.is_file():
        msg = f"Build output not found: {raw}"
        raise ArtifactNotFound(
            msg,
            target=descriptor.display,
            hint="Library name or target layout does not match what cargo produced",
        )
    if raw.stat().st_size == 0:
        msg = f"Build output is empty: {raw}"
        raise ArtifactNotFound(msg, target=descriptor.display)

    dest = out_dir / descriptor.published_name
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
        atomic_move(raw, dest)
    except OSError as e:
        msg = f"Could not publish {raw} as {dest}: {e}"
        raise ArtifactNotFound(msg, target=descriptor.display, hint=WRITABLE_HINT) from e
    print(f"📦 {raw} -> {dest.name}")

    if write_checksum:
        sidecar = dest.with_name(dest.name + ".sha256")
        try:
            digest = sha256_file(dest)
            sidecar.write_text(f"{digest}  {dest.name}\n")
        except OSError as e:
            msg = f"Could not write {sidecar}: {e}"
            raise ArtifactNotFound(msg, target=descriptor.display, hint=WRITABLE_HINT) from e
        log.debug("sha256 %s %s", digest, dest.name)
    return dest
