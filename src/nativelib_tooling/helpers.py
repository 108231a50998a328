"""Shared helpers for nativelib_tooling (triple keys, version, tag refs, retry, hashing).

Used by build, release, ci and cli modules.
"""

from __future__ import annotations

import hashlib
import re
from pathlib import Path

# --- Target triple ---


def cargo_target_key(triple: str) -> str:
    """Cargo per-target env key segment: aarch64-linux-android -> AARCH64_LINUX_ANDROID."""
    return re.sub(r"[^A-Za-z0-9]", "_", triple).upper()


def cc_target_key(triple: str) -> str:
    """cc-rs per-target env key segment: aarch64-linux-android -> aarch64_linux_android."""
    return re.sub(r"[^A-Za-z0-9]", "_", triple)


# --- Version ---

_VERSION_RE = re.compile(r"^(\d+)\.(\d+)\.(\d+)(?:-([\w.-]+))?$")


def parse_version(v: str) -> tuple[int, int, int, str | None]:
    """Parse X.Y.Z[-pre] (leading 'v' allowed). Raises ValueError on invalid format."""
    m = _VERSION_RE.match(v.lstrip("v"))
    if not m:
        msg = "Invalid version format: " + str(v)
        raise ValueError(msg)
    return (int(m.group(1)), int(m.group(2)), int(m.group(3)), m.group(4))


def compare_versions(v1: str, v2: str) -> int:
    """Compare two version strings (semver). Positive if v1 > v2, negative if v1 < v2, zero if equal."""
    major1, minor1, patch1, prerelease1 = parse_version(v1)
    major2, minor2, patch2, prerelease2 = parse_version(v2)

    if major1 != major2:
        return major1 - major2
    if minor1 != minor2:
        return minor1 - minor2
    if patch1 != patch2:
        return patch1 - patch2

    if prerelease1 is None and prerelease2 is not None:
        return 1
    if prerelease1 is not None and prerelease2 is None:
        return -1
    if prerelease1 is None or prerelease2 is None:
        return 0

    rc_match1 = re.match(r"^rc\.(\d+)$", prerelease1)
    rc_match2 = re.match(r"^rc\.(\d+)$", prerelease2)
    if rc_match1 and rc_match2:
        return int(rc_match1.group(1)) - int(rc_match2.group(1))

    if prerelease1 < prerelease2:
        return -1
    if prerelease1 > prerelease2:
        return 1
    return 0


def dotted_version_key(name: str) -> tuple[int, ...]:
    """Sort key for side-by-side NDK dirs (e.g. 25.2.9519653). Non-numeric parts sort as 0."""
    return tuple(int(p) if p.isdigit() else 0 for p in name.split("."))


# --- Tag ---


def tag_from_ref(ref: str) -> str:
    """refs/tags/v1.2.3 -> v1.2.3. Plain tag names pass through."""
    prefix = "refs/tags/"
    return ref[len(prefix) :] if ref.startswith(prefix) else ref


# --- Retry ---


def fibonacci_backoff_sequence(max_total_seconds: int = 300) -> list[int]:
    """Generate Fibonacci backoff sequence (seconds) up to max_total_seconds."""
    sequence: list[int] = []
    total = 0
    a, b = 1, 1
    while total + a <= max_total_seconds:
        sequence.append(a)
        total += a
        a, b = b, a + b
    return sequence


def backoff_for_attempt(sequence: list[int], attempt: int) -> int:
    """Wait time for a 0-based attempt; sticks at the last step once the sequence runs out."""
    if attempt < len(sequence):
        return sequence[attempt]
    return sequence[-1] if sequence else 1


# --- Hashing ---


def sha256_file(path: Path, chunk_size: int = 1 << 20) -> str:
    """Hex sha256 of a file, streamed."""
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            h.update(chunk)
    return h.hexdigest()
