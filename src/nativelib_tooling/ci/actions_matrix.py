"""Emit the release matrix as GitHub Actions `strategy.matrix` JSON ({"include": [...]})."""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

from nativelib_tooling.release.matrix import MatrixRow, enabled_rows


def actions_matrix(rows: list[MatrixRow]) -> dict[str, list[dict[str, str]]]:
    return {"include": [r.to_dict() for r in rows]}


def run(rows: list[MatrixRow], include_disabled: bool = False) -> int:
    """Print the matrix JSON; append matrix=<json> to $GITHUB_OUTPUT when set. Returns 0 or 1."""
    selected = rows if include_disabled else enabled_rows(rows)
    if not selected:
        print("❌ Matrix is empty", file=sys.stderr)
        return 1
    payload = json.dumps(actions_matrix(selected), separators=(",", ":"))
    print(payload)

    go = os.environ.get("GITHUB_OUTPUT")
    if go:
        with Path(go).open("a") as f:
            f.write(f"matrix={payload}\n")
    return 0
