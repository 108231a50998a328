"""Release: matrix rows, concurrent row orchestration, GitHub release uploads."""

from .github import GitHubReleases, Uploader, run_upload
from .matrix import MatrixRow, default_matrix, validate_matrix
from .orchestrate import RowOutcome, RowState, run_matrix
from .orchestrate import run as run_release
from .orchestrate import run_row as run_release_row

__all__ = [
    "GitHubReleases",
    "MatrixRow",
    "RowOutcome",
    "RowState",
    "Uploader",
    "default_matrix",
    "run_matrix",
    "run_release",
    "run_release_row",
    "run_upload",
    "validate_matrix",
]
