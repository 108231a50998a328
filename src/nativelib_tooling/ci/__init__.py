"""CI automation: release tag gate; GitHub Actions matrix export."""

from nativelib_tooling.helpers import compare_versions

from .actions_matrix import actions_matrix
from .actions_matrix import run as run_actions_matrix
from .validate_tag import run_validate_tag_cli, validate_tag

__all__ = [
    "actions_matrix",
    "compare_versions",
    "run_actions_matrix",
    "run_validate_tag_cli",
    "validate_tag",
]
