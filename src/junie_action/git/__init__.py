"""Git operations: command runner, branch selection and working tree checks."""

from .branch import BranchResult, PullRequestInfo, select_branch, setup_branch
from .runner import GitRunner

__all__ = [
    "BranchResult",
    "GitRunner",
    "PullRequestInfo",
    "select_branch",
    "setup_branch",
]
