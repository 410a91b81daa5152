"""Working tree checks used after the agent has run.

Both checks treat a failing git command as "no": a repository without an
upstream has nothing unpushed, and a broken working tree has nothing to
commit.
"""

from __future__ import annotations

import logging

from .runner import GitRunner

logger = logging.getLogger(__name__)


def has_changed_files(runner: GitRunner) -> bool:
    """Return ``True`` if ``git status --porcelain`` reports any change."""
    result = runner.run(["status", "--porcelain"])
    if result["exit_code"] != 0:
        logger.warning("git status failed: %s", result["stderr"])
        return False
    changed = bool(str(result["stdout"]).strip())
    logger.info("Working tree has changes: %s", changed)
    return changed


def has_unpushed_commits(runner: GitRunner) -> bool:
    """Return ``True`` if HEAD is ahead of its upstream branch."""
    result = runner.run(["log", "@{u}..HEAD", "--oneline"])
    if result["exit_code"] != 0:
        logger.info("Could not compare with upstream: %s", str(result["stderr"]).strip())
        return False
    unpushed = bool(str(result["stdout"]).strip())
    logger.info("Branch has unpushed commits: %s", unpushed)
    return unpushed


def head_sha(runner: GitRunner) -> str | None:
    result = runner.run(["rev-parse", "HEAD"])
    if result["exit_code"] != 0:
        return None
    return str(result["stdout"]).strip() or None
