"""Working branch selection.

``select_branch`` is the pure decision: reuse the pull request's head branch
or create a new ``junie/...`` branch, and from which base.  ``setup_branch``
gathers the inputs from the event, makes the decision and performs the git
fetch and checkout.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..config import Config
from ..constants import MAX_BRANCH_NAME_LENGTH, PR_BRANCH_FETCH_DEPTH, WORKING_BRANCH_PREFIX
from ..context import EventKind, ExecutionContext
from ..errors import GitOperationError
from ..github import api
from .runner import GitRunner

logger = logging.getLogger(__name__)


class PRState(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    MERGED = "MERGED"


@dataclass(frozen=True)
class PullRequestInfo:
    number: int
    state: PRState
    author_login: str
    head_branch: str
    base_branch: str

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> PullRequestInfo:
        """Build from a REST pull request object (webhook or ``GET /pulls/N``).

        REST reports merged pull requests as ``closed`` with ``merged: true``.
        """
        if data.get("merged") or data.get("merged_at"):
            state = PRState.MERGED
        else:
            state = PRState(str(data.get("state", "open")).upper())
        return cls(
            number=data["number"],
            state=state,
            author_login=(data.get("user") or {}).get("login", ""),
            head_branch=data["head"]["ref"],
            base_branch=data["base"]["ref"],
        )


@dataclass(frozen=True)
class BranchDecisionConfig:
    create_new_branch_for_pr: bool
    actor_login: str
    token_owner_login: str


@dataclass(frozen=True)
class BranchResult:
    base_branch: str
    working_branch: str
    is_new_branch: bool
    # Target branch of the PR, when there is one
    pr_base_branch: str | None = None


def should_use_existing_pr_branch(pr: PullRequestInfo, config: BranchDecisionConfig) -> bool:
    """Return ``True`` if work should continue on the PR's own branch."""
    logger.info("PR author: %s", pr.author_login)
    logger.info("Actor: %s", config.actor_login)
    logger.info("Token owner: %s", config.token_owner_login)
    logger.info("Create new branch setting: %s", config.create_new_branch_for_pr)

    if not config.create_new_branch_for_pr:
        logger.info("Using existing branch: setting disabled")
        return True
    if config.actor_login == pr.author_login:
        logger.info("Using existing branch: actor is PR author")
        return True
    if pr.author_login == config.token_owner_login:
        logger.info("Using existing branch: PR author is token owner")
        return True
    logger.info("Creating new branch: none of the conditions matched")
    return False


def branch_entity_id(is_pr: bool, entity_number: int | None, run_id: str) -> str:
    """Return ``pr-N``, ``issue-N`` or ``run-<run id>``."""
    if is_pr and entity_number:
        return f"pr-{entity_number}"
    if entity_number:
        return f"issue-{entity_number}"
    return f"run-{run_id}"


def make_branch_name(entity_id: str) -> str:
    return f"{WORKING_BRANCH_PREFIX}{entity_id}".lower()[:MAX_BRANCH_NAME_LENGTH]


def select_branch(
    pr: PullRequestInfo | None,
    push_ref: str | None,
    entity_id: str,
    config: BranchDecisionConfig,
    default_base: str,
) -> BranchResult:
    """Decide which branch the agent works on.

    For pull requests the first matching rule wins: a closed or merged PR
    always gets a new branch from its base; otherwise the head branch is
    reused when new branches are disabled, when the actor wrote the PR or
    when the token owner wrote it.  In the remaining case a new branch is
    created on top of the PR head so the contributor's work is kept.

    Other contexts always get a new branch, based on the pushed branch for
    push events and on ``default_base`` otherwise.
    """
    name = make_branch_name(entity_id)

    if pr is not None:
        if pr.state in (PRState.CLOSED, PRState.MERGED):
            logger.info("PR #%s is %s, creating new branch", pr.number, pr.state.value)
            return BranchResult(pr.base_branch, name, True, pr_base_branch=pr.base_branch)
        if should_use_existing_pr_branch(pr, config):
            return BranchResult(pr.base_branch, pr.head_branch, False, pr_base_branch=pr.base_branch)
        logger.info("Creating new branch for PR #%s based on %s", pr.number, pr.head_branch)
        return BranchResult(pr.head_branch, name, True, pr_base_branch=pr.base_branch)

    base = default_base
    if push_ref:
        base = push_ref.removeprefix("refs/heads/")
        logger.info("Push event detected, base branch: %s", base)
    return BranchResult(base, name, True)


def create_branch(runner: GitRunner, base_branch: str, branch_name: str) -> BranchResult:
    """Fetch ``base_branch`` and check out ``branch_name`` on top of it."""
    logger.info("Creating new branch %s from %s", branch_name, base_branch)
    try:
        runner.check(["fetch", "origin", base_branch, "--depth=1"])
        runner.check(["checkout", "-b", branch_name, f"origin/{base_branch}"])
    except GitOperationError as exc:
        logger.error("Failed to create branch %r from %r: %s", branch_name, base_branch, exc)
        raise GitOperationError(
            f'Failed to create working branch "{branch_name}" from base branch "{base_branch}". '
            "This could be due to:\n"
            f'• Base branch "{base_branch}" does not exist in the repository\n'
            "• Insufficient permissions to fetch from the repository\n"
            "• Network connectivity issues\n"
            "• Git authentication problems\n"
            f"Original error: {exc}"
        ) from exc
    logger.info("Successfully created and checked out new branch: %s", branch_name)
    return BranchResult(base_branch, branch_name, True)


def checkout_existing_branch(runner: GitRunner, branch: str, pr_number: int) -> None:
    """Fetch recent history of ``branch`` and check it out."""
    try:
        runner.check(["fetch", "origin", f"--depth={PR_BRANCH_FETCH_DEPTH}", branch])
        runner.check(["checkout", branch])
    except GitOperationError as exc:
        raise GitOperationError(
            f'Failed to checkout existing PR branch "{branch}" for PR #{pr_number}. '
            "This could be due to:\n"
            f'• Branch "{branch}" does not exist or was deleted\n'
            "• Insufficient permissions to fetch from the repository\n"
            "• Network connectivity issues\n"
            "• Git authentication problems\n"
            f"Original error: {exc}"
        ) from exc
    logger.info("Successfully checked out PR branch for PR #%s", pr_number)


_PAYLOAD_PR_KINDS = (
    EventKind.PULL_REQUEST,
    EventKind.PULL_REQUEST_REVIEW,
    EventKind.PULL_REQUEST_REVIEW_COMMENT,
)


def _load_pull_request(config: Config, context: ExecutionContext) -> PullRequestInfo:
    if context.kind in _PAYLOAD_PR_KINDS and context.payload.get("pull_request"):
        return PullRequestInfo.from_api(context.payload["pull_request"])

    repo_full_name = context.repository.full_name
    number = context.entity_number
    try:
        data = api.get_pull_request(config, repo_full_name, number)
    except Exception as exc:
        raise RuntimeError(
            f"Failed to fetch PR #{number} information from {repo_full_name}. "
            "This could be due to:\n"
            f"• PR #{number} does not exist\n"
            "• Insufficient token permissions (needs 'repo' or 'pull_requests:read' scope)\n"
            "• GitHub API rate limits\n"
            f"Original error: {exc}"
        ) from exc
    return PullRequestInfo.from_api(data)


def setup_branch(config: Config, context: ExecutionContext, runner: GitRunner) -> BranchResult:
    """Select the working branch for this run and check it out."""
    pr = None
    if context.is_pr and context.entity_number:
        pr = _load_pull_request(config, context)
        logger.info("Base branch: %s", pr.base_branch)
        logger.info("Target branch: %s", pr.head_branch)

    push_ref = context.payload.get("ref") if context.kind is EventKind.PUSH else None
    decision = select_branch(
        pr,
        push_ref,
        branch_entity_id(context.is_pr, context.entity_number, context.run_id),
        BranchDecisionConfig(
            create_new_branch_for_pr=config.create_new_branch_for_pr,
            actor_login=context.actor,
            token_owner_login=context.token_owner.login,
        ),
        default_base=config.base_branch or context.repository.default_branch,
    )

    if decision.is_new_branch:
        created = create_branch(runner, decision.base_branch, decision.working_branch)
        return BranchResult(
            created.base_branch,
            created.working_branch,
            True,
            pr_base_branch=decision.pr_base_branch,
        )

    checkout_existing_branch(runner, decision.working_branch, pr.number)
    return decision
