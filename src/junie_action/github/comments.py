"""Feedback comments on the issue or pull request that started a run.

An initial "started working" comment is posted as soon as the run begins and
is later rewritten with the outcome: the created PR, the pushed commit, the
agent's answer, or the failure details with a link to the job logs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..config import Config
from ..context import ExecutionContext
from ..junie.results import ActionType
from . import api
from .templates import (
    commit_pushed_feedback_comment,
    create_comment_body,
    create_job_run_link,
    create_pr_link,
    error_feedback_comment,
    manual_pr_feedback_comment,
    pr_created_feedback_comment,
    success_feedback_comment_with_result,
)

logger = logging.getLogger(__name__)

_LIKELY_CAUSES = (
    "This could be due to:\n"
    "• Insufficient token permissions (needs 'issues:write' or 'pull_requests:write' scope)\n"
    "• GitHub API rate limits\n"
    "{target}\n"
    "• Network connectivity issues\n"
)


@dataclass
class SuccessFeedback:
    action_to_do: ActionType
    pr_link: str | None = None
    commit_sha: str | None = None
    junie_title: str | None = None
    junie_summary: str | None = None
    working_branch: str | None = None
    base_branch: str | None = None


def write_initial_feedback_comment(config: Config, context: ExecutionContext) -> int | None:
    """Post the "started working" comment and return its id.

    Review comments get a threaded reply; issues and PR conversations get a
    regular comment.  Events without an issue or PR are skipped and return
    ``None``.
    """
    repo = context.repository
    job_run_link = create_job_run_link(config.github_server_url, repo.owner, repo.name, context.run_id)
    body = create_comment_body(job_run_link)

    if context.entity_number is None:
        logger.info("Skip creating initial comment for %s event", context.event_name)
        return None

    try:
        if context.is_review_comment:
            comment_id = api.create_review_comment_reply(
                config,
                repo.full_name,
                context.entity_number,
                context.payload["comment"]["id"],
                body,
            )
        else:
            comment_id = api.create_issue_comment(config, repo.full_name, context.entity_number, body)
    except Exception as exc:
        entity = "PR" if context.is_pr else f"issue #{context.entity_number}"
        logger.error("Failed to create initial feedback comment for %s: %s", entity, exc)
        raise RuntimeError(
            f"Failed to create initial feedback comment on {repo.full_name}. "
            + _LIKELY_CAUSES.format(target="• The issue or PR may be locked or deleted")
            + f"Original error: {exc}"
        ) from exc

    logger.info("Created initial comment with ID: %s", comment_id)
    return comment_id


def failed_feedback_body(config: Config, context: ExecutionContext, error: str | None) -> str:
    details = error or "Check job logs for more details"
    repo = context.repository
    job_link = create_job_run_link(config.github_server_url, repo.owner, repo.name, context.run_id)
    return error_feedback_comment(details, job_link)


def success_feedback_body(config: Config, repo_full_name: str, success: SuccessFeedback) -> str | None:
    action = success.action_to_do
    if action is ActionType.COMMIT_CHANGES:
        logger.info("Commit pushed to current branch: %s", success.commit_sha)
        return commit_pushed_feedback_comment(
            success.commit_sha or "", success.junie_title or "", success.junie_summary or ""
        )
    if action is ActionType.PUSH:
        logger.info("Unpushed commits were pushed to remote")
        return success_feedback_comment_with_result(
            success.junie_title or "Changes pushed",
            success.junie_summary or "Unpushed commits have been pushed to the remote branch",
        )
    if action is ActionType.CREATE_PR:
        if success.pr_link:
            logger.info("PR was created: %s", success.pr_link)
            return pr_created_feedback_comment(success.pr_link)
        logger.info("Create PR manually")
        url = create_pr_link(
            config.github_server_url,
            repo_full_name,
            success.base_branch or "",
            success.working_branch or "",
        )
        return manual_pr_feedback_comment(url)
    if action is ActionType.WRITE_COMMENT:
        logger.info("No PR or commit - using Junie result")
        return success_feedback_comment_with_result(
            success.junie_title or "Task completed",
            success.junie_summary or "No additional details",
        )
    return None


def write_finish_feedback_comment(
    config: Config,
    context: ExecutionContext,
    init_comment_id: int,
    *,
    failed: bool,
    success: SuccessFeedback | None = None,
    error: str | None = None,
) -> bool:
    """Rewrite the initial comment with the final result.

    Returns ``False`` when there was nothing to report (for example the
    ``NOTHING`` action) and the comment was left untouched.
    """
    repo = context.repository
    if failed:
        body = failed_feedback_body(config, context, error)
    elif success is not None:
        body = success_feedback_body(config, repo.full_name, success)
    else:
        body = None

    if not body:
        logger.info("No feedback body - skipping feedback")
        return False

    logger.info("Updating comment %s (review comment: %s)", init_comment_id, context.is_review_comment)
    try:
        if context.is_review_comment:
            api.update_review_comment(config, repo.full_name, int(init_comment_id), body)
        else:
            api.update_issue_comment(config, repo.full_name, int(init_comment_id), body)
    except Exception as exc:
        logger.error("Failed to update feedback comment %s: %s", init_comment_id, exc)
        raise RuntimeError(
            f"Failed to update feedback comment on {repo.full_name}. "
            + _LIKELY_CAUSES.format(target="• The comment may have been deleted")
            + f"Original error: {exc}"
        ) from exc

    logger.info("Feedback comment updated successfully")
    return True
