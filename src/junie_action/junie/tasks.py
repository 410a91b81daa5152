"""Task preparation for the Junie CLI.

The CLI accepts either a merge task (resolve conflicts against a branch) or
a free-text task.  Text tasks are built from the triggering issue, comment,
review or pull request plus the optional custom prompt.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from ..config import Config
from ..context import EventKind, ExecutionContext
from ..git.branch import BranchResult
from ..github.graphql import GraphQLDataFetcher
from ..validation.input_size import validate_input_size
from ..validation.trigger import mentions_resolve_conflicts
from .prompt import CommentData, GitHubPromptFormatter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MergeTask:
    branch: str
    type: str = "merge"


@dataclass(frozen=True)
class CliInput:
    task: str | None = None
    merge_task: MergeTask | None = None

    def to_dict(self) -> dict[str, Any]:
        if self.merge_task is not None:
            return {"mergeTask": {"branch": self.merge_task.branch, "type": self.merge_task.type}}
        return {"task": self.task}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


def _validated(text: str, task_type: str) -> str:
    validate_input_size(text, task_type)
    return text


def _comment(payload: dict[str, Any]) -> CommentData:
    comment = payload["comment"]
    return CommentData(body=comment.get("body") or "", author=(comment.get("user") or {}).get("login", "ghost"))


def _text_task(
    context: ExecutionContext,
    fetcher: GraphQLDataFetcher,
    custom_prompt: str | None,
) -> str | None:
    owner = context.repository.owner
    repo = context.repository.name
    payload = context.payload
    formatter = GitHubPromptFormatter()

    if context.kind is EventKind.ISSUE_COMMENT and not context.is_pr:
        issue_data = fetcher.fetch_issue_data(
            owner, repo, payload["issue"]["number"], payload["comment"].get("created_at")
        )
        prompt = formatter.format_issue_comment_prompt(issue_data, _comment(payload), custom_prompt)
        return _validated(prompt, "issue-comment")

    if context.kind is EventKind.ISSUE:
        issue_data = fetcher.fetch_issue_data(
            owner, repo, payload["issue"]["number"], payload["issue"].get("updated_at")
        )
        return _validated(formatter.format_issue_prompt(issue_data, custom_prompt), "issue")

    if context.kind is EventKind.ISSUE_COMMENT and context.is_pr:
        pr_data = fetcher.fetch_pull_request_data(
            owner, repo, payload["issue"]["number"], payload["comment"].get("created_at")
        )
        prompt = formatter.format_pull_request_comment_prompt(pr_data, _comment(payload), custom_prompt)
        return _validated(prompt, "pr-comment")

    if context.kind is EventKind.PULL_REQUEST_REVIEW:
        pull_number = payload["pull_request"]["number"]
        review_id = payload["review"]["id"]
        pr_data = fetcher.fetch_pull_request_data(
            owner, repo, pull_number, payload["review"].get("submitted_at")
        )
        review = next(
            (r for r in pr_data["pullRequest"]["reviews"]["nodes"] if r.get("databaseId") == review_id),
            None,
        )
        if review is None:
            raise RuntimeError(f"Review {review_id} not found in PR {pull_number}")
        prompt = formatter.format_pull_request_review_prompt(pr_data, review, custom_prompt)
        return _validated(prompt, "pr-review")

    if context.kind is EventKind.PULL_REQUEST_REVIEW_COMMENT:
        pr_data = fetcher.fetch_pull_request_data(
            owner, repo, payload["pull_request"]["number"], payload["comment"].get("created_at")
        )
        prompt = formatter.format_pull_request_review_comment_prompt(pr_data, _comment(payload), custom_prompt)
        return _validated(prompt, "pr-review-comment")

    if context.kind is EventKind.PULL_REQUEST:
        pr_data = fetcher.fetch_pull_request_data(
            owner, repo, payload["pull_request"]["number"], payload["pull_request"].get("updated_at")
        )
        return _validated(formatter.format_pull_request_prompt(pr_data, custom_prompt), "pull-request")

    return custom_prompt


def prepare_task(
    config: Config,
    context: ExecutionContext,
    branch: BranchResult,
    fetcher: GraphQLDataFetcher | None = None,
) -> CliInput:
    """Return the task the Junie CLI should run.

    :raises RuntimeError: if no task could be built from the event and inputs
    """
    if config.resolve_conflicts or mentions_resolve_conflicts(context.to_event_descriptor()):
        target = branch.pr_base_branch or branch.base_branch
        logger.info("Creating merge task for branch: %s", target)
        return CliInput(merge_task=MergeTask(branch=target))

    custom_prompt = config.prompt or None
    if custom_prompt and not config.attach_github_context_to_custom_prompt:
        task_text = _validated(custom_prompt, "prompt")
    else:
        task_text = _text_task(context, fetcher or GraphQLDataFetcher(config), custom_prompt)

    if not task_text:
        raise RuntimeError("No task was created. Please check your inputs.")

    logger.info("Creating regular task with text length: %d", len(task_text))
    return CliInput(task=task_text)
