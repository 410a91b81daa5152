"""GitHub REST API wrapper."""

from __future__ import annotations

import logging

import httpx

from ..config import Config
from ..constants import GITHUB_ACTIONS_BOT_ID, GITHUB_ACTIONS_BOT_LOGIN
from ..context import TokenOwner
from ..errors import GitHubAPIError
from .auth import get_github_client

logger = logging.getLogger(__name__)


def _github_request(
    config: Config,
    method: str,
    path: str,
    *,
    params: dict[str, object] | None = None,
    json: dict[str, object] | None = None,
    allow_404: bool = False,
    expect_json: bool = True,
    operation: str = "",
) -> object | None:
    """Perform an HTTP request against the GitHub API.

    This helper wraps ``httpx`` to provide a default timeout, GitHub client
    headers and basic error handling.  If the request returns a non-2xx
    response (other than 404 when ``allow_404=True``), a ``GitHubAPIError``
    carrying the status code is raised.

    ``path`` is relative to the configured API URL so that GitHub Enterprise
    Server installations work unchanged.
    """
    if not path.startswith("/"):
        raise ValueError(f"Invalid GitHub API path: {path}")
    operation = operation or f"{method} {path}"

    try:
        with get_github_client(config) as client:
            resp = client.request(method, path, params=params, json=json)
    except httpx.HTTPError as exc:
        logger.error("GitHub API request failed (%s): %s", operation, exc)
        raise GitHubAPIError(f"GitHub API request failed: {exc}", operation=operation) from exc

    if allow_404 and resp.status_code == 404:
        return None

    if 200 <= resp.status_code < 300:
        if not expect_json:
            return resp.text
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    logger.error("GitHub API error %s (%s): %s", resp.status_code, operation, resp.text)
    raise GitHubAPIError(
        f"GitHub API error {resp.status_code}: {resp.text}",
        status_code=resp.status_code,
        operation=operation,
    )


def get_token_owner(config: Config) -> TokenOwner:
    """Return the identity behind ``config.github_token``.

    The default workflow token always acts as the GitHub Actions bot and
    cannot call ``/user``.
    """
    if config.is_default_token:
        return TokenOwner(login=GITHUB_ACTIONS_BOT_LOGIN, id=GITHUB_ACTIONS_BOT_ID, type="Bot")
    data = _github_request(config, "GET", "/user", operation="get token owner")
    return TokenOwner(login=data["login"], id=data.get("id"), type=data.get("type", "User"))


def get_user(config: Config, username: str) -> dict[str, object]:
    return _github_request(config, "GET", f"/users/{username}", operation=f"get user {username}")


def get_collaborator_permission(config: Config, repo_slug: str, username: str) -> str:
    """Return ``admin``, ``write``, ``read`` or ``none`` for ``username``."""
    data = _github_request(
        config,
        "GET",
        f"/repos/{repo_slug}/collaborators/{username}/permission",
        operation=f"get permission of {username} on {repo_slug}",
    )
    return data["permission"]


def get_pull_request(config: Config, repo_slug: str, pull_number: int) -> dict[str, object]:
    return _github_request(
        config,
        "GET",
        f"/repos/{repo_slug}/pulls/{pull_number}",
        operation=f"get PR #{pull_number} of {repo_slug}",
    )


def create_issue_comment(config: Config, repo_slug: str, issue_number: int, body: str) -> int:
    """Comment on an issue or PR conversation.  Returns the comment id."""
    data = _github_request(
        config,
        "POST",
        f"/repos/{repo_slug}/issues/{issue_number}/comments",
        json={"body": body},
        operation=f"comment on #{issue_number} of {repo_slug}",
    )
    return data["id"]


def update_issue_comment(config: Config, repo_slug: str, comment_id: int, body: str) -> None:
    _github_request(
        config,
        "PATCH",
        f"/repos/{repo_slug}/issues/comments/{comment_id}",
        json={"body": body},
        operation=f"update comment {comment_id} of {repo_slug}",
    )


def create_review_comment_reply(
    config: Config, repo_slug: str, pull_number: int, comment_id: int, body: str
) -> int:
    """Reply in the thread of a code-level review comment.  Returns the reply id."""
    data = _github_request(
        config,
        "POST",
        f"/repos/{repo_slug}/pulls/{pull_number}/comments/{comment_id}/replies",
        json={"body": body},
        operation=f"reply to review comment {comment_id} of {repo_slug}",
    )
    return data["id"]


def update_review_comment(config: Config, repo_slug: str, comment_id: int, body: str) -> None:
    _github_request(
        config,
        "PATCH",
        f"/repos/{repo_slug}/pulls/comments/{comment_id}",
        json={"body": body},
        operation=f"update review comment {comment_id} of {repo_slug}",
    )


def create_pull_request(
    config: Config,
    repo_slug: str,
    *,
    title: str,
    body: str,
    head: str,
    base: str,
) -> dict[str, object]:
    """Open a pull request from ``head`` into ``base``.

    Returns the PR URL and number.
    """
    payload = {
        "title": title,
        "body": body,
        "head": head,
        "base": base,
    }
    data = _github_request(
        config,
        "POST",
        f"/repos/{repo_slug}/pulls",
        json=payload,
        operation=f"create PR {head} -> {base} in {repo_slug}",
    )
    return {"pr_url": data["html_url"], "pr_number": data["number"]}


def list_check_runs(config: Config, repo_slug: str, ref: str) -> list[dict[str, object]]:
    data = _github_request(
        config,
        "GET",
        f"/repos/{repo_slug}/commits/{ref}/check-runs",
        params={"per_page": 100},
        operation=f"list check runs for {ref} in {repo_slug}",
    )
    return data.get("check_runs", [])


def download_job_logs(config: Config, repo_slug: str, job_id: int) -> str:
    """Return the plain-text log of a workflow job."""
    return _github_request(
        config,
        "GET",
        f"/repos/{repo_slug}/actions/jobs/{job_id}/logs",
        expect_json=False,
        operation=f"download logs of job {job_id} in {repo_slug}",
    )
