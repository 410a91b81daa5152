"""GraphQL-based data fetcher.

Fetches everything the prompt formatter needs about an issue or a pull
request in a single request instead of a handful of REST calls.  Requests
are retried with exponential backoff on transient failures (network errors,
rate limiting, server errors) but not on permanent ones (401, 403, 404, 422).
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from ..config import Config
from ..constants import GRAPHQL_MAX_ATTEMPTS, GRAPHQL_MAX_BACKOFF_S, GRAPHQL_MIN_BACKOFF_S
from ..errors import GitHubAPIError
from .auth import get_github_client
from .queries import ISSUE_QUERY, PULL_REQUEST_QUERY

logger = logging.getLogger(__name__)


def graphql_url(api_url: str) -> str:
    """Return the GraphQL endpoint matching a REST API URL.

    GitHub Enterprise Server serves REST under ``/api/v3`` and GraphQL under
    ``/api/graphql``.
    """
    base = api_url.rstrip("/")
    if base.endswith("/api/v3"):
        return base[: -len("/v3")] + "/graphql"
    return base + "/graphql"


def backoff_delay(attempt: int) -> float:
    """Seconds to wait after the ``attempt``-th failure (1-based)."""
    return min(GRAPHQL_MIN_BACKOFF_S * (2 ** (attempt - 1)), GRAPHQL_MAX_BACKOFF_S)


def _filter_after(nodes: list[dict[str, Any]], trigger_time: str | None) -> list[dict[str, Any]]:
    # ISO 8601 UTC timestamps from GitHub compare correctly as strings
    if not trigger_time:
        return nodes
    return [
        node
        for node in nodes
        if node.get("__typename") != "IssueComment" or (node.get("createdAt") or "") <= trigger_time
    ]


class GraphQLDataFetcher:
    """Fetch issue and PR data with a single GraphQL query each."""

    def __init__(self, config: Config, max_attempts: int = GRAPHQL_MAX_ATTEMPTS) -> None:
        self.config = config
        self.max_attempts = max_attempts
        self.url = graphql_url(config.github_api_url)

    def _execute_once(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        try:
            with get_github_client(self.config) as client:
                resp = client.post(self.url, json={"query": query, "variables": variables})
        except httpx.HTTPError as exc:
            raise GitHubAPIError(f"GraphQL request failed: {exc}", operation="graphql") from exc

        if resp.status_code == 403 and resp.headers.get("x-ratelimit-remaining") == "0":
            raise GitHubAPIError("GraphQL rate limit exceeded", status_code=429, operation="graphql")
        if not 200 <= resp.status_code < 300:
            raise GitHubAPIError(
                f"GraphQL error {resp.status_code}: {resp.text}",
                status_code=resp.status_code,
                operation="graphql",
            )

        body = resp.json()
        errors = body.get("errors") or []
        if errors:
            messages = "; ".join(str(err.get("message", err)) for err in errors)
            rate_limited = any(err.get("type") == "RATE_LIMITED" for err in errors)
            raise GitHubAPIError(
                f"GraphQL query returned errors: {messages}",
                status_code=429 if rate_limited else 422,
                operation="graphql",
            )
        return body["data"]

    def execute(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        """Run ``query`` and return its ``data``, retrying transient failures."""
        for attempt in range(1, self.max_attempts + 1):
            try:
                return self._execute_once(query, variables)
            except GitHubAPIError as exc:
                if not exc.retryable:
                    logger.error("Non-retryable GraphQL error: %s", exc)
                    raise
                retries_left = self.max_attempts - attempt
                logger.warning(
                    "GraphQL attempt %d failed. %d retries left: %s", attempt, retries_left, exc
                )
                if retries_left == 0:
                    raise
                time.sleep(backoff_delay(attempt))
        raise AssertionError("unreachable")

    def fetch_pull_request_data(
        self, owner: str, repo: str, pull_number: int, trigger_time: str | None = None
    ) -> dict[str, Any]:
        """Return ``{"pullRequest": {...}}`` for PR ``pull_number``.

        Conversation comments created after ``trigger_time`` are dropped so
        that later edits cannot change what the agent is asked to do.
        """
        data = self.execute(PULL_REQUEST_QUERY, {"owner": owner, "repo": repo, "number": pull_number})
        pull_request = data["repository"]["pullRequest"]
        if pull_request is None:
            raise GitHubAPIError(
                f"Pull request #{pull_number} not found in {owner}/{repo}",
                status_code=404,
                operation="graphql",
            )
        timeline = pull_request.get("timelineItems") or {"nodes": []}
        timeline["nodes"] = _filter_after(timeline.get("nodes") or [], trigger_time)
        pull_request["timelineItems"] = timeline
        return {"pullRequest": pull_request}

    def fetch_issue_data(
        self, owner: str, repo: str, issue_number: int, trigger_time: str | None = None
    ) -> dict[str, Any]:
        """Return ``{"issue": {...}}`` for issue ``issue_number``."""
        data = self.execute(ISSUE_QUERY, {"owner": owner, "repo": repo, "number": issue_number})
        issue = data["repository"]["issue"]
        if issue is None:
            raise GitHubAPIError(
                f"Issue #{issue_number} not found in {owner}/{repo}",
                status_code=404,
                operation="graphql",
            )
        timeline = issue.get("timelineItems") or {"nodes": []}
        timeline["nodes"] = _filter_after(timeline.get("nodes") or [], trigger_time)
        issue["timelineItems"] = timeline
        return {"issue": issue}
