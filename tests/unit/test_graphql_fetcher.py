"""Tests for the retrying GraphQL data fetcher."""

from __future__ import annotations

import copy

import httpx
import pytest

from junie_action.config import Config
from junie_action.errors import GitHubAPIError
from junie_action.github.graphql import GraphQLDataFetcher, backoff_delay, graphql_url


def response(mocker, status_code: int = 200, body: dict | None = None, headers: dict | None = None):
    resp = mocker.MagicMock()
    resp.status_code = status_code
    resp.json.return_value = copy.deepcopy(body or {})
    resp.text = str(body)
    resp.headers = headers or {}
    return resp


@pytest.fixture
def client(mocker):
    mock_client = mocker.MagicMock()
    mock_client.__enter__ = mocker.MagicMock(return_value=mock_client)
    mock_client.__exit__ = mocker.MagicMock(return_value=False)
    mocker.patch("junie_action.github.graphql.get_github_client", return_value=mock_client)
    return mock_client


@pytest.fixture
def sleep(mocker):
    return mocker.patch("junie_action.github.graphql.time.sleep")


ISSUE_BODY = {
    "data": {
        "repository": {
            "issue": {
                "number": 12,
                "title": "Broken build",
                "timelineItems": {
                    "nodes": [
                        {"__typename": "IssueComment", "body": "before", "createdAt": "2026-01-02T11:00:00Z"},
                        {"__typename": "IssueComment", "body": "after", "createdAt": "2026-01-02T13:00:00Z"},
                        {"__typename": "ReferencedEvent", "createdAt": "2026-01-03T00:00:00Z"},
                    ]
                },
            }
        }
    }
}


class TestGraphQLUrl:
    """Tests for the GraphQL endpoint URL."""

    def test_github_com(self) -> None:
        """github.com uses /graphql."""
        assert graphql_url("https://api.github.com") == "https://api.github.com/graphql"

    def test_enterprise_server(self) -> None:
        """GitHub Enterprise Server replaces /api/v3 with /api/graphql."""
        assert graphql_url("https://ghe.example.com/api/v3/") == "https://ghe.example.com/api/graphql"


class TestBackoff:
    """Tests for the retry delay."""

    def test_exponential_and_capped(self) -> None:
        """Delays double from one second up to five."""
        assert [backoff_delay(n) for n in (1, 2, 3, 4, 5)] == [1.0, 2.0, 4.0, 5.0, 5.0]


class TestRetry:
    """Tests for retrying GraphQL requests."""

    def test_success_first_try(self, mocker, config: Config, client, sleep) -> None:
        """A successful request is sent once."""
        client.post.return_value = response(mocker, body=ISSUE_BODY)

        data = GraphQLDataFetcher(config).fetch_issue_data("octo-org", "widgets", 12)

        assert data["issue"]["number"] == 12
        assert client.post.call_count == 1
        sleep.assert_not_called()

    def test_server_error_is_retried(self, mocker, config: Config, client, sleep) -> None:
        """A 5xx response is retried after a delay."""
        client.post.side_effect = [response(mocker, 502), response(mocker, body=ISSUE_BODY)]

        GraphQLDataFetcher(config).fetch_issue_data("octo-org", "widgets", 12)

        assert client.post.call_count == 2
        sleep.assert_called_once_with(1.0)

    def test_network_error_is_retried(self, mocker, config: Config, client, sleep) -> None:
        """Connection errors are retried."""
        client.post.side_effect = [httpx.ConnectError("reset"), response(mocker, body=ISSUE_BODY)]

        GraphQLDataFetcher(config).fetch_issue_data("octo-org", "widgets", 12)

        assert client.post.call_count == 2

    def test_gives_up_after_three_attempts(self, mocker, config: Config, client, sleep) -> None:
        """The last error is raised after three attempts."""
        client.post.return_value = response(mocker, 503)

        with pytest.raises(GitHubAPIError) as excinfo:
            GraphQLDataFetcher(config).fetch_issue_data("octo-org", "widgets", 12)

        assert excinfo.value.status_code == 503
        assert client.post.call_count == 3
        assert [c.args[0] for c in sleep.call_args_list] == [1.0, 2.0]

    @pytest.mark.parametrize("status", [401, 403, 404, 422])
    def test_permanent_errors_are_not_retried(self, mocker, config: Config, client, sleep, status: int) -> None:
        """Auth, not found and validation errors fail at once."""
        client.post.return_value = response(mocker, status)

        with pytest.raises(GitHubAPIError):
            GraphQLDataFetcher(config).fetch_issue_data("octo-org", "widgets", 12)

        assert client.post.call_count == 1
        sleep.assert_not_called()

    def test_rate_limit_403_is_retried(self, mocker, config: Config, client, sleep) -> None:
        """A 403 from an exhausted rate limit is retried."""
        client.post.side_effect = [
            response(mocker, 403, headers={"x-ratelimit-remaining": "0"}),
            response(mocker, body=ISSUE_BODY),
        ]

        GraphQLDataFetcher(config).fetch_issue_data("octo-org", "widgets", 12)

        assert client.post.call_count == 2

    def test_graphql_errors(self, mocker, config: Config, client, sleep) -> None:
        """Rate limited GraphQL errors are retried and others are not."""
        client.post.side_effect = [
            response(mocker, body={"errors": [{"type": "RATE_LIMITED", "message": "slow down"}]}),
            response(mocker, body={"errors": [{"type": "NOT_FOUND", "message": "no such issue"}]}),
        ]

        with pytest.raises(GitHubAPIError, match="no such issue") as excinfo:
            GraphQLDataFetcher(config).fetch_issue_data("octo-org", "widgets", 12)

        assert excinfo.value.status_code == 422
        assert client.post.call_count == 2


class TestTriggerTimeFilter:
    """Tests for the fetched entity data."""

    def test_comments_after_trigger_are_dropped(self, mocker, config: Config, client, sleep) -> None:
        """Comments written after the trigger are left out."""
        client.post.return_value = response(mocker, body=ISSUE_BODY)

        data = GraphQLDataFetcher(config).fetch_issue_data(
            "octo-org", "widgets", 12, trigger_time="2026-01-02T12:00:00Z"
        )

        nodes = data["issue"]["timelineItems"]["nodes"]
        assert [n.get("body") for n in nodes] == ["before", None]

    def test_missing_pull_request(self, mocker, config: Config, client, sleep) -> None:
        """A missing PR is reported as not found."""
        client.post.return_value = response(mocker, body={"data": {"repository": {"pullRequest": None}}})

        with pytest.raises(GitHubAPIError, match="Pull request #7 not found"):
            GraphQLDataFetcher(config).fetch_pull_request_data("octo-org", "widgets", 7)
        assert client.post.call_count == 1
