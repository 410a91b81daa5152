"""Pytest configuration and fixtures for Junie action tests.

Provides a ready ``Config``, event payload factories and a ``FakeGitRunner``
that records git invocations instead of running them.
"""

from __future__ import annotations

import os

# Module-level defaults are read at import time by junie_action.constants
os.environ.setdefault("GITHUB_TOKEN", "test-github-token")
os.environ.setdefault("LOG_LEVEL", "INFO")

from collections.abc import Sequence
from typing import Any

import pytest

from junie_action.config import Config
from junie_action.context import ExecutionContext, TokenOwner, parse_context


class FakeGitRunner:
    """A fake git runner for testing.

    Every call is recorded in ``calls``.  Results can be scripted per command
    prefix with ``set_result``; unscripted commands succeed with empty output.
    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self._results: list[tuple[tuple[str, ...], dict[str, object]]] = []

    def set_result(self, prefix: Sequence[str], exit_code: int = 0, stdout: str = "", stderr: str = "") -> None:
        self._results.insert(
            0,
            (
                tuple(prefix),
                {
                    "exit_code": exit_code,
                    "stdout": stdout,
                    "stderr": stderr,
                    "duration_ms": 0,
                    "timed_out": False,
                },
            ),
        )

    def run(self, argv: Sequence[str]) -> dict[str, object]:
        self.calls.append(list(argv))
        for prefix, result in self._results:
            if tuple(argv[: len(prefix)]) == prefix:
                return dict(result)
        return {"exit_code": 0, "stdout": "", "stderr": "", "duration_ms": 0, "timed_out": False}

    def check(self, argv: Sequence[str]) -> str:
        from junie_action.errors import GitOperationError

        result = self.run(argv)
        if result["exit_code"] != 0:
            raise GitOperationError(f"git {' '.join(argv)} failed: {result['stderr']}")
        return str(result["stdout"])


@pytest.fixture
def fake_git() -> FakeGitRunner:
    return FakeGitRunner()


@pytest.fixture
def config() -> Config:
    return Config(
        github_token="test-github-token",
        default_token="test-github-token",
        repository="octo-org/widgets",
        run_id="4242",
        event_name="issue_comment",
        actor="alice",
    )


@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch, tmp_path):
    """Keep workflow command files inside the test's temp dir."""
    monkeypatch.setenv("GITHUB_TOKEN", "test-github-token")
    monkeypatch.delenv("OVERRIDE_GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("DEFAULT_WORKFLOW_TOKEN", raising=False)
    monkeypatch.setenv("GITHUB_OUTPUT", str(tmp_path / "github_output"))
    monkeypatch.setenv("GITHUB_STEP_SUMMARY", str(tmp_path / "step_summary"))


def repository_payload() -> dict[str, Any]:
    return {
        "name": "widgets",
        "owner": {"login": "octo-org"},
        "default_branch": "main",
        "full_name": "octo-org/widgets",
    }


def pull_request_payload(
    number: int = 7,
    *,
    state: str = "open",
    merged: bool = False,
    author: str = "bob",
    head: str = "feature/login",
    base: str = "main",
) -> dict[str, Any]:
    return {
        "number": number,
        "state": state,
        "merged": merged,
        "title": "Add login",
        "body": "Implements login",
        "updated_at": "2026-01-02T10:00:00Z",
        "user": {"login": author},
        "head": {"ref": head},
        "base": {"ref": base},
    }


def issue_comment_payload(body: str, *, on_pr: bool = False, number: int = 12) -> dict[str, Any]:
    issue: dict[str, Any] = {"number": number, "title": "Broken build", "body": "It fails"}
    if on_pr:
        issue["pull_request"] = {"url": f"https://api.github.com/repos/octo-org/widgets/pulls/{number}"}
    return {
        "action": "created",
        "issue": issue,
        "comment": {
            "id": 555,
            "body": body,
            "created_at": "2026-01-02T12:00:00Z",
            "user": {"login": "alice"},
        },
        "repository": repository_payload(),
        "sender": {"login": "alice", "id": 1001},
    }


def make_context(
    event_name: str,
    payload: dict[str, Any],
    *,
    actor: str = "alice",
    token_owner: str = "github-actions[bot]",
) -> ExecutionContext:
    payload.setdefault("repository", repository_payload())
    return parse_context(
        event_name,
        payload,
        actor=actor,
        run_id="4242",
        token_owner=TokenOwner(login=token_owner, id=41898282, type="Bot"),
    )


def mock_github_client(mocker, target: str, *, status_code: int = 200, json_data: Any = None, text: str = ""):
    """Patch ``get_github_client`` in ``target`` and return the fake client."""
    mock_response = mocker.MagicMock()
    mock_response.status_code = status_code
    mock_response.json.return_value = json_data
    mock_response.text = text
    mock_response.content = b"" if json_data is None and not text else b"x"
    mock_response.headers = {}

    mock_client = mocker.MagicMock()
    mock_client.request.return_value = mock_response
    mock_client.post.return_value = mock_response
    mock_client.__enter__ = mocker.MagicMock(return_value=mock_client)
    mock_client.__exit__ = mocker.MagicMock(return_value=False)

    mocker.patch(f"{target}.get_github_client", return_value=mock_client)
    return mock_client
