"""Tests for webhook event parsing."""

from __future__ import annotations

import json

import pytest
from conftest import issue_comment_payload, make_context, pull_request_payload

from junie_action.context import (
    EventKind,
    ExecutionContext,
    TextSource,
    read_event_payload,
)


def test_issue_comment_on_issue() -> None:
    """An issue comment targets the issue and builds the noreply email."""
    context = make_context("issue_comment", issue_comment_payload("@junie fix it"))
    assert context.kind is EventKind.ISSUE_COMMENT
    assert context.entity_number == 12
    assert not context.is_pr
    assert context.is_user_initiated
    assert context.actor_email == "1001+alice@users.noreply.github.com"


def test_issue_comment_on_pull_request() -> None:
    """A comment on a PR conversation is a PR context."""
    context = make_context("issue_comment", issue_comment_payload("@junie", on_pr=True))
    assert context.is_pr
    assert context.entity_number == 12


def test_pull_request_target_is_folded_into_pull_request() -> None:
    """pull_request_target is handled as pull_request."""
    context = make_context("pull_request_target", {"action": "opened", "pull_request": pull_request_payload()})
    assert context.event_name == "pull_request"
    assert context.kind is EventKind.PULL_REQUEST
    assert context.is_pr
    assert context.is_user_initiated


def test_workflow_dispatch_resolve_conflicts_is_pr_context() -> None:
    """A resolve-conflicts dispatch targets the given PR."""
    payload = {"inputs": {"action": "resolve-conflicts", "prNumber": "31"}}
    context = make_context("workflow_dispatch", payload)
    assert context.is_pr
    assert context.entity_number == 31
    assert not context.is_user_initiated


def test_plain_workflow_dispatch_has_no_entity() -> None:
    """A plain dispatch has no issue or PR."""
    context = make_context("workflow_dispatch", {"inputs": {}})
    assert context.entity_number is None
    assert not context.is_pr


def test_check_suite_with_pull_request() -> None:
    """A check suite listing a PR targets that PR."""
    payload = {"check_suite": {"pull_requests": [{"number": 5}]}}
    context = make_context("check_suite", payload)
    assert context.is_pr
    assert context.entity_number == 5


def test_unsupported_event() -> None:
    """Unknown events are rejected."""
    with pytest.raises(ValueError, match="Unsupported event type: deployment"):
        make_context("deployment", {})


def test_issue_descriptor_fields() -> None:
    """Issue events expose title, body, action and assignee."""
    payload = {
        "action": "assigned",
        "issue": {"number": 3, "title": "T", "body": None},
        "assignee": {"login": "junie-bot"},
    }
    descriptor = make_context("issues", payload).to_event_descriptor()
    assert descriptor.kind is EventKind.ISSUE
    assert descriptor.action == "assigned"
    assert descriptor.assignee_login == "junie-bot"
    assert [f.source for f in descriptor.text_fields] == [TextSource.TITLE, TextSource.BODY]
    assert descriptor.text_fields[1].text is None


def test_review_descriptor_uses_review_body() -> None:
    """Review events expose the review body."""
    payload = {
        "action": "submitted",
        "pull_request": pull_request_payload(),
        "review": {"id": 9, "body": "@junie please"},
    }
    descriptor = make_context("pull_request_review", payload).to_event_descriptor()
    assert [(f.source, f.text) for f in descriptor.text_fields] == [(TextSource.REVIEW, "@junie please")]


def test_json_round_trip_keeps_types() -> None:
    """A context survives the trip through a step output."""
    context = make_context("issue_comment", issue_comment_payload("@junie"))
    restored = ExecutionContext.from_json(context.to_json())
    assert restored == context
    assert restored.kind is EventKind.ISSUE_COMMENT
    assert restored.repository.full_name == "octo-org/widgets"


def test_read_event_payload(tmp_path) -> None:
    """The payload file is read and missing files are reported."""
    path = tmp_path / "event.json"
    path.write_text(json.dumps({"action": "opened"}), encoding="utf-8")
    assert read_event_payload(str(path)) == {"action": "opened"}

    with pytest.raises(RuntimeError, match="Event payload file not found"):
        read_event_payload(str(tmp_path / "missing.json"))
    with pytest.raises(RuntimeError, match="GITHUB_EVENT_PATH is not set"):
        read_event_payload(None)
