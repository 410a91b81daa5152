"""Webhook event parsing.

GitHub delivers one event payload per workflow run.  ``parse_context`` turns
the raw payload into an ``ExecutionContext`` with the handful of fields the
rest of the action needs (entity number, PR flag, actor, repository), and
``ExecutionContext.to_event_descriptor`` narrows it further to the
``EventDescriptor`` consumed by trigger detection.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from .constants import RESOLVE_CONFLICTS_ACTION

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    ISSUE = "issue"
    ISSUE_COMMENT = "issue_comment"
    PULL_REQUEST = "pull_request"
    PULL_REQUEST_REVIEW = "pull_request_review"
    PULL_REQUEST_REVIEW_COMMENT = "pull_request_review_comment"
    PUSH = "push"
    WORKFLOW_DISPATCH = "workflow_dispatch"
    OTHER = "other"


class TextSource(str, Enum):
    TITLE = "title"
    BODY = "body"
    COMMENT = "comment"
    REVIEW = "review"


@dataclass(frozen=True)
class TextField:
    source: TextSource
    text: str | None


@dataclass(frozen=True)
class EventDescriptor:
    """Normalized view of a webhook delivery used for trigger detection."""

    kind: EventKind
    actor_login: str
    text_fields: tuple[TextField, ...] = ()
    action: str | None = None
    assignee_login: str | None = None
    label_name: str | None = None


@dataclass(frozen=True)
class TokenOwner:
    """Identity behind the token the action authenticates with."""

    login: str
    id: int | None = None
    type: str = "User"


@dataclass(frozen=True)
class Repository:
    owner: str
    name: str
    default_branch: str = "main"

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


# Events caused by people interacting with issues and PRs; these go through
# trigger detection and actor checks.
USER_TRIGGERED_EVENTS = frozenset(
    {
        "push",
        "issues",
        "issue_comment",
        "pull_request",
        "pull_request_review",
        "pull_request_review_comment",
    }
)

# Events started by automation or schedules.
SYSTEM_TRIGGERED_EVENTS = frozenset(
    {
        "workflow_dispatch",
        "repository_dispatch",
        "schedule",
        "workflow_run",
        "check_suite",
    }
)


@dataclass
class ExecutionContext:
    """Everything a step needs to know about the event that started the run."""

    event_name: str
    kind: EventKind
    actor: str
    run_id: str
    repository: Repository
    token_owner: TokenOwner
    payload: dict[str, Any] = field(default_factory=dict)
    action: str | None = None
    actor_email: str = ""
    workflow: str = "Junie"
    entity_number: int | None = None
    is_pr: bool = False

    @property
    def is_user_initiated(self) -> bool:
        return self.event_name in USER_TRIGGERED_EVENTS

    @property
    def is_review_comment(self) -> bool:
        return self.kind is EventKind.PULL_REQUEST_REVIEW_COMMENT

    def to_event_descriptor(self) -> EventDescriptor:
        """Extract the text fields and assignment details of this event."""
        payload = self.payload
        fields: list[TextField] = []
        assignee_login = None
        label_name = None

        if self.kind is EventKind.ISSUE:
            issue = payload.get("issue") or {}
            fields = [
                TextField(TextSource.TITLE, issue.get("title")),
                TextField(TextSource.BODY, issue.get("body")),
            ]
            assignee_login = (payload.get("assignee") or {}).get("login")
            label_name = (payload.get("label") or {}).get("name")
        elif self.kind is EventKind.PULL_REQUEST:
            pr = payload.get("pull_request") or {}
            fields = [
                TextField(TextSource.TITLE, pr.get("title")),
                TextField(TextSource.BODY, pr.get("body")),
            ]
        elif self.kind in (EventKind.ISSUE_COMMENT, EventKind.PULL_REQUEST_REVIEW_COMMENT):
            fields = [TextField(TextSource.COMMENT, (payload.get("comment") or {}).get("body"))]
        elif self.kind is EventKind.PULL_REQUEST_REVIEW:
            fields = [TextField(TextSource.REVIEW, (payload.get("review") or {}).get("body"))]

        return EventDescriptor(
            kind=self.kind,
            actor_login=self.actor,
            text_fields=tuple(fields),
            action=self.action,
            assignee_login=assignee_login,
            label_name=label_name,
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["kind"] = self.kind.value
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExecutionContext:
        values = dict(data)
        values["kind"] = EventKind(values["kind"])
        values["repository"] = Repository(**values["repository"])
        values["token_owner"] = TokenOwner(**values["token_owner"])
        return cls(**values)

    @classmethod
    def from_json(cls, raw: str) -> ExecutionContext:
        return cls.from_dict(json.loads(raw))


# Each builder returns (kind, entity_number, is_pr) for its event.
_EntityFields = tuple[EventKind, "int | None", bool]


def _issues(payload: dict[str, Any]) -> _EntityFields:
    return EventKind.ISSUE, payload["issue"]["number"], False


def _issue_comment(payload: dict[str, Any]) -> _EntityFields:
    issue = payload["issue"]
    return EventKind.ISSUE_COMMENT, issue["number"], bool(issue.get("pull_request"))


def _pull_request(payload: dict[str, Any]) -> _EntityFields:
    return EventKind.PULL_REQUEST, payload["pull_request"]["number"], True


def _pull_request_review(payload: dict[str, Any]) -> _EntityFields:
    return EventKind.PULL_REQUEST_REVIEW, payload["pull_request"]["number"], True


def _pull_request_review_comment(payload: dict[str, Any]) -> _EntityFields:
    return EventKind.PULL_REQUEST_REVIEW_COMMENT, payload["pull_request"]["number"], True


def _push(payload: dict[str, Any]) -> _EntityFields:
    return EventKind.PUSH, None, False


def _workflow_dispatch(payload: dict[str, Any]) -> _EntityFields:
    inputs = payload.get("inputs") or {}
    if inputs.get("action") == RESOLVE_CONFLICTS_ACTION and inputs.get("prNumber"):
        return EventKind.WORKFLOW_DISPATCH, int(inputs["prNumber"]), True
    return EventKind.WORKFLOW_DISPATCH, None, False


def _check_suite(payload: dict[str, Any]) -> _EntityFields:
    prs = (payload.get("check_suite") or {}).get("pull_requests") or []
    if prs:
        return EventKind.OTHER, prs[0]["number"], True
    return EventKind.OTHER, None, False


def _workflow_run(payload: dict[str, Any]) -> _EntityFields:
    prs = (payload.get("workflow_run") or {}).get("pull_requests") or []
    if prs:
        return EventKind.OTHER, prs[0]["number"], True
    return EventKind.OTHER, None, False


def _no_entity(payload: dict[str, Any]) -> _EntityFields:
    return EventKind.OTHER, None, False


_CONTEXT_BUILDERS: dict[str, Callable[[dict[str, Any]], _EntityFields]] = {
    "issues": _issues,
    "issue_comment": _issue_comment,
    "pull_request": _pull_request,
    "pull_request_target": _pull_request,
    "pull_request_review": _pull_request_review,
    "pull_request_review_comment": _pull_request_review_comment,
    "push": _push,
    "workflow_dispatch": _workflow_dispatch,
    "repository_dispatch": _no_entity,
    "schedule": _no_entity,
    "workflow_run": _workflow_run,
    "check_suite": _check_suite,
}


def actor_email(actor: str, payload: dict[str, Any]) -> str:
    """Return the GitHub noreply address used to attribute commits."""
    user_id = (payload.get("sender") or {}).get("id")
    return f"{user_id}+{actor}@users.noreply.github.com"


def parse_context(
    event_name: str,
    payload: dict[str, Any],
    *,
    actor: str,
    run_id: str,
    token_owner: TokenOwner,
    workflow: str = "Junie",
) -> ExecutionContext:
    """Build an ``ExecutionContext`` for ``event_name``.

    Raises ``ValueError`` for event types the action does not handle.
    """
    builder = _CONTEXT_BUILDERS.get(event_name)
    if builder is None:
        raise ValueError(f"Unsupported event type: {event_name}")

    kind, entity_number, is_pr = builder(payload)

    repo = payload.get("repository") or {}
    repository = Repository(
        owner=(repo.get("owner") or {}).get("login", ""),
        name=repo.get("name", ""),
        default_branch=repo.get("default_branch") or "main",
    )

    # pull_request_target is handled exactly like pull_request downstream
    if event_name == "pull_request_target":
        event_name = "pull_request"

    context = ExecutionContext(
        event_name=event_name,
        kind=kind,
        action=payload.get("action"),
        actor=actor,
        actor_email=actor_email(actor, payload),
        run_id=run_id,
        workflow=workflow,
        repository=repository,
        token_owner=token_owner,
        payload=payload,
        entity_number=entity_number,
        is_pr=is_pr,
    )
    logger.info(
        "Parsed %s event (entity: %s, is PR: %s, actor: %s)",
        event_name,
        entity_number,
        is_pr,
        actor,
    )
    return context


def read_event_payload(event_path: str | None) -> dict[str, Any]:
    """Load the webhook payload GitHub writes to ``GITHUB_EVENT_PATH``."""
    if not event_path:
        raise RuntimeError("GITHUB_EVENT_PATH is not set; cannot read the event payload")
    path = Path(event_path)
    if not path.is_file():
        raise RuntimeError(f"Event payload file not found: {event_path}")
    return json.loads(path.read_text(encoding="utf-8"))
