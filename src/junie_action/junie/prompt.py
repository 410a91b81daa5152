"""Prompt text for the agent, built from GraphQL issue and PR data.

Every prompt wraps the user's request in ``<issue_description>`` tags and
appends the surrounding context: the issue or PR description, changed
files, review comments with their diff hunks, and the conversation timeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

_ASK = "could you help me in implementing the necessary changes to meet the specified requirements?"


@dataclass(frozen=True)
class CommentData:
    body: str
    author: str


def _login(node: dict[str, Any] | None) -> str:
    return ((node or {}).get("author") or {}).get("login") or "ghost"


def _indent(text: str | None) -> str:
    return "\n".join(f"  {line}" for line in (text or "").split("\n"))


class GitHubPromptFormatter:
    """Format agent prompts for each kind of triggering event."""

    def _pr_context(self, pr: dict[str, Any]) -> str:
        return (
            f"PR #{pr['number']}: {pr['title']}\n"
            f"Author: @{_login(pr)}\n"
            f"State: {pr['state']}\n"
            f"Branch: {pr['headRefName']} -> {pr['baseRefName']}\n"
            f"Additions: +{pr['additions']} / Deletions: -{pr['deletions']}\n"
            f"Changed Files: {pr['changedFiles']}\n"
            f"Commits: {pr['commits']['totalCount']}"
        )

    def _changed_files(self, files: list[dict[str, Any]]) -> str:
        if not files:
            return "No files changed"
        return "\n".join(
            f"- {f['path']} ({f['changeType'].lower()}) +{f['additions']}/-{f['deletions']}"
            for f in files
        )

    def present_review(self, review: dict[str, Any]) -> str:
        comments = (review.get("comments") or {}).get("nodes") or []
        if not comments:
            return ""

        texts = []
        for comment in sorted(comments, key=lambda c: c.get("createdAt") or ""):
            text = (
                f"- {comment.get('createdAt')} - {comment.get('path')}:{comment.get('position') or ''}"
                f" - Review comment by @{_login(comment)}\n"
            )
            if comment.get("diffHunk"):
                text += f"  ````\n{_indent(comment['diffHunk'])}\n  ````\n"
            text += _indent(comment.get("body"))
            texts.append(text)
        return "\n\n".join(texts)

    def _reviews(self, reviews: list[dict[str, Any]]) -> str:
        texts = [text for text in (self.present_review(r) for r in reviews) if text.strip()]
        if not texts:
            return "No review comments found."
        return "\n\n".join(texts)

    def _timeline(self, nodes: list[dict[str, Any]]) -> str:
        events = []
        for node in nodes:
            typename = node.get("__typename")
            created_at = node.get("createdAt")
            if typename == "IssueComment":
                events.append(f"* {created_at} - Comment from @{_login(node)}:\n{_indent(node.get('body'))}")
            elif typename == "ReferencedEvent":
                oid = (node.get("commit") or {}).get("oid")
                if oid:
                    events.append(f"* {created_at} - Commit: {oid[:7]}")
            elif typename == "CrossReferencedEvent":
                source = node.get("source")
                if source:
                    what = "PR" if source.get("__typename") == "PullRequest" else "Issue"
                    events.append(
                        f"* {created_at} - Reference to {what} #{source.get('number')}: {source.get('title')}"
                    )
        return "\n\n".join(events)

    def present_pull_request(self, pr: dict[str, Any]) -> str:
        return (
            f"### PULL REQUEST CONTEXT:\n{self._pr_context(pr)}\n\n"
            f"### PULL REQUEST: {pr['title']} [{pr['state']}]\n{pr.get('body') or ''}\n\n"
            f"### CHANGED FILES:\n{self._changed_files(pr['files']['nodes'])}\n\n"
            f"### PULL REQUEST REVIEWS:\n{self._reviews(pr['reviews']['nodes'])}\n\n"
            f"### PULL REQUEST TIMELINE:\n{self._timeline(pr['timelineItems']['nodes'])}"
        )

    def present_issue(self, issue: dict[str, Any]) -> str:
        return (
            f"### ISSUE:\n{issue['title']} [{issue['state']}]\n\n{issue.get('body') or ''}\n\n"
            f"### ISSUE TIMELINE:\n{self._timeline(issue['timelineItems']['nodes'])}"
        )

    def _mention(self, author: str, where: str, what: str, request: str, base_prompt: str | None) -> str:
        return (
            f"User @{author} mentioned you in the {where}.\n"
            f"Given the following user {what} (aka user issue description) `<issue_description>`, {_ASK}\n"
            "<issue_description>\n"
            f"{base_prompt or ''}\n\n"
            f"{request}\n"
            "</issue_description>"
        )

    def format_pull_request_comment_prompt(
        self, pr_data: dict[str, Any], comment: CommentData, base_prompt: str | None = None
    ) -> str:
        pr = pr_data["pullRequest"]
        prompt = self._mention(
            comment.author,
            f"comment on pull request '#{pr['number']} {pr['title']}'",
            "comment",
            comment.body,
            base_prompt,
        )
        return f"{prompt}\n\n\nSee below the whole PR for information:\n{self.present_pull_request(pr)}"

    def format_pull_request_review_comment_prompt(
        self, pr_data: dict[str, Any], comment: CommentData, base_prompt: str | None = None
    ) -> str:
        pr = pr_data["pullRequest"]
        prompt = self._mention(
            comment.author,
            f"review comment on pull request '#{pr['number']} {pr['title']}'",
            "comment",
            comment.body,
            base_prompt,
        )
        return f"{prompt}\n\n\nSee below the whole PR for information:\n{self.present_pull_request(pr)}"

    def format_pull_request_review_prompt(
        self, pr_data: dict[str, Any], review: dict[str, Any], base_prompt: str | None = None
    ) -> str:
        pr = pr_data["pullRequest"]
        prompt = self._mention(
            _login(review),
            f"review on pull request '#{pr['number']} {pr['title']}'",
            "review",
            self.present_review(review),
            base_prompt,
        )
        return f"{prompt}\n\n\nSee below the whole PR for information:\n{self.present_pull_request(pr)}"

    def format_issue_comment_prompt(
        self, issue_data: dict[str, Any], comment: CommentData, base_prompt: str | None = None
    ) -> str:
        issue = issue_data["issue"]
        prompt = self._mention(
            comment.author,
            f"comment on GitHub issue '#{issue['number']} {issue['title']}'",
            "comment",
            comment.body,
            base_prompt,
        )
        return f"{prompt}\n\n\nSee below the whole GitHub issue for information:\n{self.present_issue(issue)}"

    def format_issue_prompt(self, issue_data: dict[str, Any], base_prompt: str | None = None) -> str:
        return (
            f"Given the following issue description `<issue_description>`, {_ASK}\n"
            "<issue_description>\n"
            f"{base_prompt or ''}\n\n"
            f"{self.present_issue(issue_data['issue'])}\n"
            "</issue_description>"
        )

    def format_pull_request_prompt(self, pr_data: dict[str, Any], base_prompt: str | None = None) -> str:
        return (
            f"Given the following pull request `<issue_description>`, {_ASK}\n"
            "<issue_description>\n"
            f"{base_prompt or ''}\n\n"
            f"{self.present_pull_request(pr_data['pullRequest'])}\n"
            "</issue_description>"
        )
