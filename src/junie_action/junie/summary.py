"""Markdown job summary for the GitHub Actions run page."""

from __future__ import annotations

from typing import Any

_ACTION_EMOJI = {
    "COMMIT_CHANGES": "💾",
    "CREATE_PR": "🔀",
    "PUSH": "⬆️",
    "WRITE_COMMENT": "💬",
}


def format_summary(
    junie_output: dict[str, Any],
    action_to_do: str | None = None,
    commit_sha: str | None = None,
    pr_url: str | None = None,
    branch_name: str | None = None,
) -> str:
    """Return a Markdown report of a Junie run.

    ``junie_output`` may carry ``title``, ``summary``, ``error`` and
    ``duration_ms``; missing keys are left out of the report.
    """
    lines = ["## 🤖 Junie Execution Report\n\n"]

    if junie_output.get("title"):
        lines.append(f"### {junie_output['title']}\n\n")
    if junie_output.get("summary"):
        lines.append(f"{junie_output['summary']}\n\n")
    if junie_output.get("error"):
        lines.append(f"### ❌ Error\n\n```\n{junie_output['error']}\n```\n\n")

    lines.append("---\n\n### 📊 Execution Details\n\n")
    lines.append("| Detail | Value |\n")
    lines.append("|--------|-------|\n")

    if action_to_do:
        emoji = _ACTION_EMOJI.get(action_to_do, "📝")
        lines.append(f"| Action | {emoji} {action_to_do} |\n")
    if branch_name:
        lines.append(f"| Branch | `{branch_name}` |\n")
    if commit_sha:
        lines.append(f"| Commit | `{commit_sha[:7]}` |\n")
    if pr_url:
        lines.append(f"| Pull Request | [View PR]({pr_url}) |\n")
    if junie_output.get("duration_ms"):
        lines.append(f"| Duration | {junie_output['duration_ms'] / 1000:.1f}s |\n")

    lines.append("\n")
    return "".join(lines)
