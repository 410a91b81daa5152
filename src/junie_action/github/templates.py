"""Templates for comments, pull requests and commit messages."""

from __future__ import annotations

INIT_COMMENT_BODY = "Hey, it's Junie by JetBrains! I started working..."

SUCCESS_FEEDBACK_COMMENT = "Junie is successful finished!"


def create_job_run_link(server_url: str, owner: str, repo: str, run_id: str) -> str:
    job_run_url = f"{server_url.rstrip('/')}/{owner}/{repo}/actions/runs/{run_id}"
    return f"[View job run]({job_run_url})"


def create_comment_body(job_run_link: str) -> str:
    return f"{INIT_COMMENT_BODY}\n\n{job_run_link}"


def create_pr_link(server_url: str, repo_full_name: str, base_branch: str, working_branch: str) -> str:
    """Return the compare URL used to open a PR by hand."""
    return f"{server_url.rstrip('/')}/{repo_full_name}/compare/{base_branch}...{working_branch}"


def pr_title(junie_title: str) -> str:
    return f"[Junie]: {junie_title}"


def pr_body(junie_body: str, issue_id: int | None = None) -> str:
    """Return the body of a pull request opened for Junie's changes.

    When the work was started from an issue, a ``Fixes: #N`` line links the
    PR to it so that merging closes the issue.
    """
    issue_line = f"- 🔗 **Issue:** Fixes: #{issue_id}" if issue_id else ""
    return (
        "\n"
        " ## 📌 Hey! This PR was made for you with Junie, the coding agent by JetBrains"
        " **Early Access Preview**\n"
        "\n"
        "It's still learning, developing, and might make mistakes. Please make sure you"
        " review the changes before you accept them.\n"
        "We'd love your feedback. Join our Discord to share bugs and ideas:"
        " [here](https://jb.gg/junie/github).\n"
        "\n"
        f"{issue_line}\n"
        "\n"
        "### 📊 Junie Summary:\n"
        f"{junie_body}\n"
    )


def commit_message(junie_title: str, issue_id: int | None = None) -> str:
    prefix = f"[issue-{issue_id}]\n\n" if issue_id else ""
    return f"{prefix}{junie_title}"


def error_feedback_comment(details: str, job_link: str) -> str:
    return f"Junie is failed!\n\nDetails: {details}\n\n{job_link}\n"


def pr_created_feedback_comment(pr_link: str) -> str:
    return f"{SUCCESS_FEEDBACK_COMMENT}\n PR link: {pr_link}"


def manual_pr_feedback_comment(create_pr_url: str) -> str:
    return (
        f"{SUCCESS_FEEDBACK_COMMENT}\n\n"
        f"You can create a PR manually: [Create Pull Request]({create_pr_url})"
    )


def commit_pushed_feedback_comment(commit_sha: str, junie_title: str, junie_body: str) -> str:
    return f"{SUCCESS_FEEDBACK_COMMENT}\n\n {junie_title}\n{junie_body} Commit sha: {commit_sha}"


def success_feedback_comment_with_result(junie_title: str, junie_body: str) -> str:
    return f"{SUCCESS_FEEDBACK_COMMENT}\n\nResult: {junie_title} \n {junie_body}"
