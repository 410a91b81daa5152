"""MCP stdio server exposing failed GitHub checks to the agent.

The server offers a single tool, ``get_pr_failed_checks_info``, which lists
the failed check runs of the working branch and returns the relevant lines
of their logs.  It is configured entirely through environment variables set
by ``prepare_mcp_config``.
"""

from __future__ import annotations

import logging
import os
import re
import sys
from dataclasses import dataclass
from typing import Any

from mcp.server.fastmcp import FastMCP

from .config import Config
from .constants import DEFAULT_LOG_LEVEL, MAX_INPUT_SIZE
from .errors import GitHubAPIError
from .github import api

logger = logging.getLogger(__name__)

REQUIRED_ENV = ("REPO_OWNER", "REPO_NAME", "HEAD_SHA", "GITHUB_TOKEN", "GITHUB_API_URL")

_TIMESTAMP = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d+Z\s*")
_JOB_ID = re.compile(r"/job/(\d+)")
_GRADLE_FAILED_TASK = re.compile(r"Task\s+:[\w:-]+.*FAILED")
_ASSERTION_FAILED = re.compile(r"Assertion.*failed", re.IGNORECASE)


@dataclass
class FailedCheckInfo:
    check_name: str
    output: str


def extract_job_id_from_url(details_url: str | None, repo_full_name: str) -> int | None:
    """Return the workflow job id from a check run URL of ``repo_full_name``."""
    if not details_url or repo_full_name not in details_url:
        return None
    match = _JOB_ID.search(details_url)
    return int(match.group(1)) if match else None


def clear_timestamps(log_lines: list[str]) -> list[str]:
    return [_TIMESTAMP.sub("", line) for line in log_lines]


def extract_relevant_info(log_lines: list[str]) -> str:
    """Keep only the lines that explain a failure.

    Recognizes Maven ``[ERROR]`` lines, Kotlin ``e:`` compiler errors, Gradle
    failed tasks (kept up to the ``FAILURE:`` line), ``##[error]`` workflow
    annotations and common test failure markers.
    """
    relevant: list[str] = []
    inside_failed_task = False

    for line in log_lines:
        if line.startswith("[ERROR]") or line.startswith("e:"):
            relevant.append(line)
            continue
        if _GRADLE_FAILED_TASK.search(line):
            inside_failed_task = True
            relevant.append(line)
            continue
        if inside_failed_task:
            relevant.append(line)
            if "FAILURE:" in line:
                inside_failed_task = False
            continue
        if "##[error]" in line:
            relevant.append(line)
            continue
        if (
            "FAILED" in line
            or "Assertion error" in line
            or _ASSERTION_FAILED.search(line)
            or line.startswith("Error:")
            or "exit code 1" in line
        ):
            relevant.append(line)

    return "\n".join(relevant).strip()


def extract_check_run_log(config: Config, repo_full_name: str, check_run: dict[str, Any]) -> str | None:
    output_text = (check_run.get("output") or {}).get("text")
    job_id = extract_job_id_from_url(check_run.get("html_url"), repo_full_name)
    if job_id is None:
        return output_text or None

    try:
        log_text = api.download_job_logs(config, repo_full_name, job_id)
    except GitHubAPIError as exc:
        logger.warning("Could not download logs of job %s: %s", job_id, exc)
        if output_text:
            return extract_relevant_info(output_text.split("\n")) or None
        return None

    return extract_relevant_info(clear_timestamps(str(log_text).split("\n"))) or None


def extract_failed_checks_info(
    config: Config, repo_full_name: str, ref: str, max_length: int = MAX_INPUT_SIZE
) -> tuple[list[FailedCheckInfo], str]:
    """Return the failed checks of ``ref`` and their combined, truncated output."""
    check_runs = api.list_check_runs(config, repo_full_name, ref)
    failed = [run for run in check_runs if run.get("conclusion") == "failure"]

    infos = []
    for run in failed:
        output = extract_check_run_log(config, repo_full_name, run)
        if output:
            infos.append(FailedCheckInfo(check_name=run.get("name", ""), output=output))

    combined = "\n\n".join(f"[Check name] {info.check_name}\n[Check output]\n{info.output}" for info in infos)
    return infos, combined[:max_length]


def get_pr_failed_checks_info() -> str:
    """Get detailed information about failed checks for a Pull Request, including extracted error logs."""
    config = Config(github_token=os.environ["GITHUB_TOKEN"], github_api_url=os.environ["GITHUB_API_URL"])
    repo_full_name = f"{os.environ['REPO_OWNER']}/{os.environ['REPO_NAME']}"
    try:
        infos, combined = extract_failed_checks_info(config, repo_full_name, os.environ["HEAD_SHA"])
    except GitHubAPIError as exc:
        logger.error("Failed to collect check results: %s", exc)
        return f"Error: {exc}"
    if not infos:
        return "No failed checks found"
    return combined


def main() -> None:
    """Entrypoint for the GitHub checks MCP server."""
    # stdout carries the MCP protocol
    logging.basicConfig(
        level=getattr(logging, DEFAULT_LOG_LEVEL, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    missing = [name for name in REQUIRED_ENV if not os.environ.get(name)]
    if missing:
        logger.error("Missing required environment variables: %s", ", ".join(missing))
        sys.exit(1)

    mcp = FastMCP("GitHub Checks Server")
    mcp.add_tool(get_pr_failed_checks_info, name="get_pr_failed_checks_info")
    logger.info("Starting GitHub checks MCP server for %s/%s", os.environ["REPO_OWNER"], os.environ["REPO_NAME"])
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
