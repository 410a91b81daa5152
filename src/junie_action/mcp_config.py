"""MCP server configuration handed to the Junie CLI."""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterable

from .constants import GITHUB_CHECKS_SERVER_NAME

logger = logging.getLogger(__name__)


def prepare_mcp_config(
    *,
    github_api_url: str,
    github_token: str,
    owner: str,
    repo: str,
    current_branch: str,
    allowed_mcp_servers: Iterable[str],
) -> str:
    """Return the ``{"mcpServers": {...}}`` JSON for the allowed servers.

    The GitHub checks server runs with the current interpreter so that it
    sees the same installed packages as the action itself.
    """
    mcp_servers: dict[str, object] = {}

    if GITHUB_CHECKS_SERVER_NAME in set(allowed_mcp_servers):
        mcp_servers["github_checks"] = {
            "command": sys.executable,
            "args": ["-m", "junie_action.checks_server"],
            "env": {
                "GITHUB_API_URL": github_api_url,
                "GITHUB_TOKEN": github_token,
                "REPO_OWNER": owner,
                "REPO_NAME": repo,
                "HEAD_SHA": current_branch,
            },
        }
        logger.info("Enabled MCP server: %s", GITHUB_CHECKS_SERVER_NAME)

    return json.dumps({"mcpServers": mcp_servers}, indent=2)
