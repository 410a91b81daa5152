"""HTTP client for the GitHub REST and GraphQL APIs."""

from __future__ import annotations

import httpx

from .. import __version__
from ..config import Config
from ..constants import HTTP_TIMEOUT_S


def get_github_client(config: Config) -> httpx.Client:
    """Return an ``httpx.Client`` bound to ``config.github_api_url``.

    Request paths are relative to the API root so that GitHub Enterprise
    Server (``https://<host>/api/v3``) works unchanged.
    """
    return httpx.Client(
        base_url=config.github_api_url.rstrip("/"),
        headers={
            "Authorization": f"token {config.github_token}",
            "Accept": "application/vnd.github+json",
            "User-Agent": f"junie-github-action/{__version__}",
        },
        timeout=HTTP_TIMEOUT_S,
        follow_redirects=True,
    )
