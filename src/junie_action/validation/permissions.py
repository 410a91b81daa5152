"""Repository permission check for the triggering actor."""

from __future__ import annotations

import logging

from ..config import Config
from ..errors import GitHubAPIError
from ..github import api

logger = logging.getLogger(__name__)

_WRITE_LEVELS = frozenset({"admin", "write"})


def verify_repository_access(config: Config, repo_full_name: str, actor: str) -> bool:
    """Return ``True`` if ``actor`` may trigger runs on ``repo_full_name``.

    GitHub Apps (logins ending in ``[bot]``) are trusted.  Everyone else needs
    ``write`` or ``admin`` permission.

    :raises RuntimeError: if the actor is not a collaborator or the permission
        lookup fails
    """
    logger.info("Checking permissions for actor: %s", actor)
    if actor.endswith("[bot]"):
        logger.info("Actor is a GitHub App: %s", actor)
        return True

    try:
        permission = api.get_collaborator_permission(config, repo_full_name, actor)
    except GitHubAPIError as exc:
        logger.error("Failed to check permissions: %s", exc)
        if exc.status_code == 404:
            raise RuntimeError(
                f'Failed to check permissions: User "{actor}" is not a collaborator on '
                f"{repo_full_name}. Only repository collaborators with write access can "
                "trigger Junie."
            ) from exc
        raise RuntimeError(
            f'Failed to check permissions for "{actor}" on {repo_full_name}. '
            "This could be due to:\n"
            "• GitHub API rate limits\n"
            "• Insufficient token permissions (needs 'repo' scope)\n"
            "• Network connectivity issues\n"
            f"Original error: {exc}"
        ) from exc

    logger.info("Permission level retrieved: %s", permission)
    if permission in _WRITE_LEVELS:
        logger.info("Actor has write access: %s", permission)
        return True

    logger.warning(
        'Actor "%s" has insufficient permissions: %s (requires "write" or "admin" access to %s)',
        actor,
        permission,
        repo_full_name,
    )
    return False
