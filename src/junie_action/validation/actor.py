"""Human actor check.

Runs triggered by bots are rejected to prevent automation loops where one
workflow's comment starts another workflow.
"""

from __future__ import annotations

import logging
import re

from ..config import Config
from ..github import api

logger = logging.getLogger(__name__)

_BOT_SUFFIX = re.compile(r"\[bot\]$")


def check_human_actor(config: Config, actor: str) -> bool:
    """Return ``True`` if ``actor`` is a GitHub user of type ``User``.

    Lookup failures are logged and treated as "not human".
    """
    try:
        user = api.get_user(config, actor)
    except Exception as exc:
        logger.error(
            "Failed to verify actor information for %r. This could be due to "
            "GitHub API rate limits, insufficient token permissions or network "
            "connectivity issues. Original error: %s",
            actor,
            exc,
        )
        return False

    actor_type = user.get("type")
    logger.info("Actor type: %s", actor_type)
    if actor_type != "User":
        bot_name = _BOT_SUFFIX.sub("", actor.lower())
        logger.error(
            "Workflow initiated by non-human actor: %s (type: %s). Junie can only be "
            "triggered by human users. For automated workflows use workflow_dispatch "
            "or scheduled events.",
            bot_name,
            actor_type,
        )
        return False

    logger.info("Verified human actor: %s", actor)
    return True
