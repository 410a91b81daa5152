"""Trigger detection.

Decides whether an event should start Junie.  Three independent paths are
checked in order: the issue was assigned to the configured assignee, the
issue was labeled with the configured label, or one of the event's text
fields mentions the trigger phrase as a standalone token.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from ..constants import DEFAULT_TRIGGER_PHRASE, RESOLVE_CONFLICTS_TRIGGER_PHRASE
from ..context import EventDescriptor, EventKind, TextSource

logger = logging.getLogger(__name__)

_REGEXP_SPECIAL = re.compile(r"[.*+?^${}()|\[\]\\]")

# The phrase may not follow a word character and must end a token.  Trailing
# sentence punctuation is allowed only when it closes the token, so
# "cc:@junie, hi" matches while "email@junie.com" and "user@junie-test" do not.
_BEFORE = r"(?<!\w)"
_AFTER = r"(?=[.,!?;:]*(?:[\s)\]}\"'`]|$))"


@dataclass(frozen=True)
class TriggerConfig:
    phrase: str = DEFAULT_TRIGGER_PHRASE
    assignee_trigger: str | None = None
    label_trigger: str | None = None


def escape_regexp(text: str) -> str:
    """Backslash-escape regular expression metacharacters in ``text``.

    Only ``. * + ? ^ $ { } ( ) | [ ] \\`` are escaped; ``@``, ``/`` and
    other characters pass through untouched.
    """
    return _REGEXP_SPECIAL.sub(lambda m: "\\" + m.group(0), text)


def build_trigger_pattern(phrase: str) -> re.Pattern[str]:
    return re.compile(_BEFORE + escape_regexp(phrase) + _AFTER, re.IGNORECASE)


def _assignee_matches(event: EventDescriptor, config: TriggerConfig) -> bool:
    if event.kind is not EventKind.ISSUE or event.action != "assigned":
        return False
    if not config.assignee_trigger:
        return False
    trigger_user = config.assignee_trigger[1:] if config.assignee_trigger.startswith("@") else config.assignee_trigger
    if event.assignee_login and event.assignee_login == trigger_user:
        logger.info("Issue assigned to trigger user '%s'", trigger_user)
        return True
    return False


def _label_matches(event: EventDescriptor, config: TriggerConfig) -> bool:
    if event.action != "labeled" or not config.label_trigger:
        return False
    if event.label_name is not None and event.label_name == config.label_trigger:
        logger.info("Issue labeled with trigger label '%s'", config.label_trigger)
        return True
    return False


def detect_trigger(event: EventDescriptor, config: TriggerConfig) -> bool:
    """Return ``True`` if ``event`` should activate the automation.

    Never raises for incomplete events: missing text, assignee or label
    simply means that path does not match.
    """
    if _assignee_matches(event, config):
        return True
    if _label_matches(event, config):
        return True

    if config.phrase:
        pattern = build_trigger_pattern(config.phrase)
        for text_field in event.text_fields:
            if pattern.search(text_field.text or ""):
                logger.info("Trigger phrase '%s' found in %s", config.phrase, text_field.source.value)
                return True

    logger.info("No trigger was met for %s event", event.kind.value)
    return False


def mentions_resolve_conflicts(event: EventDescriptor) -> bool:
    """Return ``True`` if a comment or review asks to resolve conflicts."""
    for text_field in event.text_fields:
        if text_field.source not in (TextSource.COMMENT, TextSource.REVIEW):
            continue
        if RESOLVE_CONFLICTS_TRIGGER_PHRASE in (text_field.text or ""):
            return True
    return False
