"""Input size enforcement for agent prompts."""

from __future__ import annotations

import logging

from ..constants import MAX_INPUT_SIZE
from ..errors import InputTooLargeError

logger = logging.getLogger(__name__)


def validate_input_size(text: str, input_name: str = "prompt") -> None:
    """Ensure ``text`` fits in a workflow_dispatch input.

    :param text: prompt or task text to check
    :param input_name: name used in the error message
    :raises InputTooLargeError: if ``text`` is longer than ``MAX_INPUT_SIZE``
    """
    actual_size = len(text or "")
    if actual_size > MAX_INPUT_SIZE:
        message = (
            f'Input "{input_name}" is too large: {actual_size} characters (maximum: {MAX_INPUT_SIZE}). '
            "This limit exists because GitHub workflow_dispatch inputs are limited to 20KB. "
            f"Please reduce the size of your {input_name} and try again."
        )
        logger.error(message)
        raise InputTooLargeError(message, actual_size=actual_size, max_size=MAX_INPUT_SIZE)

    logger.info("Input size validation passed: %d/%d characters", actual_size, MAX_INPUT_SIZE)
