"""GitHub Actions workflow commands.

Step outputs are appended to the file named by ``GITHUB_OUTPUT`` and the job
summary to ``GITHUB_STEP_SUMMARY``.  Outside of Actions (local runs) both
fall back to stdout.
"""

from __future__ import annotations

import logging
import os
import uuid

logger = logging.getLogger(__name__)


def _to_str(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def set_output(name: str, value: object) -> None:
    """Set a step output for the following workflow steps.

    Multi-line values are written with a random heredoc delimiter.
    """
    text = _to_str(value)
    output_file = os.environ.get("GITHUB_OUTPUT")
    if not output_file:
        print(f"{name}={text}")
        return
    with open(output_file, "a", encoding="utf-8") as f:
        if "\n" in text:
            delimiter = f"ghadelimiter_{uuid.uuid4().hex}"
            f.write(f"{name}<<{delimiter}\n{text}\n{delimiter}\n")
        else:
            f.write(f"{name}={text}\n")


def set_outputs(outputs: dict[str, object]) -> None:
    for name, value in outputs.items():
        set_output(name, value)


def write_step_summary(markdown: str) -> None:
    """Append Markdown to the job summary."""
    summary_file = os.environ.get("GITHUB_STEP_SUMMARY")
    if not summary_file:
        print(f"SUMMARY: {markdown}")
        return
    with open(summary_file, "a", encoding="utf-8") as f:
        f.write(f"{markdown}\n")


def add_mask(value: str | None) -> None:
    """Hide ``value`` in the workflow log."""
    if value:
        print(f"::add-mask::{value}")


def set_failed(message: str) -> None:
    """Report ``message`` as an error annotation on the run."""
    logger.error(message)
    # Annotation properties must be single line
    escaped = message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
    print(f"::error::{escaped}")
