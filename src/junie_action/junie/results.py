"""Handling of the Junie CLI result.

After the agent has run, the working tree is inspected to decide what the
workflow does next: open a PR, commit to the existing branch, push commits
the agent already made, only report back in the comment, or nothing.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from ..constants import OutputVars
from ..git.repo_ops import has_changed_files, has_unpushed_commits
from ..git.runner import GitRunner
from ..github.templates import commit_message, pr_body, pr_title

logger = logging.getLogger(__name__)

DEFAULT_RESULT_TITLE = "Junie finished task"


class ActionType(str, Enum):
    WRITE_COMMENT = "WRITE_COMMENT"
    CREATE_PR = "CREATE_PR"
    COMMIT_CHANGES = "COMMIT_CHANGES"
    PUSH = "PUSH"
    NOTHING = "NOTHING"


@dataclass
class JunieOutput:
    task_name: str
    result: str
    errors: list[str] = field(default_factory=list)


@dataclass
class JunieResults:
    title: str
    body: str


def load_junie_output(raw: str) -> JunieOutput:
    """Parse the CLI's JSON output.

    :raises RuntimeError: if the agent reported errors
    """
    data = json.loads(raw)
    errors = data.get("errors") or []
    if errors:
        raise RuntimeError("Junie run failed with errors: " + "\n".join(str(e) for e in errors))
    return JunieOutput(
        task_name=data.get("taskName") or "",
        result=data.get("result") or "",
        errors=[],
    )


def decide_action(
    *,
    silent_mode: bool,
    has_changes: bool,
    has_unpushed: bool,
    init_comment_id: str | int | None,
    is_new_branch: bool,
) -> ActionType:
    if silent_mode:
        logger.info("Silent mode enabled - no git operations will be performed")
        return ActionType.NOTHING
    if not has_changes and not has_unpushed and init_comment_id:
        logger.info("No changes and no unpushed commits but has comment ID - will write comment")
        return ActionType.WRITE_COMMENT
    if not has_changes and has_unpushed:
        logger.info("No changes but has unpushed commits - will push")
        return ActionType.PUSH
    if has_changes and is_new_branch:
        logger.info("Changes found and working in new branch - will create PR")
        return ActionType.CREATE_PR
    if has_changes:
        logger.info("Changes found and working in existing branch - will commit directly")
        return ActionType.COMMIT_CHANGES
    logger.info("No specific action matched - do nothing")
    return ActionType.NOTHING


def determine_action(
    runner: GitRunner,
    *,
    silent_mode: bool,
    init_comment_id: str | int | None,
    is_new_branch: bool,
) -> ActionType:
    """Inspect the working tree and pick the follow-up action."""
    if silent_mode:
        return decide_action(
            silent_mode=True,
            has_changes=False,
            has_unpushed=False,
            init_comment_id=init_comment_id,
            is_new_branch=is_new_branch,
        )
    action = decide_action(
        silent_mode=False,
        has_changes=has_changed_files(runner),
        has_unpushed=has_unpushed_commits(runner),
        init_comment_id=init_comment_id,
        is_new_branch=is_new_branch,
    )
    logger.info("Action to do: %s", action.value)
    return action


def build_result_outputs(
    action: ActionType, title: str, body: str, issue_id: int | None = None
) -> dict[str, str]:
    """Return the step outputs to export for ``action``."""
    outputs = {
        OutputVars.ACTION_TO_DO: action.value,
        OutputVars.JUNIE_TITLE: title,
        OutputVars.JUNIE_SUMMARY: body,
    }
    if action in (ActionType.CREATE_PR, ActionType.COMMIT_CHANGES, ActionType.PUSH):
        outputs[OutputVars.COMMIT_MESSAGE] = commit_message(title, issue_id)
    if action is ActionType.CREATE_PR:
        outputs[OutputVars.PR_TITLE] = pr_title(title)
        outputs[OutputVars.PR_BODY] = pr_body(body, issue_id)
    return outputs


_HEADING = re.compile(r"^###\s*")


def parse_results_file(working_dir: str) -> JunieResults:
    """Read ``.matterhorn/out/success.md`` written by the agent.

    The title is the last ``###`` heading; the body is the whole file with
    each line stripped.
    """
    path = Path(working_dir) / ".matterhorn" / "out" / "success.md"
    if not path.is_file():
        logger.error("File not found: %s", path)
        raise RuntimeError("Junie results not found")

    title = ""
    lines = []
    for line in path.read_text(encoding="utf-8").split("\n"):
        stripped = line.strip()
        if stripped.startswith("###"):
            title = _HEADING.sub("", stripped)
        lines.append(stripped)
    return JunieResults(title=title or DEFAULT_RESULT_TITLE, body="\n".join(lines))


def resolve_results(output: JunieOutput, working_dir: str) -> JunieResults:
    """Return the title and summary to report for ``output``.

    The CLI's ``taskName`` and ``result`` win.  Missing values are taken from
    the agent's ``success.md`` in ``working_dir``; without that file the
    default title and an empty summary are used.
    """
    if output.task_name and output.result:
        return JunieResults(title=output.task_name, body=output.result)
    try:
        from_file = parse_results_file(working_dir)
    except RuntimeError:
        logger.warning("Junie output has no title or summary and no results file was written")
        from_file = JunieResults(title=DEFAULT_RESULT_TITLE, body="")
    return JunieResults(title=output.task_name or from_file.title, body=output.result or from_file.body)
