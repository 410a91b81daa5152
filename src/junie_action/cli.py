"""Command line entrypoints for the workflow steps.

Each subcommand is one step of the action's composite workflow.  Steps
exchange data through step outputs (written to ``$GITHUB_OUTPUT``) which the
workflow passes to the next step as environment variables.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from collections.abc import Callable

from . import __version__, actions
from .config import Config
from .constants import DEFAULT_LOG_LEVEL, OutputVars
from .context import ExecutionContext, parse_context, read_event_payload
from .git.branch import setup_branch
from .git.repo_ops import head_sha
from .git.runner import GitRunner
from .github import api
from .github.comments import SuccessFeedback, write_finish_feedback_comment, write_initial_feedback_comment
from .junie.results import (
    ActionType,
    build_result_outputs,
    determine_action,
    load_junie_output,
    resolve_results,
)
from .junie.summary import format_summary
from .junie.tasks import prepare_task
from .mcp_config import prepare_mcp_config
from .validation.actor import check_human_actor
from .validation.input_size import validate_input_size
from .validation.permissions import verify_repository_access
from .validation.trigger import detect_trigger

logger = logging.getLogger(__name__)

# Environment variables set by the workflow from earlier step outputs
JUNIE_OUTPUT_ENV = "JSON_JUNIE_OUTPUT"
COMMIT_SHA_ENV = "COMMIT_SHA"
IS_JOB_FAILED_ENV = "IS_JOB_FAILED"


def _env(name: str, default: str = "") -> str:
    return os.environ.get(name) or default


def _require_env(name: str) -> str:
    value = os.environ.get(name)
    if not value:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


def _load_context() -> ExecutionContext:
    return ExecutionContext.from_json(_require_env(OutputVars.PARSED_CONTEXT))


def _git_runner(config: Config) -> GitRunner:
    return GitRunner(secrets=[config.github_token, config.default_token, config.app_token])


def prepare(config: Config) -> int:
    """Validate the event and set up branch, task and MCP config for Junie."""
    actions.add_mask(config.github_token)
    actions.set_output(OutputVars.EJ_AUTH_GITHUB_TOKEN, config.github_token)
    actions.set_output(OutputVars.EJ_CLI_TOKEN, config.app_token)

    token_owner = api.get_token_owner(config)
    payload = read_event_payload(config.event_path)
    context = parse_context(
        config.event_name,
        payload,
        actor=config.actor,
        run_id=config.run_id,
        token_owner=token_owner,
        workflow=config.workflow,
    )

    if context.is_user_initiated:
        # A custom prompt is an explicit request to run
        triggered = bool(config.prompt) or detect_trigger(
            context.to_event_descriptor(), config.trigger_config()
        )
        if not triggered:
            logger.info("No trigger found, skipping remaining steps")
            actions.set_output(OutputVars.SHOULD_SKIP, True)
            return 0
        if not check_human_actor(config, context.actor):
            raise PermissionError(f"Actor {context.actor} is not a human user")
        if not verify_repository_access(config, context.repository.full_name, context.actor):
            raise PermissionError(
                f"Actor {context.actor} does not have write permissions to {context.repository.full_name}"
            )

    actions.set_output(OutputVars.SHOULD_SKIP, False)
    if config.prompt:
        validate_input_size(config.prompt, "prompt")

    if not config.silent_mode:
        init_comment_id = write_initial_feedback_comment(config, context)
        if init_comment_id is not None:
            actions.set_output(OutputVars.INIT_COMMENT_ID, init_comment_id)

    branch = setup_branch(config, context, _git_runner(config))
    actions.set_outputs(
        {
            OutputVars.BASE_BRANCH: branch.base_branch,
            OutputVars.WORKING_BRANCH: branch.working_branch,
            OutputVars.IS_NEW_BRANCH: branch.is_new_branch,
        }
    )

    cli_input = prepare_task(config, context, branch)
    actions.set_output(OutputVars.JUNIE_JSON_TASK, cli_input.to_json())

    mcp_config = prepare_mcp_config(
        github_api_url=config.github_api_url,
        github_token=config.github_token,
        owner=context.repository.owner,
        repo=context.repository.name,
        current_branch=branch.working_branch,
        allowed_mcp_servers=config.allowed_mcp_servers,
    )
    actions.set_outputs(
        {
            OutputVars.EJ_MCP_CONFIG: mcp_config,
            OutputVars.PARSED_CONTEXT: context.to_json(),
            OutputVars.ACTOR_NAME: context.actor,
            OutputVars.ACTOR_EMAIL: context.actor_email,
        }
    )
    return 0


def handle_results(config: Config) -> int:
    """Decide what to do with Junie's changes and export the texts for it."""
    output = load_junie_output(_require_env(JUNIE_OUTPUT_ENV))
    context = _load_context()

    action = determine_action(
        _git_runner(config),
        silent_mode=config.silent_mode,
        init_comment_id=_env(OutputVars.INIT_COMMENT_ID) or None,
        is_new_branch=_env(OutputVars.IS_NEW_BRANCH) == "true",
    )
    results = resolve_results(output, config.junie_working_dir)
    actions.set_outputs(build_result_outputs(action, results.title, results.body, context.entity_number))
    return 0


def create_pr(config: Config) -> int:
    context = _load_context()
    head = _require_env(OutputVars.WORKING_BRANCH)
    base = _require_env(OutputVars.BASE_BRANCH)
    logger.info("Creating PR from %s to %s", head, base)

    pr = api.create_pull_request(
        config,
        context.repository.full_name,
        title=_require_env(OutputVars.PR_TITLE),
        body=_env(OutputVars.PR_BODY),
        head=head,
        base=base,
    )
    logger.info("Successfully created PR #%s: %s", pr["pr_number"], pr["pr_url"])
    actions.set_output(OutputVars.PULL_REQUEST_URL, pr["pr_url"])
    return 0


def summary(config: Config) -> int:
    junie_output = {
        "title": _env(OutputVars.JUNIE_TITLE),
        "summary": _env(OutputVars.JUNIE_SUMMARY),
        "error": _env(OutputVars.EXCEPTION),
    }
    raw = _env(JUNIE_OUTPUT_ENV)
    if raw:
        data = json.loads(raw)
        if data.get("duration_ms"):
            junie_output["duration_ms"] = data["duration_ms"]

    markdown = format_summary(
        junie_output,
        action_to_do=_env(OutputVars.ACTION_TO_DO) or None,
        commit_sha=_env(COMMIT_SHA_ENV) or head_sha(_git_runner(config)),
        pr_url=_env(OutputVars.PULL_REQUEST_URL) or None,
        branch_name=_env(OutputVars.WORKING_BRANCH) or None,
    )
    actions.write_step_summary(markdown)
    return 0


def finish_feedback(config: Config) -> int:
    """Rewrite the initial comment with the run's outcome."""
    init_comment_id = _env(OutputVars.INIT_COMMENT_ID)
    if not init_comment_id:
        logger.info("No initial comment to update")
        return 0

    context = _load_context()
    failed = _env(IS_JOB_FAILED_ENV) == "true"
    success = None
    if not failed:
        success = SuccessFeedback(
            action_to_do=ActionType(_env(OutputVars.ACTION_TO_DO, ActionType.NOTHING.value)),
            pr_link=_env(OutputVars.PULL_REQUEST_URL) or None,
            commit_sha=_env(COMMIT_SHA_ENV) or None,
            junie_title=_env(OutputVars.JUNIE_TITLE) or None,
            junie_summary=_env(OutputVars.JUNIE_SUMMARY) or None,
            working_branch=_env(OutputVars.WORKING_BRANCH) or None,
            base_branch=_env(OutputVars.BASE_BRANCH) or None,
        )
    write_finish_feedback_comment(
        config,
        context,
        int(init_comment_id),
        failed=failed,
        success=success,
        error=_env(OutputVars.EXCEPTION) or None,
    )
    return 0


_STEPS: dict[str, tuple[str, Callable[[Config], int]]] = {
    "prepare": ("Prepare", prepare),
    "handle-results": ("Handle results", handle_results),
    "create-pr": ("Create PR", create_pr),
    "format-summary": ("Format summary", summary),
    "finish-feedback": ("Finish feedback", finish_feedback),
}


def run_step(step_name: str, func: Callable[[Config], int]) -> int:
    """Run one workflow step and turn any exception into a failed step."""
    try:
        config = Config.load_from_env()
        return func(config)
    except Exception as exc:
        logger.debug("%s step failed", step_name, exc_info=True)
        actions.set_failed(f"{step_name} step failed with error: {exc}")
        actions.set_output(OutputVars.EXCEPTION, str(exc))
        return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="junie-action", description="Junie GitHub Action steps")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)
    for name, (step_name, _func) in _STEPS.items():
        sub.add_parser(name, help=f"{step_name} step")
    sub.add_parser("checks-server", help="Run the GitHub checks MCP server over stdio")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    # stderr keeps stdout free for workflow commands and the MCP protocol
    log_level = os.environ.get("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    if args.command == "checks-server":
        from .checks_server import main as checks_server_main

        checks_server_main()
        return 0

    step_name, func = _STEPS[args.command]
    return run_step(step_name, func)


if __name__ == "__main__":
    sys.exit(main())
