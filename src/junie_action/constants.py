"""Global constants for the Junie GitHub Action.

Defaults for configuration, limits and the names of the outputs exchanged
between workflow steps.  Values that operators may want to tune can be
overridden through environment variables.
"""

import os

# Triggers
DEFAULT_TRIGGER_PHRASE = "@junie"
RESOLVE_CONFLICTS_ACTION = "resolve-conflicts"
RESOLVE_CONFLICTS_TRIGGER_PHRASE = "resolve conflicts"

# Branches
WORKING_BRANCH_PREFIX = "junie/"
MAX_BRANCH_NAME_LENGTH = 50
PR_BRANCH_FETCH_DEPTH = 20

# GitHub workflow_dispatch inputs are limited to 20KB; 1KB is reserved for
# the other inputs (action type, PR number, ...).
MAX_INPUT_SIZE = 19000

# GitHub Actions bot, used as token owner for the default workflow token
GITHUB_ACTIONS_BOT_LOGIN = "github-actions[bot]"
GITHUB_ACTIONS_BOT_ID = 41898282

# Endpoints
DEFAULT_GITHUB_API_URL = "https://api.github.com"
DEFAULT_GITHUB_SERVER_URL = "https://github.com"

# GraphQL retry policy
GRAPHQL_MAX_ATTEMPTS = int(os.environ.get("GRAPHQL_MAX_ATTEMPTS", 3))
GRAPHQL_MIN_BACKOFF_S = 1.0
GRAPHQL_MAX_BACKOFF_S = 5.0

# Limits
COMMAND_TIMEOUT_S = int(os.environ.get("COMMAND_TIMEOUT_S", 300))
HTTP_TIMEOUT_S = float(os.environ.get("HTTP_TIMEOUT_S", 10.0))

# MCP
GITHUB_CHECKS_SERVER_NAME = "mcp_github_checks_server"

# Logging
DEFAULT_LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


class OutputVars:
    """Names of the step outputs shared between workflow steps."""

    ACTOR_NAME = "ACTOR_NAME"
    ACTOR_EMAIL = "ACTOR_EMAIL"
    PARSED_CONTEXT = "PARSED_CONTEXT"
    SHOULD_SKIP = "SHOULD_SKIP"
    BASE_BRANCH = "BASE_BRANCH"
    WORKING_BRANCH = "WORKING_BRANCH"
    IS_NEW_BRANCH = "IS_NEW_BRANCH"
    INIT_COMMENT_ID = "INIT_COMMENT_ID"
    JUNIE_JSON_TASK = "EJ_TASK"
    EJ_CLI_TOKEN = "EJ_CLI_TOKEN"
    EJ_AUTH_GITHUB_TOKEN = "EJ_AUTH_GITHUB_TOKEN"
    EJ_MCP_CONFIG = "EJ_MCP_CONFIG"
    ACTION_TO_DO = "ACTION_TO_DO"
    JUNIE_TITLE = "JUNIE_TITLE"
    JUNIE_SUMMARY = "JUNIE_SUMMARY"
    COMMIT_MESSAGE = "COMMIT_MESSAGE"
    PR_TITLE = "PR_TITLE"
    PR_BODY = "PR_BODY"
    PULL_REQUEST_URL = "PULL_REQUEST_URL"
    EXCEPTION = "EXCEPTION"
