"""Configuration loading for the Junie GitHub Action.

This module loads environment variables from a `.env` file using
`python-dotenv` and populates a `Config` object.  The object is assembled
once per step and passed explicitly to every operation; nothing else in the
package reads the process environment for settings.

Required variables:
- one of OVERRIDE_GITHUB_TOKEN, DEFAULT_WORKFLOW_TOKEN or GITHUB_TOKEN

Optional variables with defaults:
- GITHUB_API_URL (default: 'https://api.github.com')
- GITHUB_SERVER_URL (default: 'https://github.com')
- TRIGGER_PHRASE (default: '@junie')
- ASSIGNEE_TRIGGER, LABEL_TRIGGER, PROMPT (default: empty)
- BASE_BRANCH (default: repository default branch)
- RESOLVE_CONFLICTS, CREATE_NEW_BRANCH_FOR_PR, SILENT_MODE (default: 'false')
- ATTACH_GITHUB_CONTEXT_TO_CUSTOM_PROMPT (default: 'true')
- ALLOWED_MCP_SERVERS (comma separated, default: none)
- JUNIE_WORKING_DIR (default: '.'), where the agent writes .matterhorn/out/success.md
- LOG_LEVEL (default: 'INFO')
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from .constants import (
    DEFAULT_GITHUB_API_URL,
    DEFAULT_GITHUB_SERVER_URL,
    DEFAULT_LOG_LEVEL,
    DEFAULT_TRIGGER_PHRASE,
)
from .validation.trigger import TriggerConfig


def _flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() == "true"


@dataclass
class Config:
    """Configuration values loaded from the environment."""

    github_token: str
    default_token: str = ""
    github_api_url: str = DEFAULT_GITHUB_API_URL
    github_server_url: str = DEFAULT_GITHUB_SERVER_URL
    repository: str = ""
    run_id: str = ""
    workflow: str = "Junie"
    event_name: str = ""
    event_path: str | None = None
    actor: str = ""
    trigger_phrase: str = DEFAULT_TRIGGER_PHRASE
    assignee_trigger: str = ""
    label_trigger: str = ""
    prompt: str = ""
    base_branch: str | None = None
    resolve_conflicts: bool = False
    create_new_branch_for_pr: bool = False
    silent_mode: bool = False
    attach_github_context_to_custom_prompt: bool = True
    junie_working_dir: str = "."
    app_token: str = ""
    allowed_mcp_servers: list[str] = field(default_factory=list)
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def is_default_token(self) -> bool:
        """True when running with the workflow's own GITHUB_TOKEN."""
        return self.github_token == self.default_token

    @property
    def owner(self) -> str:
        return self.repository.split("/", 1)[0]

    @property
    def repo_name(self) -> str:
        return self.repository.split("/", 1)[-1]

    def trigger_config(self) -> TriggerConfig:
        return TriggerConfig(
            phrase=self.trigger_phrase,
            assignee_trigger=self.assignee_trigger or None,
            label_trigger=self.label_trigger or None,
        )

    @classmethod
    def load_from_env(cls) -> Config:
        """Load configuration from environment variables.

        The `.env` file is loaded if present.  Raises `RuntimeError` if no
        GitHub token is available.
        """
        load_dotenv()

        default_token = os.getenv("DEFAULT_WORKFLOW_TOKEN") or os.getenv("GITHUB_TOKEN") or ""
        github_token = os.getenv("OVERRIDE_GITHUB_TOKEN") or default_token
        if not github_token:
            raise RuntimeError(
                "Missing required environment variables: "
                "OVERRIDE_GITHUB_TOKEN, DEFAULT_WORKFLOW_TOKEN or GITHUB_TOKEN"
            )

        allowed_str = os.getenv("ALLOWED_MCP_SERVERS", "")
        allowed_mcp_servers = [name.strip() for name in allowed_str.split(",") if name.strip()]

        trigger_phrase = os.getenv("TRIGGER_PHRASE")
        if trigger_phrase is None:
            trigger_phrase = DEFAULT_TRIGGER_PHRASE

        return cls(
            github_token=github_token,
            default_token=default_token,
            github_api_url=os.getenv("GITHUB_API_URL") or DEFAULT_GITHUB_API_URL,
            github_server_url=os.getenv("GITHUB_SERVER_URL") or DEFAULT_GITHUB_SERVER_URL,
            repository=os.getenv("GITHUB_REPOSITORY", ""),
            run_id=os.getenv("GITHUB_RUN_ID", ""),
            workflow=os.getenv("GITHUB_WORKFLOW") or "Junie",
            event_name=os.getenv("GITHUB_EVENT_NAME", ""),
            event_path=os.getenv("GITHUB_EVENT_PATH"),
            actor=os.getenv("GITHUB_ACTOR", ""),
            trigger_phrase=trigger_phrase,
            assignee_trigger=os.getenv("ASSIGNEE_TRIGGER", ""),
            label_trigger=os.getenv("LABEL_TRIGGER", ""),
            prompt=os.getenv("PROMPT", ""),
            base_branch=os.getenv("BASE_BRANCH") or None,
            resolve_conflicts=_flag("RESOLVE_CONFLICTS"),
            create_new_branch_for_pr=_flag("CREATE_NEW_BRANCH_FOR_PR"),
            silent_mode=_flag("SILENT_MODE"),
            attach_github_context_to_custom_prompt=_flag(
                "ATTACH_GITHUB_CONTEXT_TO_CUSTOM_PROMPT", default=True
            ),
            junie_working_dir=os.getenv("JUNIE_WORKING_DIR") or ".",
            app_token=os.getenv("APP_TOKEN", ""),
            allowed_mcp_servers=allowed_mcp_servers,
            log_level=os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL),
        )
