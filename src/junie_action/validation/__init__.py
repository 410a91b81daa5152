"""Validation of triggers and inputs."""

from .input_size import validate_input_size
from .trigger import TriggerConfig, detect_trigger, escape_regexp, mentions_resolve_conflicts

__all__ = [
    "TriggerConfig",
    "detect_trigger",
    "escape_regexp",
    "mentions_resolve_conflicts",
    "validate_input_size",
]
