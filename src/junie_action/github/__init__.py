"""GitHub API integration."""

from .auth import get_github_client
from .graphql import GraphQLDataFetcher
from .templates import commit_message, pr_body, pr_title

__all__ = [
    "get_github_client",
    "GraphQLDataFetcher",
    "commit_message",
    "pr_body",
    "pr_title",
]
