"""Top‑level package for the Junie GitHub Action glue.

This package turns GitHub webhook events into tasks for the Junie coding
agent: it decides whether a run should start, prepares the working branch,
builds the agent task and reports results back to GitHub.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
