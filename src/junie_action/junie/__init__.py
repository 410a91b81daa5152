"""Junie CLI integration: task preparation, prompts and result handling."""
