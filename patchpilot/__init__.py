"""patchpilot: a GitHub App that reviews pull request patches with an LLM."""

__version__ = "0.1.0"
