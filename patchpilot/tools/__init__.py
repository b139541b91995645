"""GitHub API, diff and path matching tools."""
