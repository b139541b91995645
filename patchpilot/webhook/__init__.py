"""GitHub webhook parsing and signature validation."""
