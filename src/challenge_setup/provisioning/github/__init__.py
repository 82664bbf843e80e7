"""GitHub-backed hosting client."""
