"""Explicit, forward-only state machine for a single setup run."""

__all__: list[str] = []
