"""Application lifecycle events."""

from repo_analyzer.core.events.lifespan import lifespan


__all__ = ["lifespan"]
