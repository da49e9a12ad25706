"""Aggregates for the hooks bounded context."""

from hooks.domain.aggregates.project_hook import ProjectHook

__all__ = ["ProjectHook"]
