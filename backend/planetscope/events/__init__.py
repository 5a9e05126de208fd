"""Pipeline events and their projection into UI state."""

from planetscope.events.projector import SearchStateProjector, apply_event

__all__ = ["SearchStateProjector", "apply_event"]
