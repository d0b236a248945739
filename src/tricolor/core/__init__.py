"""Core framework components for tricolor."""

from tricolor.core.events import Event, EventBus, EventType

__all__ = ["Event", "EventBus", "EventType"]
