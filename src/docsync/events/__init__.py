"""Record lifecycle events and hook dispatch."""
from docsync.events.bus import LifecycleHandler, LifecycleHooks
from docsync.events.types import (
    RECORD_MODEL,
    LifecycleEvent,
    LifecycleEventType,
)

__all__ = [
    "RECORD_MODEL",
    "LifecycleEvent",
    "LifecycleEventType",
    "LifecycleHandler",
    "LifecycleHooks",
]
