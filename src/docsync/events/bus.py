"""In-process lifecycle hook registry for the record store."""
import uuid
from collections.abc import Awaitable, Callable

import structlog

from docsync.events.types import LifecycleEvent

logger = structlog.get_logger()

LifecycleHandler = Callable[[LifecycleEvent], Awaitable[None]]


class LifecycleHooks:
    """Ordered set of lifecycle handlers awaited inline by the store.

    Unlike a queued pub/sub bus, dispatch does not return until every
    handler has finished, so pre-save handlers complete before the
    mutation and post-save handlers complete before the store call returns.
    """

    def __init__(self) -> None:
        """Initialize an empty hook registry."""
        self._handlers: dict[str, LifecycleHandler] = {}

    @property
    def subscriber_count(self) -> int:
        """Number of registered handlers."""
        return len(self._handlers)

    def subscribe(self, handler: LifecycleHandler) -> str:
        """Register a handler for every lifecycle event.

        Args:
            handler: Coroutine function receiving each event.

        Returns:
            Subscription id for later removal.
        """
        subscriber_id = str(uuid.uuid4())
        self._handlers[subscriber_id] = handler
        logger.debug("lifecycle_subscriber_added", subscriber_id=subscriber_id)
        return subscriber_id

    def unsubscribe(self, subscriber_id: str) -> None:
        """Remove a handler; unknown ids are ignored.

        Args:
            subscriber_id: Id returned by subscribe().
        """
        if self._handlers.pop(subscriber_id, None) is not None:
            logger.debug("lifecycle_subscriber_removed", subscriber_id=subscriber_id)

    async def dispatch(self, event: LifecycleEvent) -> None:
        """Await every handler in subscription order.

        Args:
            event: Event to deliver. Pre-save handlers may mutate event.data.
        """
        for handler in list(self._handlers.values()):
            await handler(event)
