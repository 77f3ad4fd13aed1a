"""In-process domain event publisher.

Services publish the events collected from aggregates after the repository
call that persisted them has committed. Subscribers (the attribute cache,
audit logging) receive every event synchronously, in subscription order.
"""

from collections.abc import Callable, Iterable

import structlog

from shoestore.domain.base import DomainEvent

logger = structlog.get_logger()

EventHandler = Callable[[DomainEvent], None]


class EventPublisher:
    """Fan-out of domain events to subscribed handlers.

    Example usage:
        publisher = EventPublisher()
        publisher.subscribe(cache.handle_event)
        publisher.publish(variant.collect_events())
    """

    def __init__(self) -> None:
        self._handlers: list[EventHandler] = []

    def subscribe(self, handler: EventHandler) -> None:
        """Register a handler for all events."""
        if handler not in self._handlers:
            self._handlers.append(handler)

    def unsubscribe(self, handler: EventHandler) -> None:
        """Remove a previously registered handler."""
        if handler in self._handlers:
            self._handlers.remove(handler)

    def publish(self, events: Iterable[DomainEvent]) -> None:
        """Deliver events to every handler."""
        for event in events:
            logger.debug(
                "Publishing domain event",
                event_type=event.event_type,
                aggregate_id=event.aggregate_id,
                product_id=event.product_id,
            )
            for handler in self._handlers:
                handler(event)
