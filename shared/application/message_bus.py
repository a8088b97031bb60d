"""
Message Bus

Routes committed domain events to the handlers other apps subscribe.
Bookings publish, notifications subscribe, neither imports the other.
"""

from typing import Callable, Dict, List, Type
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


class MessageBus:
    """
    Event bus: multiple handlers per event type (1:N)
    """

    def __init__(self):
        self._event_handlers: Dict[Type[DomainEvent], List[EventHandler]] = {}

    def register_event_handler(self, event_type: Type[DomainEvent], handler: EventHandler):
        """
        Register an event handler

        Registering the same handler twice for one event type is a no-op, so
        AppConfig.ready() may run more than once without duplicating work.
        """
        handlers = self._event_handlers.setdefault(event_type, [])
        if handler in handlers:
            return
        handlers.append(handler)
        logger.debug("Registered event handler %s for %s", handler.__name__, event_type.__name__)

    def subscribe(self, *event_types: Type[DomainEvent]):
        """Decorator form of register_event_handler"""
        def decorator(handler: EventHandler) -> EventHandler:
            for event_type in event_types:
                self.register_event_handler(event_type, handler)
            return handler
        return decorator

    def handlers_for(self, event_type: Type[DomainEvent]) -> List[EventHandler]:
        return list(self._event_handlers.get(event_type, []))

    def publish_events(self, events: List[DomainEvent]):
        """
        Publish domain events

        All registered handlers for each event type will be called.
        Errors in handlers are logged but don't stop other handlers.
        """
        for event in events:
            event_type = type(event)
            handlers = self._event_handlers.get(event_type, [])

            if not handlers:
                logger.debug("No handlers registered for event %s", event_type.__name__)
                continue

            logger.info("Publishing event: %s (ID: %s)", event_type.__name__, event.event_id)

            for handler in handlers:
                try:
                    handler(event)
                except Exception:
                    logger.error(
                        "Error in event handler %s for event %s",
                        handler.__name__,
                        event_type.__name__,
                        exc_info=True,
                    )

    def clear(self):
        self._event_handlers.clear()


# Global message bus instance
message_bus = MessageBus()
