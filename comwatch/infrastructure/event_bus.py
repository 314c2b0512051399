from collections import defaultdict
from typing import Callable, DefaultDict, List, Optional, Type
from comwatch.domain.events import Event

Handler = Callable[[Event], None]


class EventBus:
    """Synchronous in-process pub/sub for domain events.

    A handler registered for a base class (`Event`, `JobEvent`) also receives
    every subclass. Delivery runs on the publisher's thread, most specific
    subscription first, and handler exceptions propagate to the publisher.
    """

    def __init__(self):
        self._handlers: DefaultDict[Type[Event], List[Handler]] = defaultdict(list)

    def subscribe(self, event_type: Type[Event], handler: Optional[Handler] = None):
        """Registers handler for event_type. Without a handler, returns a decorator."""
        if handler is None:
            def register(func: Handler) -> Handler:
                self._handlers[event_type].append(func)
                return func
            return register
        self._handlers[event_type].append(handler)

    def publish(self, event: Event) -> int:
        """Delivers event and returns how many handlers saw it."""
        delivered = 0
        for cls in type(event).__mro__:
            if not (isinstance(cls, type) and issubclass(cls, Event)):
                continue
            for handler in list(self._handlers.get(cls, ())):
                handler(event)
                delivered += 1
        return delivered
