# services/events.py
"""
Domain events and an in-process event bus.

The invoice service only depends on the EventPublisher protocol. Publishing
is fire-and-forget from the service's point of view: a failing publisher is
logged and never fails the operation that triggered it.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from threading import RLock
from typing import Any, Callable, Dict, List, Protocol

from models.base import utcnow

logger = logging.getLogger(__name__)

INVOICE_CREATED = "invoice.created"
INVOICE_UPDATED = "invoice.updated"
INVOICE_DELETED = "invoice.deleted"
INVOICE_CONFIRMED = "invoice.confirmed"
INVOICE_CANCELLED = "invoice.cancelled"
INVOICE_PAID = "invoice.paid"
PAYMENT_RECEIVED = "payment.received"


class EventPublisher(Protocol):
     def publish(self, event_type: str, payload: Any) -> None:
          ...


@dataclass(frozen=True)
class Event:
     type: str
     payload: Any
     timestamp: datetime = field(default_factory=utcnow)


EventHandler = Callable[[Event], None]


class EventBus:
     """
     Synchronous publish/subscribe bus.

     Handlers run in subscription order on the publishing thread. A handler
     error stops delivery and propagates to the publisher.
     """

     def __init__(self):
          self._handlers: Dict[str, List[EventHandler]] = defaultdict(list)
          self._lock = RLock()

     def subscribe(self, event_type: str, handler: EventHandler) -> None:
          with self._lock:
               self._handlers[event_type].append(handler)

     def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
          with self._lock:
               if handler in self._handlers.get(event_type, []):
                    self._handlers[event_type].remove(handler)

     def publish(self, event_type: str, payload: Any) -> None:
          event = Event(type=event_type, payload=payload)
          with self._lock:
               handlers = list(self._handlers.get(event_type, []))
          for handler in handlers:
               handler(event)


def publish_safely(publisher: EventPublisher, event_type: str, payload: Any) -> bool:
     """Publish and swallow any publisher failure. Returns whether it succeeded."""
     if publisher is None:
          return False
     try:
          publisher.publish(event_type, payload)
          return True
     except Exception:
          logger.exception(f"Failed to publish {event_type} event")
          return False
